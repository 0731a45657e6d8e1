"""Client for the model and model-version endpoints.

Covers model lookup, version listing and deletion, and the latest-version
resolver the prediction factory relies on. Every call is one authenticated
round trip through ``ReplicateHTTPClient``.
"""

from urllib.parse import quote

import structlog

from ..common.errors import NotFoundError
from ..common.http import ReplicateHTTPClient, parse_record
from .schemas import Model, ModelPage, ModelVersion, ModelVersionPage

logger = structlog.get_logger("models")


def _model_path(owner: str, name: str) -> str:
    return f"models/{quote(owner, safe='')}/{quote(name, safe='')}"


class ModelClient:
    """A client for interacting with ``models`` endpoints."""

    def __init__(self, http: ReplicateHTTPClient):
        self.http = http

    async def get(self, owner: str, name: str) -> Model:
        """Retrieve details for a specific model."""
        data = await self.http.request("GET", _model_path(owner, name), operation="models.get")
        return parse_record(Model, data)

    async def get_models(self) -> ModelPage:
        """Retrieve the first page of all publicly and privately available models."""
        data = await self.http.request("GET", "models", operation="models.list")
        return parse_record(ModelPage, data)

    async def list_versions(self, owner: str, name: str) -> ModelVersionPage:
        """Retrieve the list of available versions of a specific model."""
        data = await self.http.request(
            "GET",
            f"{_model_path(owner, name)}/versions",
            operation="models.versions.list"
        )
        return parse_record(ModelVersionPage, data)

    async def get_specific_version(self, owner: str, name: str, version_id: str) -> ModelVersion:
        """Retrieve details for a specific model version."""
        data = await self.http.request(
            "GET",
            f"{_model_path(owner, name)}/versions/{quote(version_id, safe='')}",
            operation="models.versions.get"
        )
        return parse_record(ModelVersion, data)

    async def delete_version(self, owner: str, name: str, version_id: str) -> None:
        """Delete a specific model version."""
        await self.http.request(
            "DELETE",
            f"{_model_path(owner, name)}/versions/{quote(version_id, safe='')}",
            operation="models.versions.delete",
            expected=(200, 202, 204),
        )
        logger.info("Model version deleted", owner=owner, name=name, version=version_id)

    async def get_latest_version(self, owner: str, name: str) -> ModelVersion:
        """Retrieve details for the latest version of a specific model.

        Raises
        - ``NotFoundError`` when the model has no versions
        """
        versions = await self.list_versions(owner, name)
        if not versions.results:
            raise NotFoundError(f"no versions found for {owner}/{name}")
        return versions.results[0]

    async def resolve_latest_version(self, owner: str, name: str) -> str:
        """Map ``owner/name`` to the identifier of its latest version."""
        version = await self.get_latest_version(owner, name)
        logger.debug("Resolved latest version", owner=owner, name=name, version=version.id)
        return version.id
