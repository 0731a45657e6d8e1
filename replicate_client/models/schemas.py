"""Wire records for the model endpoints."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class ModelVersion(BaseModel):
    """An immutable, addressable build of a model."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str
    created_at: str
    cog_version: Optional[str] = None
    openapi_schema: Optional[Any] = None


class ModelVersionPage(BaseModel):
    """One page of a model's versions, newest first."""

    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[ModelVersion] = []


class Model(BaseModel):
    """All details available for a particular model."""

    model_config = ConfigDict(protected_namespaces=())

    url: str
    owner: str
    name: str
    description: Optional[str] = None
    visibility: str
    github_url: Optional[str] = None
    paper_url: Optional[str] = None
    license_url: Optional[str] = None
    run_count: int = 0
    cover_image_url: Optional[str] = None
    default_example: Optional[Any] = None
    latest_version: Optional[ModelVersion] = None


class ModelPage(BaseModel):
    """One page of publicly and privately available models."""

    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[Model] = []
