"""Client for the prediction endpoints.

Creation resolves a model name to its latest version and submits the job;
the directory operations (get, list, cancel) are single round trips. All of
them hand back ``Prediction`` entities bound to the same transport.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import quote

import structlog

from ..common.http import ReplicateHTTPClient, parse_record
from ..models.client import ModelClient
from .prediction import Prediction
from .schemas import CreatePredictionRequest, PredictionRecord, PredictionRecordPage

logger = structlog.get_logger("predictions")


@dataclass
class PredictionPage:
    """One page of predictions.

    ``next`` and ``previous`` are opaque cursors; pass one to
    ``PredictionClient.list`` to fetch that page explicitly.
    """
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[Prediction] = field(default_factory=list)


class PredictionClient:
    """Create, fetch, list and cancel predictions.

    Parameters
    - http: Shared authenticated transport
    - models: Version resolver; defaults to a ``ModelClient`` on ``http``
    """

    def __init__(self, http: ReplicateHTTPClient, models: Optional[ModelClient] = None):
        self.http = http
        self.models = models or ModelClient(http)

    async def create(
        self,
        owner: str,
        name: str,
        input: Any,
        stream: bool = False
    ) -> Prediction:
        """Create a prediction against the latest version of ``owner/name``.

        Two sequential round trips: resolve the latest version, then submit.

        Raises
        - ``NotFoundError`` when the model has no versions (nothing submitted)
        """
        version = await self.models.resolve_latest_version(owner, name)
        return await self.create_from_version(version, input, stream=stream)

    async def create_from_version(
        self,
        version: str,
        input: Any,
        stream: bool = False
    ) -> Prediction:
        """Create a prediction against a known version id."""
        body = CreatePredictionRequest(version=version, input=input, stream=stream)
        data = await self.http.request(
            "POST",
            "predictions",
            operation="predictions.create",
            json=body.model_dump(),
            expected=(200, 201),
        )
        record = parse_record(PredictionRecord, data)

        self.http.metrics.record_prediction_created(record.model)
        logger.info(
            "Prediction created",
            prediction_id=record.id,
            model=record.model,
            version=record.version,
            status=record.status.value,
            stream=stream
        )
        return Prediction(record, self.http, stream_requested=stream)

    async def get(self, prediction_id: str) -> Prediction:
        """Fetch a prediction by id."""
        data = await self.http.request(
            "GET",
            f"predictions/{quote(prediction_id, safe='')}",
            operation="predictions.get"
        )
        return Prediction(parse_record(PredictionRecord, data), self.http)

    async def list(self, cursor: Optional[str] = None) -> PredictionPage:
        """Fetch one page of predictions, newest first.

        Cursors are never followed automatically.
        """
        data = await self.http.request(
            "GET", cursor or "predictions", operation="predictions.list"
        )
        page = parse_record(PredictionRecordPage, data)
        return PredictionPage(
            next=page.next,
            previous=page.previous,
            results=[Prediction(record, self.http) for record in page.results],
        )

    async def cancel(self, prediction_id: str) -> Prediction:
        """Cancel a prediction by id; the response is the updated record."""
        data = await self.http.request(
            "POST",
            f"predictions/{quote(prediction_id, safe='')}/cancel",
            operation="predictions.cancel"
        )
        prediction = Prediction(parse_record(PredictionRecord, data), self.http)
        logger.info("Prediction cancel requested", prediction_id=prediction.id, status=prediction.status.value)
        return prediction
