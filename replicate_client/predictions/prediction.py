"""The prediction entity handed back to callers.

A ``Prediction`` holds one frozen ``PredictionRecord`` snapshot. Reading a
field never performs I/O; ``reload`` and ``cancel`` fetch a fresh snapshot
and swap it in whole, so no field from an older snapshot can survive.
"""

import asyncio
from typing import Any, Optional

import structlog

from ..common.errors import InvalidRequestError
from ..common.http import ReplicateHTTPClient, parse_record
from .schemas import PredictionRecord, PredictionStatus, PredictionUrls
from .streaming import EventStream

logger = structlog.get_logger("predictions")


class Prediction:
    """One inference job, in flight or finished.

    Parameters
    - record: Snapshot as reported by the service
    - http: Transport used for reload, cancel and streaming
    - stream_requested: Whether the creating request asked for streaming;
      ``False`` hides any stream URL the service returns, ``None`` (fetched
      rather than created) keeps what the service reports
    """

    def __init__(
        self,
        record: PredictionRecord,
        http: ReplicateHTTPClient,
        stream_requested: Optional[bool] = None,
    ):
        self.http = http
        self._stream_requested = stream_requested
        self._record = self._accept(record)

    def __repr__(self) -> str:
        return f"Prediction(id={self.id!r}, model={self.model!r}, status={self.status.value!r})"

    def _accept(self, record: PredictionRecord) -> PredictionRecord:
        if self._stream_requested is False and record.urls.stream is not None:
            urls = record.urls.model_copy(update={"stream": None})
            record = record.model_copy(update={"urls": urls})
        return record

    def _swap(self, record: PredictionRecord) -> None:
        previous = self._record.status
        self._record = self._accept(record)
        if previous != self._record.status:
            logger.info(
                "Prediction status changed",
                prediction_id=self.id,
                previous=previous.value,
                status=self._record.status.value
            )

    @property
    def record(self) -> PredictionRecord:
        """The current immutable snapshot."""
        return self._record

    @property
    def id(self) -> str:
        return self._record.id

    @property
    def model(self) -> str:
        return self._record.model

    @property
    def version(self) -> str:
        return self._record.version

    @property
    def input(self) -> Any:
        return self._record.input

    @property
    def status(self) -> PredictionStatus:
        return self._record.status

    @property
    def created_at(self) -> str:
        return self._record.created_at

    @property
    def output(self) -> Any:
        return self._record.output

    @property
    def error(self) -> Any:
        return self._record.error

    @property
    def logs(self) -> Optional[str]:
        return self._record.logs

    @property
    def urls(self) -> PredictionUrls:
        return self._record.urls

    def get_status(self) -> PredictionStatus:
        """Return the cached status; call ``reload`` first for a fresh one."""
        return self._record.status

    async def reload(self) -> "Prediction":
        """Re-fetch this prediction from its ``get`` URL and replace the snapshot."""
        data = await self.http.request("GET", self._record.urls.get, operation="predictions.get")
        self._swap(parse_record(PredictionRecord, data))
        return self

    async def cancel(self) -> "Prediction":
        """Cancel the job and adopt the snapshot the service acknowledges with."""
        data = await self.http.request(
            "POST", self._record.urls.cancel, operation="predictions.cancel"
        )
        self._swap(parse_record(PredictionRecord, data))
        return self

    async def wait(self, poll_interval: float = 1.0) -> "Prediction":
        """Reload every ``poll_interval`` seconds until the status is terminal.

        Errors from ``reload`` propagate; nothing is retried.
        """
        while not self._record.status.is_terminal:
            await asyncio.sleep(poll_interval)
            await self.reload()
        return self

    async def get_stream(self) -> EventStream:
        """Open the prediction's event stream on a new connection.

        Raises
        - ``InvalidRequestError`` without any network call when the
          prediction has no stream URL
        """
        stream_url = self._record.urls.stream
        if not stream_url:
            raise InvalidRequestError("no stream available")

        response = await self.http.open_stream(stream_url, operation="predictions.stream")
        logger.debug("Stream opened", prediction_id=self.id)
        return EventStream(response, prediction_id=self.id, metrics=self.http.metrics)
