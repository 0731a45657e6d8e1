"""Wire records for the prediction endpoints.

Records are frozen snapshots of what the service reported; the mutable
``Prediction`` entity swaps whole snapshots rather than editing fields.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class PredictionStatus(str, Enum):
    """Prediction lifecycle states, driven entirely by the service."""
    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in (
            PredictionStatus.SUCCEEDED,
            PredictionStatus.FAILED,
            PredictionStatus.CANCELED,
        )


class PredictionUrls(BaseModel):
    """Service-provided URLs for one prediction."""

    model_config = ConfigDict(frozen=True)

    get: str
    cancel: str
    stream: Optional[str] = None


class PredictionRecord(BaseModel):
    """One prediction as reported by the service.

    ``input`` and ``output`` are arbitrary JSON values passed through
    untouched. ``created_at`` and the other timestamps are kept as the opaque
    strings the service sent.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: str
    model: str
    version: str
    input: Any = None
    status: PredictionStatus
    created_at: str
    output: Any = None
    error: Any = None
    logs: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    metrics: Optional[Dict[str, Any]] = None
    urls: PredictionUrls

    @model_validator(mode="before")
    @classmethod
    def _drop_interim_output(cls, data: Any) -> Any:
        # output only exists once the prediction is terminal
        if isinstance(data, dict) and data.get("status") in (
            PredictionStatus.STARTING.value,
            PredictionStatus.PROCESSING.value,
        ):
            data = {key: value for key, value in data.items() if key != "output"}
        return data


class PredictionRecordPage(BaseModel):
    """One page of the prediction listing."""

    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[PredictionRecord] = []


class CreatePredictionRequest(BaseModel):
    """Body of ``POST /predictions``."""

    version: str
    input: Any
    stream: bool = False
