"""Async client for the Replicate inference API.

Subpackages:
- ``replicate_client.common``: configuration, logging, errors, metrics, and
  the shared HTTP transport.
- ``replicate_client.models``: model and version lookup, including the latest
  version resolver used when creating predictions.
- ``replicate_client.predictions``: prediction creation, reload, cancellation,
  listing, and server-sent event streaming.

Usage:

    config = ReplicateConfig()
    async with ReplicateHTTPClient(config) as http:
        predictions = PredictionClient(http)
        prediction = await predictions.create("replicate", "hello-world", {"text": "Alice"})
        await prediction.wait()
"""

from .common.config import ReplicateConfig, get_config
from .common.errors import (
    ClientError,
    InvalidCredentialsError,
    InvalidRequestError,
    MiscError,
    MissingCredentialsError,
    NotFoundError,
    PaymentNeededError,
    ReplicateError,
    SerializationError,
)
from .common.http import ReplicateHTTPClient
from .models.client import ModelClient
from .predictions.client import PredictionClient
from .predictions.prediction import Prediction
from .predictions.schemas import PredictionStatus
from .predictions.streaming import EventStream, StreamEvent

__version__ = "0.3.0"

__all__ = [
    "ClientError",
    "EventStream",
    "InvalidCredentialsError",
    "InvalidRequestError",
    "MiscError",
    "MissingCredentialsError",
    "ModelClient",
    "NotFoundError",
    "PaymentNeededError",
    "Prediction",
    "PredictionClient",
    "PredictionStatus",
    "ReplicateConfig",
    "ReplicateError",
    "ReplicateHTTPClient",
    "SerializationError",
    "StreamEvent",
    "get_config",
]
