"""Server-sent event streaming for prediction output.

Turns the live ``text/event-stream`` body of a prediction's stream URL into
an async sequence of ``StreamEvent`` records.

Behaviour
- Lazy and forward-only: one event is decoded per iteration step; the only
  suspension point is waiting on the transport for more bytes
- Single pass: a stream cannot be iterated twice; call
  ``Prediction.get_stream()`` again for a fresh connection
- Ends when the connection closes or after the service's ``done`` event
  (which is still yielded)
- The connection is closed on exhaustion, ``break`` inside ``async with``,
  or ``aclose()``

Policy for broken frames: an event still being assembled when the connection
closes is dropped without raising. Events are never parsed beyond SSE
framing, so a payload the caller cannot decode does not end the stream;
``StreamEvent.json()`` reports that per event.
"""

import asyncio
import json
import weakref
from dataclasses import dataclass
from typing import Any, AsyncIterator, List, Optional

import httpx
import structlog

from ..common.errors import ClientError, InvalidRequestError, SerializationError
from ..common.metrics import ClientMetrics

logger = structlog.get_logger("streaming")

DONE_EVENT = "done"


@dataclass(frozen=True)
class StreamEvent:
    """One event from a prediction stream.

    ``data`` is the raw payload; multi-line ``data:`` fields are joined with
    ``\\n``.
    """
    event: str = "message"
    data: str = ""
    id: Optional[str] = None
    retry: Optional[int] = None

    def json(self) -> Any:
        """Decode ``data`` as JSON."""
        try:
            return json.loads(self.data)
        except ValueError as e:
            raise SerializationError(f"Event {self.event!r} data is not valid JSON: {e}") from e


class SSEDecoder:
    """Incremental decoder for server-sent event framing.

    Feed it one line at a time (without the line terminator). A blank line
    completes the event being assembled.
    """

    def __init__(self):
        self._event = ""
        self._data: List[str] = []
        self._last_event_id: Optional[str] = None
        self._retry: Optional[int] = None
        self._pending = False

    @property
    def has_pending(self) -> bool:
        """Whether a partially assembled event is buffered."""
        return self._pending

    def decode(self, line: str) -> Optional[StreamEvent]:
        """Consume one line; return an event when a frame completes."""
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            return None

        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        elif field == "id":
            if "\0" not in value:
                self._last_event_id = value
        elif field == "retry":
            if value.isdigit():
                self._retry = int(value)
        else:
            # unknown field
            return None

        self._pending = True
        return None

    def _dispatch(self) -> Optional[StreamEvent]:
        if not self._data:
            self._event = ""
            self._retry = None
            self._pending = False
            return None

        event = StreamEvent(
            event=self._event or "message",
            data="\n".join(self._data),
            id=self._last_event_id,
            retry=self._retry,
        )
        self._event = ""
        self._data = []
        self._retry = None
        self._pending = False
        return event


def _close_abandoned(
    response: httpx.Response,
    loop: asyncio.AbstractEventLoop,
    prediction_id: Optional[str],
) -> None:
    if response.is_closed or loop.is_closed():
        return
    logger.debug("Closing abandoned stream", prediction_id=prediction_id)
    loop.call_soon_threadsafe(loop.create_task, response.aclose())


class EventStream:
    """Async, single-pass sequence of ``StreamEvent`` over a live response.

    Usage

        stream = await prediction.get_stream()
        async with stream:
            async for event in stream:
                ...
    """

    def __init__(
        self,
        response: httpx.Response,
        prediction_id: Optional[str] = None,
        metrics: Optional[ClientMetrics] = None,
    ):
        self.response = response
        self.prediction_id = prediction_id
        self.metrics = metrics
        self._iterator: Optional[AsyncIterator[StreamEvent]] = None

        # an abandoned, never-iterated handle still releases its connection
        self._finalizer = weakref.finalize(
            self, _close_abandoned, response, asyncio.get_running_loop(), prediction_id
        )
        self._finalizer.atexit = False

    @property
    def closed(self) -> bool:
        return self.response.is_closed

    async def __aenter__(self) -> "EventStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        if self._iterator is not None or self.response.is_closed:
            raise InvalidRequestError(
                "stream already consumed; call get_stream() for a new connection"
            )
        self._iterator = self._events()
        return self._iterator

    async def aclose(self) -> None:
        """Stop consumption and release the connection."""
        if self._iterator is not None:
            await self._iterator.aclose()
        await self._close_response()

    async def _close_response(self) -> None:
        if not self.response.is_closed:
            await self.response.aclose()
            logger.debug("Stream closed", prediction_id=self.prediction_id)

    async def _events(self) -> AsyncIterator[StreamEvent]:
        decoder = SSEDecoder()
        try:
            async for line in self.response.aiter_lines():
                event = decoder.decode(line)
                if event is None:
                    continue

                if self.metrics is not None:
                    self.metrics.record_stream_event(event.event)
                yield event

                if event.event == DONE_EVENT:
                    logger.debug("Stream completed", prediction_id=self.prediction_id)
                    return

            if decoder.has_pending:
                logger.debug(
                    "Dropped partial event at end of stream",
                    prediction_id=self.prediction_id
                )
        except httpx.HTTPError as e:
            logger.error("Stream interrupted", prediction_id=self.prediction_id, error=str(e))
            raise ClientError(str(e) or type(e).__name__) from e
        finally:
            await self._close_response()
