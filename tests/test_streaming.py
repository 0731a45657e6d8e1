"""Tests for server-sent event decoding and prediction streams."""

import asyncio
import gc

import httpx
import pytest
import respx

from replicate_client.common.errors import (
    ClientError,
    InvalidRequestError,
    MiscError,
    SerializationError,
)
from replicate_client.predictions.client import PredictionClient
from replicate_client.predictions.streaming import SSEDecoder, StreamEvent

from tests.conftest import API_KEY, BASE_URL, PREDICTION_ID, VERSION_ID

STREAM_URL = f"https://streaming.replicate.test/v1/streams/{PREDICTION_ID}"
PREDICTIONS_URL = f"{BASE_URL}/predictions"

THREE_EVENTS = (
    b"event: output\nid: 1\ndata: Hello\n\n"
    b"event: output\nid: 2\ndata: , Alice\n\n"
    b"event: output\nid: 3\ndata: !\n\n"
)


def decode_all(lines):
    """Feed lines to a fresh decoder and collect emitted events."""
    decoder = SSEDecoder()
    events = []
    for line in lines:
        event = decoder.decode(line)
        if event is not None:
            events.append(event)
    return events, decoder


def test_decoder_basic_event():
    """Test a single framed event."""
    events, decoder = decode_all(["event: output", "id: 7", "data: hi", ""])
    assert events == [StreamEvent(event="output", data="hi", id="7")]
    assert not decoder.has_pending


def test_decoder_multiline_data_and_default_event():
    """Test data lines are joined and the event name defaults to message."""
    events, _ = decode_all(["data: first", "data: second", ""])
    assert events == [StreamEvent(event="message", data="first\nsecond")]


def test_decoder_ignores_comments_and_unknown_fields():
    """Test comment lines and unknown fields do not produce events."""
    events, _ = decode_all([": keep-alive", "", "foo: bar", "data:no-space", ""])
    assert events == [StreamEvent(data="no-space")]


def test_decoder_keeps_last_event_id_and_retry():
    """Test the last event id carries over and retry applies to its own event only."""
    events, _ = decode_all(["id: 1", "retry: 3000", "data: a", "", "data: b", ""])
    assert [event.id for event in events] == ["1", "1"]
    assert events[0].retry == 3000
    assert events[1].retry is None


def test_decoder_reports_partial_frame():
    """Test an unterminated frame is buffered rather than emitted."""
    events, decoder = decode_all(["event: output", "data: partial"])
    assert events == []
    assert decoder.has_pending


def test_stream_event_json():
    """Test decoding event payloads as JSON."""
    assert StreamEvent(event="done", data="{}").json() == {}
    with pytest.raises(SerializationError):
        StreamEvent(data="plain text").json()


async def streaming_prediction(http, make_prediction):
    """Create a prediction that requested streaming."""
    respx.post(PREDICTIONS_URL).mock(
        return_value=httpx.Response(201, json=make_prediction(stream=True))
    )
    return await PredictionClient(http).create_from_version(VERSION_ID, {"text": "Alice"}, stream=True)


@pytest.mark.asyncio
@respx.mock
async def test_stream_three_events(http, make_prediction):
    """Test three complete blocks followed by close yield exactly three events."""
    route = respx.get(STREAM_URL).mock(
        return_value=httpx.Response(200, content=THREE_EVENTS, headers={"Content-Type": "text/event-stream"})
    )
    prediction = await streaming_prediction(http, make_prediction)

    stream = await prediction.get_stream()
    events = [event async for event in stream]

    assert [event.data for event in events] == ["Hello", ", Alice", "!"]
    assert [event.id for event in events] == ["1", "2", "3"]
    assert all(event.event == "output" for event in events)
    assert stream.closed

    request = route.calls.last.request
    assert request.headers["Accept"] == "text/event-stream"
    assert request.headers["Authorization"] == f"Token {API_KEY}"


@pytest.mark.asyncio
@respx.mock
async def test_stream_truncated_mid_block(http, make_prediction):
    """Test a connection closed mid-event yields only the complete events."""
    respx.get(STREAM_URL).mock(
        return_value=httpx.Response(
            200,
            content=b"event: output\ndata: Hello\n\nevent: output\ndata: , Al",
        )
    )
    prediction = await streaming_prediction(http, make_prediction)

    stream = await prediction.get_stream()
    events = [event async for event in stream]

    assert events == [StreamEvent(event="output", data="Hello")]
    assert stream.closed


@pytest.mark.asyncio
@respx.mock
async def test_stream_stops_after_done(http, make_prediction):
    """Test the done event is delivered and ends the sequence."""
    respx.get(STREAM_URL).mock(
        return_value=httpx.Response(
            200,
            content=b"event: output\ndata: Hi\n\nevent: done\ndata: {}\n\nevent: output\ndata: late\n\n",
        )
    )
    prediction = await streaming_prediction(http, make_prediction)

    stream = await prediction.get_stream()
    events = [event async for event in stream]

    assert [event.event for event in events] == ["output", "done"]
    assert stream.closed


@pytest.mark.asyncio
@respx.mock
async def test_stream_break_closes_connection(http, make_prediction):
    """Test leaving the context after a break releases the connection."""
    respx.get(STREAM_URL).mock(return_value=httpx.Response(200, content=THREE_EVENTS))
    prediction = await streaming_prediction(http, make_prediction)

    stream = await prediction.get_stream()
    async with stream:
        async for event in stream:
            assert event.data == "Hello"
            break

    assert stream.closed


@pytest.mark.asyncio
@respx.mock
async def test_stream_dropped_before_iteration_closes_connection(http, make_prediction):
    """Test a stream handle discarded without iterating still releases the connection."""
    respx.get(STREAM_URL).mock(return_value=httpx.Response(200, content=THREE_EVENTS))
    prediction = await streaming_prediction(http, make_prediction)

    stream = await prediction.get_stream()
    response = stream.response
    assert not response.is_closed

    del stream
    gc.collect()
    for _ in range(5):
        await asyncio.sleep(0)

    assert response.is_closed


@pytest.mark.asyncio
@respx.mock
async def test_stream_is_single_pass(http, make_prediction):
    """Test a consumed stream cannot be iterated again."""
    respx.get(STREAM_URL).mock(return_value=httpx.Response(200, content=THREE_EVENTS))
    prediction = await streaming_prediction(http, make_prediction)

    stream = await prediction.get_stream()
    async for _ in stream:
        pass

    with pytest.raises(InvalidRequestError):
        async for _ in stream:
            pass


@pytest.mark.asyncio
@respx.mock
async def test_get_stream_without_stream_url(http, make_prediction):
    """Test no request is made when the prediction has no stream URL."""
    respx.get(f"{PREDICTIONS_URL}/{PREDICTION_ID}").mock(
        return_value=httpx.Response(200, json=make_prediction(stream=False))
    )
    prediction = await PredictionClient(http).get(PREDICTION_ID)
    calls_before = len(respx.calls)

    with pytest.raises(InvalidRequestError, match="no stream available"):
        await prediction.get_stream()

    assert len(respx.calls) == calls_before


@pytest.mark.asyncio
@respx.mock
async def test_get_stream_rejected(http, make_prediction):
    """Test a refused stream request maps through the error taxonomy."""
    respx.get(STREAM_URL).mock(
        return_value=httpx.Response(410, json={"title": "Gone", "detail": "Stream expired"})
    )
    prediction = await streaming_prediction(http, make_prediction)

    with pytest.raises(MiscError, match="Gone: Stream expired"):
        await prediction.get_stream()


@pytest.mark.asyncio
@respx.mock
async def test_get_stream_connection_refused(http, make_prediction):
    """Test a transport failure opening the stream raises a client error."""
    respx.get(STREAM_URL).mock(side_effect=httpx.ConnectError("connection refused"))
    prediction = await streaming_prediction(http, make_prediction)

    with pytest.raises(ClientError):
        await prediction.get_stream()


@pytest.mark.asyncio
@respx.mock
async def test_stream_events_are_counted(http, make_prediction):
    """Test decoded events are recorded in the client metrics."""
    respx.get(STREAM_URL).mock(return_value=httpx.Response(200, content=THREE_EVENTS))
    prediction = await streaming_prediction(http, make_prediction)

    stream = await prediction.get_stream()
    async with stream:
        async for _ in stream:
            pass

    assert 'replicate_client_stream_events_total{event="output"} 3.0' in http.metrics.get_metrics()
