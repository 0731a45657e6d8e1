#!/usr/bin/env python3
"""Script to run a streaming prediction and print its events."""

import argparse
import asyncio
import json
import sys
from typing import Any, List, Optional

import structlog

from replicate_client.common.config import ReplicateConfig
from replicate_client.common.errors import ReplicateError
from replicate_client.common.http import ReplicateHTTPClient
from replicate_client.common.logging import configure_logging
from replicate_client.predictions.client import PredictionClient
from replicate_client.predictions.streaming import StreamEvent

logger = structlog.get_logger("stream_prediction")


async def stream_prediction(
    owner: str,
    name: str,
    prediction_input: Any,
    config: Optional[ReplicateConfig] = None,
    http: Optional[ReplicateHTTPClient] = None,
) -> List[StreamEvent]:
    """Create a streaming prediction and print each event as it arrives."""
    if not config:
        config = ReplicateConfig()

    owned = http is None
    if http is None:
        http = ReplicateHTTPClient(config)

    events: List[StreamEvent] = []
    try:
        client = PredictionClient(http)
        prediction = await client.create(owner, name, prediction_input, stream=True)
        logger.info("Streaming prediction", prediction_id=prediction.id)

        stream = await prediction.get_stream()
        async with stream:
            async for event in stream:
                print(f"{event.event}: {event.data}")
                events.append(event)
    finally:
        if owned:
            await http.aclose()

    return events


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Stream the output of a prediction")
    parser.add_argument("--owner", required=True, help="Model owner")
    parser.add_argument("--name", required=True, help="Model name")
    parser.add_argument("--input", required=True, help="Prediction input as a JSON object")

    args = parser.parse_args()

    config = ReplicateConfig()
    configure_logging("stream_prediction", config.replicate_log_level, config.replicate_log_format)

    try:
        prediction_input = json.loads(args.input)
    except ValueError as e:
        print(f"Invalid --input JSON: {e}")
        sys.exit(2)

    try:
        asyncio.run(stream_prediction(args.owner, args.name, prediction_input, config=config))
    except ReplicateError as e:
        logger.error("Streaming prediction failed", error=str(e))
        print(f"Failed to stream prediction: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
