#!/usr/bin/env python3
"""Script to delete a model version."""

import argparse
import asyncio
import sys
from typing import Optional

import structlog

from replicate_client.common.config import ReplicateConfig
from replicate_client.common.errors import ReplicateError
from replicate_client.common.http import ReplicateHTTPClient
from replicate_client.common.logging import configure_logging
from replicate_client.models.client import ModelClient

logger = structlog.get_logger("delete_version")


async def delete_version(
    owner: str,
    name: str,
    version_id: str,
    config: Optional[ReplicateConfig] = None,
    http: Optional[ReplicateHTTPClient] = None,
) -> bool:
    """Delete a model version; return ``False`` when the service refuses."""
    if not config:
        config = ReplicateConfig()

    owned = http is None
    if http is None:
        http = ReplicateHTTPClient(config)

    try:
        await ModelClient(http).delete_version(owner, name, version_id)
        return True
    except ReplicateError as e:
        logger.error(
            "Model version deletion failed",
            owner=owner,
            name=name,
            version=version_id,
            error=str(e)
        )
        return False
    finally:
        if owned:
            await http.aclose()


def main():
    """Main function for CLI."""
    parser = argparse.ArgumentParser(description="Delete a model version")
    parser.add_argument("--owner", required=True, help="Model owner")
    parser.add_argument("--name", required=True, help="Model name")
    parser.add_argument("--version", required=True, help="Version id to delete")

    args = parser.parse_args()

    config = ReplicateConfig()
    configure_logging("delete_version", config.replicate_log_level, config.replicate_log_format)

    success = asyncio.run(delete_version(args.owner, args.name, args.version, config=config))

    if success:
        print(f"Deleted {args.owner}/{args.name}:{args.version}")
        sys.exit(0)
    else:
        print(f"Failed to delete {args.owner}/{args.name}:{args.version}")
        sys.exit(1)


if __name__ == "__main__":
    main()
