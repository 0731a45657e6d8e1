"""Common utilities shared across resource clients.

Includes:
- ``config``: Pydantic-based client configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``errors``: the error taxonomy and status-code mapping.
- ``metrics``: Prometheus counters and histograms for client calls.
- ``http``: the authenticated httpx transport every client goes through.

Import pattern:
- from replicate_client.common.config import ReplicateConfig
- from replicate_client.common.http import ReplicateHTTPClient
"""
