"""Tests for the Replicate client.

HTTP traffic is mocked with ``respx``; no test reaches a real service.
Shared fixtures (configuration, transport, payload builders) live in
``conftest.py``.
"""
