"""Prediction lifecycle and streaming.

- ``PredictionClient``: create (resolving the latest version), get, list,
  and cancel.
- ``Prediction``: the caller-owned entity with ``reload``, ``cancel``,
  ``wait`` and ``get_stream``.
- ``streaming``: server-sent event decoding over the live stream response.
- ``schemas``: pydantic records for prediction payloads.
"""
