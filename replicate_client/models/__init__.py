"""Model and version lookup.

- ``ModelClient``: model details, version listing/deletion, and the latest
  version resolver used by ``PredictionClient.create``.
- ``schemas``: pydantic records for model and version payloads.
"""
