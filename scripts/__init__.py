"""Command-line scripts built on the client.

Scripts include:
- ``stream_prediction.py``: create a streaming prediction and print events.
- ``delete_version.py``: delete a model version.
"""
