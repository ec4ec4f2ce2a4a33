"""Ingestion layer.

This package turns raw push-stream payloads into typed messages and folds
them into the state stores.
"""

__all__: list[str] = []
