"""Endpoint functions for the geo backend HTTP API."""
