"""Shared utilities."""

from .http_client import HTTPClient
