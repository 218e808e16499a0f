"""Test helper modules for Confluence REST client testing.

This package provides utilities for unit testing without a live service:
- fake_responses: Build requests.Response stand-ins for a patched atlassian
  Confluence client, or real responses for a patched HTTP session
"""

from .fake_responses import make_http_response, make_response, space_payload, page_payload

__all__ = [
    'make_http_response',
    'make_response',
    'space_payload',
    'page_payload',
]
