"""Application configuration loaded from environment variables.

Values are read here, at the edge, and passed explicitly into the query
pipeline; nothing below :mod:`schemagov.dispatch` reads the environment.
"""

from __future__ import annotations

import os


class Config:
    """Default configuration."""

    # Trusted endpoint; receives the standard PREFIX block
    SPARQL_ENDPOINT = os.getenv("SPARQL_ENDPOINT", "https://schema.gov.it/sparql")

    # Deadlines in milliseconds; caller-supplied endpoints get the short one
    INTERNAL_TIMEOUT_MS = int(os.getenv("INTERNAL_TIMEOUT_MS", "60000"))
    EXTERNAL_TIMEOUT_MS = int(os.getenv("EXTERNAL_TIMEOUT_MS", "10000"))

    # Maximum characters in any serialized tool output
    CHARACTER_LIMIT = int(os.getenv("CHARACTER_LIMIT", "50000"))

    # JSONL usage log (one line per tool call)
    USAGE_LOG_PATH = os.getenv("USAGE_LOG_PATH", "usage_log.jsonl")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # MCP server (SSE transport only)
    MCP_HOST = os.getenv("MCP_HOST", "127.0.0.1")
    MCP_PORT = int(os.getenv("MCP_PORT", "8000"))


class TestConfig(Config):
    """Configuration overrides for testing."""

    TESTING = True
    SPARQL_ENDPOINT = "http://sparql.test/sparql"
    INTERNAL_TIMEOUT_MS = 2000
    EXTERNAL_TIMEOUT_MS = 500
    USAGE_LOG_PATH = os.devnull
