"""Fixtures for backend tests."""

from __future__ import annotations

import pytest

from schemagov.backend.app import create_app
from schemagov.config import TestConfig


@pytest.fixture()
def app(endpoint):
    """Create a test Flask application wired to the scripted endpoint."""
    application = create_app(TestConfig)
    application.config["SPARQL_TRANSPORT"] = endpoint.transport
    yield application


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()
