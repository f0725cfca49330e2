"""Shared fixtures for API tests."""

import pytest
from fastapi.testclient import TestClient

from catalogadmin.catalog.service import CatalogService
from catalogadmin.main import create_app


@pytest.fixture
def client(service: CatalogService) -> TestClient:
    """Create test client over an in-memory catalog."""
    return TestClient(create_app(service=service))
