# tests/conftest.py
import os

# Keep the API on the in-memory backend; must be set before buybox.* is imported
os.environ.setdefault("BUYBOX_STORAGE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from buybox.api.http import app  # noqa: E402


@pytest.fixture(scope="session")
def client():
    return TestClient(app)
