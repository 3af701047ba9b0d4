from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.indexes.elasticsearch_index import ElasticsearchIndex
from app.main import app
from app.models.title import Title


@pytest.fixture
def keyless_env(tmp_path, monkeypatch):
    """Environment with no TMDB key and a throwaway sqlite catalog."""
    monkeypatch.setenv("TMDB_API_KEY", "")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'catalog.db'}")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_starts_without_tmdb_key_and_serves_local_results(keyless_env):
    local_hit = Title(id="1", name="Heat", vote_average=8.3)

    with (
        patch.object(ElasticsearchIndex, "ensure", AsyncMock()),
        patch.object(ElasticsearchIndex, "aclose", AsyncMock()),
        patch.object(ElasticsearchIndex, "search", AsyncMock(return_value=[local_hit])),
    ):
        with TestClient(app) as client:
            health = client.get("/api/health")
            response = client.get("/api/titles?query=heat")

    assert health.status_code == 200
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["total_results"] == 1
    assert [item["name"] for item in data["items"]] == ["Heat"]
