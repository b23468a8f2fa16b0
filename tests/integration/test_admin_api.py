"""Integration tests for the admin API: auth, listing, filtering, like and delete."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from story_recorder.main import build_components, create_app

_AUTH = {"Authorization": "s3cret"}


@pytest.fixture
def client(settings, app_config):
    app = create_app(settings, app_config, build_components(settings, app_config))
    with TestClient(app) as c:
        yield c


@pytest.fixture
def seeded(client):
    """Three uploaded stories: 001 nina/Mira, 002 dani/Jonas, 003 dani/Mira."""
    for author, category in [("Mira", "nina"), ("Jonas", "dani"), ("Mira", "dani")]:
        response = client.post(
            "/api/upload",
            data={"author": author, "category": category, "duration": "10"},
            files={"audio": ("blob.webm", b"webm-bytes", "audio/webm")},
        )
        assert response.status_code == 200
    return client


# ─── Auth ─────────────────────────────────────────────────────────

class TestAuth:
    @pytest.mark.parametrize("headers", [{}, {"Authorization": "wrong"}, {"Authorization": ""}])
    def test_missing_or_wrong_secret_is_401(self, client, headers):
        assert client.get("/api/admin/stories", headers=headers).status_code == 401

    def test_every_admin_route_is_guarded(self, seeded):
        assert seeded.get("/api/admin/stories/view").status_code == 401
        assert seeded.post("/api/admin/stories/001/like").status_code == 401
        assert seeded.delete("/api/admin/stories/001").status_code == 401
        # Nothing changed.
        stories = seeded.get("/api/admin/stories", headers=_AUTH).json()
        assert len(stories) == 3
        assert not any(s["liked"] for s in stories)

    def test_empty_password_disables_admin(self, settings, app_config):
        open_settings = settings.model_copy(update={"admin_password": ""})
        app = create_app(open_settings, app_config, build_components(open_settings, app_config))
        with TestClient(app) as c:
            assert c.get("/api/admin/stories", headers={"Authorization": ""}).status_code == 401


# ─── Listing + filtering ──────────────────────────────────────────

class TestListing:
    def test_list_is_newest_first(self, seeded):
        response = seeded.get("/api/admin/stories", headers=_AUTH)

        assert response.status_code == 200
        stories = response.json()
        assert [s["id"] for s in stories] == ["003", "002", "001"]
        assert set(stories[0]) == {"id", "recorded_by", "author", "timestamp", "duration", "liked", "audio_path"}
        assert stories[0]["audio_path"] == "audios/003_dani.webm"

    def test_empty_store(self, client):
        assert client.get("/api/admin/stories", headers=_AUTH).json() == []

    def test_filtered_view(self, seeded):
        response = seeded.get(
            "/api/admin/stories/view",
            params={"for_whom": "dani", "by_whom": ["Mira", "Lea"]},
            headers=_AUTH,
        )

        assert response.status_code == 200
        view = response.json()
        assert [s["id"] for s in view["stories"]] == ["003"]
        assert view["count"] == 1
        assert view["facets"]["for_whom"] == {"nina": 1, "dani": 1, "beide": 0}
        assert view["facets"]["by_whom"] == {"Jonas": 1, "Mira": 1}
        assert view["selected_authors"] == ["Mira"]

    def test_only_liked(self, seeded):
        seeded.post("/api/admin/stories/002/like", headers=_AUTH)
        view = seeded.get(
            "/api/admin/stories/view", params={"only_liked": "true"}, headers=_AUTH
        ).json()
        assert [s["id"] for s in view["stories"]] == ["002"]

    def test_unknown_category_is_400(self, seeded):
        response = seeded.get("/api/admin/stories/view", params={"for_whom": "oma"}, headers=_AUTH)
        assert response.status_code == 400


# ─── Like + delete ────────────────────────────────────────────────

class TestMutations:
    def test_like_toggles_twice(self, seeded):
        first = seeded.post("/api/admin/stories/002/like", headers=_AUTH)
        second = seeded.post("/api/admin/stories/002/like", headers=_AUTH)

        assert first.json() == {"id": "002", "liked": True}
        assert second.json() == {"id": "002", "liked": False}

    def test_like_unknown_id_is_404(self, seeded, data_dir):
        before = (data_dir / "stories.json").read_text()

        response = seeded.post("/api/admin/stories/999/like", headers=_AUTH)

        assert response.status_code == 404
        assert (data_dir / "stories.json").read_text() == before

    def test_delete_removes_record_and_audio(self, seeded, data_dir):
        assert seeded.get("/audios/001_nina.webm").status_code == 200

        response = seeded.delete("/api/admin/stories/001", headers=_AUTH)

        assert response.status_code == 200
        assert response.json() == {"success": True, "id": "001"}
        assert not (data_dir / "audios" / "001_nina.webm").exists()
        assert seeded.get("/audios/001_nina.webm").status_code == 404
        ids = [s["id"] for s in seeded.get("/api/admin/stories", headers=_AUTH).json()]
        assert ids == ["003", "002"]

    def test_delete_unknown_id_is_404(self, seeded):
        assert seeded.delete("/api/admin/stories/999", headers=_AUTH).status_code == 404

    def test_deleted_id_is_not_reused(self, seeded):
        seeded.delete("/api/admin/stories/003", headers=_AUTH)
        response = seeded.post(
            "/api/upload",
            data={"author": "Lea", "category": "beide"},
            files={"audio": ("blob.webm", b"webm-bytes", "audio/webm")},
        )
        assert response.json()["story_id"] == "004"
