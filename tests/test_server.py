"""Tests for the production front-end routes."""

import pytest

from aesthetic.server import create_app


@pytest.fixture
def http(tmp_path):
    build = tmp_path / "build"
    (build / "static").mkdir(parents=True)
    (build / "index.html").write_text("<html>chat</html>")
    (build / "static" / "app.js").write_text("console.log('app');")
    (tmp_path / "secret.txt").write_text("top secret")

    app, _ = create_app(async_mode="threading", serve_build=True, build_dir=str(build))
    return app.test_client()


class TestBuildRoutes:
    def test_index(self, http) -> None:
        resp = http.get("/")

        assert resp.status_code == 200
        assert b"<html>chat</html>" in resp.data

    def test_asset_served(self, http) -> None:
        resp = http.get("/static/app.js")

        assert resp.status_code == 200
        assert b"console.log('app');" in resp.data

    def test_unknown_path_falls_back_to_index(self, http) -> None:
        resp = http.get("/rooms/lobby")

        assert resp.status_code == 200
        assert b"<html>chat</html>" in resp.data

    @pytest.mark.parametrize("url", ["/../secret.txt", "/static/../../secret.txt", "/..%2fsecret.txt"])
    def test_parent_paths_not_served(self, http, url) -> None:
        resp = http.get(url)

        assert b"top secret" not in resp.data

    def test_routes_absent_outside_production(self) -> None:
        app, _ = create_app(async_mode="threading", serve_build=False)

        assert app.test_client().get("/").status_code == 404
