import dataclasses
from unittest.mock import patch

from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError

from database import LESSONS
from main import create_app


class TestImages:
    def test_serves_existing_image(self, client):
        response = client.get("/images/math.jpg")

        assert response.status_code == 200
        assert response.content.startswith(b"\xff\xd8")

    def test_missing_image_is_json_404(self, client):
        response = client.get("/images/astronomy.jpg")

        assert response.status_code == 404
        assert response.json() == {"error": "Image not found"}

    def test_path_outside_images_dir_is_404(self, client):
        response = client.get("/images/..%2Fsecret.txt")

        assert response.status_code == 404


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json() == {"message": "After School Classes API running"}

    def test_healthy(self, client, database):
        with patch.object(database, "ping", return_value=True):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_database_down(self, client, database):
        with patch.object(database, "ping", side_effect=PyMongoError("down")):
            response = client.get("/health")

        assert response.status_code == 503
        assert response.json() == {"status": "unavailable"}


class TestErrors:
    def test_database_failure_is_generic_500(self, client, database):
        with patch.object(database, "list_lessons", side_effect=PyMongoError("boom")):
            response = client.get("/lessons")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_invalid_json_is_400(self, client):
        response = client.post(
            "/orders", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400


class TestStartup:
    def test_seeding_failure_does_not_stop_startup(self, database, test_settings):
        app = create_app(database=database, settings=test_settings)

        with patch.object(database, "seed_lessons", side_effect=PyMongoError("boom")):
            with TestClient(app) as client:
                response = client.get("/lessons")

        assert response.status_code == 200
        assert response.json() == []

    def test_seeding_can_be_disabled(self, database, test_settings):
        settings = dataclasses.replace(test_settings, seed_sample_data=False)

        with TestClient(create_app(database=database, settings=settings)) as client:
            assert client.get("/lessons").json() == []
            assert database.db[LESSONS].count_documents({}) == 0
