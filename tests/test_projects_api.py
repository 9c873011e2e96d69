"""API tests for project CRUD and the thumbnail upload/delete ordering."""

from unittest.mock import AsyncMock

from botocore.exceptions import ClientError

from conftest import BUCKET, project_row, project_view
from core.db import ConflictError
from projects import repository

THUMBNAIL_URL = "https://thumbs.s3.ap-northeast-2.amazonaws.com/alice/My%20App"


def _client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, operation)


def _form(**overrides) -> dict:
    data = {
        "title": "My App",
        "user_id": "alice",
        "url": "https://example.com",
        "description": "A demo project",
    }
    data.update(overrides)
    return data


class TestCreateProject:
    def test_create_uploads_thumbnail_then_inserts(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "project_exists_for_owner", AsyncMock(return_value=False))
        create_project = AsyncMock(return_value=project_row(thumbnail=THUMBNAIL_URL))
        monkeypatch.setattr(repository, "create_project", create_project)

        response = client.post(
            "/api/projects",
            data=_form(),
            files={"thumbnail": ("shot.png", b"\x89PNG-bytes", "image/png")},
        )

        assert response.status_code == 201
        assert response.json()["project"]["thumbnail"] == THUMBNAIL_URL
        s3_client.put_object.assert_called_once_with(
            Bucket=BUCKET,
            Key="alice/My App",
            Body=b"\x89PNG-bytes",
            ContentType="image/png",
        )
        assert create_project.await_args.kwargs["thumbnail"] == THUMBNAIL_URL

    def test_create_without_thumbnail_skips_storage(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "project_exists_for_owner", AsyncMock(return_value=False))
        create_project = AsyncMock(return_value=project_row())
        monkeypatch.setattr(repository, "create_project", create_project)

        response = client.post("/api/projects", data=_form())

        assert response.status_code == 201
        s3_client.put_object.assert_not_called()
        assert create_project.await_args.kwargs["thumbnail"] is None

    def test_duplicate_title_conflicts_before_upload(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "project_exists_for_owner", AsyncMock(return_value=True))
        create_project = AsyncMock()
        monkeypatch.setattr(repository, "create_project", create_project)

        response = client.post(
            "/api/projects",
            data=_form(),
            files={"thumbnail": ("shot.png", b"img", "image/png")},
        )

        assert response.status_code == 409
        s3_client.put_object.assert_not_called()
        create_project.assert_not_awaited()

    def test_insert_conflict_keeps_existing_thumbnail(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "project_exists_for_owner", AsyncMock(return_value=False))
        monkeypatch.setattr(
            repository,
            "create_project",
            AsyncMock(side_effect=ConflictError("dup", constraint="projects_user_id_title_key")),
        )

        response = client.post(
            "/api/projects",
            data=_form(),
            files={"thumbnail": ("shot.png", b"img", "image/png")},
        )

        assert response.status_code == 409
        # Same key as the project that won the insert.
        s3_client.put_object.assert_called_once()
        s3_client.delete_object.assert_not_called()

    def test_insert_failure_removes_uploaded_thumbnail(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "project_exists_for_owner", AsyncMock(return_value=False))
        monkeypatch.setattr(repository, "create_project", AsyncMock(side_effect=OSError("db down")))

        response = client.post(
            "/api/projects",
            data=_form(),
            files={"thumbnail": ("shot.png", b"img", "image/png")},
        )

        assert response.status_code == 500
        s3_client.delete_object.assert_called_once_with(Bucket=BUCKET, Key="alice/My App")

    def test_upload_failure_never_inserts(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "project_exists_for_owner", AsyncMock(return_value=False))
        create_project = AsyncMock()
        monkeypatch.setattr(repository, "create_project", create_project)
        s3_client.put_object.side_effect = _client_error("PutObject")

        response = client.post(
            "/api/projects",
            data=_form(),
            files={"thumbnail": ("shot.png", b"img", "image/png")},
        )

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to upload thumbnail."
        create_project.assert_not_awaited()

    def test_missing_title_is_bad_request(self, client):
        response = client.post("/api/projects", data={"user_id": "alice"})

        assert response.status_code == 400


class TestReadProjects:
    def test_anonymous_listing_has_no_viewer(self, client, monkeypatch):
        list_projects = AsyncMock(return_value=[project_view(), project_view(id=11, title="Other")])
        monkeypatch.setattr(repository, "list_projects", list_projects)

        response = client.get("/api/projects")

        assert response.status_code == 200
        projects = response.json()["projects"]
        assert [p["id"] for p in projects] == [10, 11]
        assert all(p["liked"] is False for p in projects)
        assert list_projects.await_args.kwargs["viewer"] is None

    def test_listing_uses_session_identity(self, client, monkeypatch, session_cookie):
        list_projects = AsyncMock(return_value=[project_view(liked=True, like_count=1)])
        monkeypatch.setattr(repository, "list_projects", list_projects)

        response = client.get("/api/projects", headers=session_cookie)

        assert response.status_code == 200
        assert response.json()["projects"][0]["liked"] is True
        assert list_projects.await_args.kwargs["viewer"] == "alice"

    def test_listing_with_invalid_cookie_is_anonymous(self, client, monkeypatch):
        list_projects = AsyncMock(return_value=[])
        monkeypatch.setattr(repository, "list_projects", list_projects)

        response = client.get("/api/projects", headers={"Cookie": "token=expired.or.forged"})

        assert response.status_code == 200
        assert list_projects.await_args.kwargs["viewer"] is None

    def test_get_project(self, client, monkeypatch):
        monkeypatch.setattr(repository, "get_project", AsyncMock(return_value=project_view(comment_count=2)))

        response = client.get("/api/projects/10")

        assert response.status_code == 200
        assert response.json()["project"]["comment_count"] == 2

    def test_get_missing_project(self, client, monkeypatch):
        monkeypatch.setattr(repository, "get_project", AsyncMock(return_value=None))

        response = client.get("/api/projects/999")

        assert response.status_code == 404
        assert response.json() == {"message": "Project not found."}


class TestUpdateProject:
    def test_update_overwrites_row(self, client, monkeypatch):
        update_project = AsyncMock(return_value=project_row(title="Renamed"))
        monkeypatch.setattr(repository, "update_project", update_project)

        response = client.put(
            "/api/projects/10",
            json={"title": "Renamed", "user_id": "alice", "url": None, "thumbnail": None, "description": "x"},
        )

        assert response.status_code == 200
        assert response.json()["project"]["title"] == "Renamed"
        assert update_project.await_args.args[1] == 10
        assert update_project.await_args.kwargs["owner"] == "alice"

    def test_update_missing_project(self, client, monkeypatch):
        monkeypatch.setattr(repository, "update_project", AsyncMock(return_value=None))

        response = client.put("/api/projects/999", json={"title": "T", "user_id": "alice"})

        assert response.status_code == 404

    def test_update_to_duplicate_title_conflicts(self, client, monkeypatch):
        monkeypatch.setattr(
            repository,
            "update_project",
            AsyncMock(side_effect=ConflictError("dup", constraint="projects_user_id_title_key")),
        )

        response = client.put("/api/projects/10", json={"title": "Taken", "user_id": "alice"})

        assert response.status_code == 409


class TestDeleteProject:
    def test_delete_missing_project_leaves_storage_alone(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "get_project_row", AsyncMock(return_value=None))
        delete_project = AsyncMock()
        monkeypatch.setattr(repository, "delete_project", delete_project)

        response = client.delete("/api/projects/999")

        assert response.status_code == 404
        s3_client.delete_object.assert_not_called()
        delete_project.assert_not_awaited()

    def test_thumbnail_removed_before_row(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(
            repository,
            "get_project_row",
            AsyncMock(return_value=project_row(thumbnail=THUMBNAIL_URL)),
        )

        async def delete_row(database, project_id):
            s3_client.delete_object.assert_called_once_with(Bucket=BUCKET, Key="alice/My App")
            return {"id": project_id}

        delete_project = AsyncMock(side_effect=delete_row)
        monkeypatch.setattr(repository, "delete_project", delete_project)

        response = client.delete("/api/projects/10")

        assert response.status_code == 200
        delete_project.assert_awaited_once()

    def test_storage_failure_keeps_row(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(
            repository,
            "get_project_row",
            AsyncMock(return_value=project_row(thumbnail=THUMBNAIL_URL)),
        )
        delete_project = AsyncMock()
        monkeypatch.setattr(repository, "delete_project", delete_project)
        s3_client.delete_object.side_effect = _client_error("DeleteObject")

        response = client.delete("/api/projects/10")

        assert response.status_code == 500
        delete_project.assert_not_awaited()

    def test_renamed_project_deletes_original_object(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(
            repository,
            "get_project_row",
            AsyncMock(return_value=project_row(title="Renamed", thumbnail=THUMBNAIL_URL)),
        )
        monkeypatch.setattr(repository, "delete_project", AsyncMock(return_value={"id": 10}))

        response = client.delete("/api/projects/10")

        assert response.status_code == 200
        s3_client.delete_object.assert_called_once_with(Bucket=BUCKET, Key="alice/My App")

    def test_project_without_thumbnail_skips_storage(self, client, monkeypatch, s3_client):
        monkeypatch.setattr(repository, "get_project_row", AsyncMock(return_value=project_row()))
        monkeypatch.setattr(repository, "delete_project", AsyncMock(return_value={"id": 10}))

        response = client.delete("/api/projects/10")

        assert response.status_code == 200
        s3_client.delete_object.assert_not_called()

    def test_thumbnail_url_outside_owner_prefix_is_ignored(self, client, monkeypatch, s3_client):
        foreign_url = "https://thumbs.s3.ap-northeast-2.amazonaws.com/bob/Other%20App"
        monkeypatch.setattr(
            repository,
            "get_project_row",
            AsyncMock(return_value=project_row(thumbnail=foreign_url)),
        )
        monkeypatch.setattr(repository, "delete_project", AsyncMock(return_value={"id": 10}))

        response = client.delete("/api/projects/10")

        assert response.status_code == 200
        s3_client.delete_object.assert_called_once_with(Bucket=BUCKET, Key="alice/My App")
