"""Integration tests for book endpoints."""

from unittest.mock import patch

import pytest

from ebook_studio.services import book_store

OTHER_USER = {"X-User-Id": "user-456"}


async def _create(client, auth_headers, blueprint_data, **extra):
    return await client.post(
        "/api/books", json={"blueprint": blueprint_data, **extra}, headers=auth_headers
    )


class TestCreateBook:
    """Tests for POST /api/books."""

    @pytest.mark.asyncio
    async def test_materialize(self, client, auth_headers, blueprint_data):
        response = await _create(client, auth_headers, blueprint_data, selected_subtitle_index=1)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["book"]["title"] == "The Quiet Engine"
        assert data["book"]["subtitle"] == "A Field Guide to Sustainable Ambition"
        assert data["book"]["user_id"] == "user-123"
        assert [c["order_index"] for c in data["chapters"]] == [0, 1, 2]
        assert {c["status"] for c in data["chapters"]} == {"outline"}

    @pytest.mark.asyncio
    async def test_invalid_blueprint(self, client, auth_headers, blueprint_data):
        blueprint_data["chapters"][0]["target_word_count"] = -1
        response = await _create(client, auth_headers, blueprint_data)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_bad_subtitle_index(self, client, auth_headers, blueprint_data):
        response = await _create(client, auth_headers, blueprint_data, selected_subtitle_index=9)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_partial_failure_and_resume(self, client, auth_headers, blueprint_data):
        real_insert = book_store.insert_chapter

        async def flaky_insert(chapter):
            if chapter.order_index == 2:
                raise RuntimeError("write rejected")
            return await real_insert(chapter)

        with patch.object(book_store, "insert_chapter", flaky_insert):
            response = await _create(client, auth_headers, blueprint_data)

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == "PARTIAL_MATERIALIZATION"
        assert body["data"]["failed_indices"] == [2]
        assert len(body["data"]["created_chapter_ids"]) == 2

        book_id = body["data"]["book_id"]
        resumed = await client.post(
            f"/api/books/{book_id}/chapters/resume",
            json={"failed_indices": [2]},
            headers=auth_headers,
        )
        assert resumed.status_code == 200
        chapters = resumed.json()["data"]["chapters"]
        assert [c["order_index"] for c in chapters] == [0, 1, 2]


class TestReadBooks:
    """Tests for GET/PATCH/DELETE /api/books."""

    @pytest.mark.asyncio
    async def test_list_and_get(self, client, auth_headers, blueprint_data):
        created = (await _create(client, auth_headers, blueprint_data)).json()["data"]
        book_id = created["book"]["id"]

        listed = await client.get("/api/books", headers=auth_headers)
        assert [b["id"] for b in listed.json()["data"]] == [book_id]

        fetched = await client.get(f"/api/books/{book_id}", headers=auth_headers)
        assert fetched.status_code == 200
        assert len(fetched.json()["data"]["chapters"]) == 3

    @pytest.mark.asyncio
    async def test_other_user_cannot_see_book(self, client, auth_headers, blueprint_data):
        created = (await _create(client, auth_headers, blueprint_data)).json()["data"]

        response = await client.get(f"/api/books/{created['book']['id']}", headers=OTHER_USER)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"
        assert (await client.get("/api/books", headers=OTHER_USER)).json()["data"] == []

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client, auth_headers, blueprint_data):
        created = (await _create(client, auth_headers, blueprint_data)).json()["data"]
        book_id = created["book"]["id"]

        updated = await client.patch(
            f"/api/books/{book_id}",
            json={"description": "Revised pitch", "voice_profile": {"tone": "brisk"}},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["data"]["description"] == "Revised pitch"
        assert updated.json()["data"]["voice_profile"]["tone"] == "brisk"

        deleted = await client.delete(f"/api/books/{book_id}", headers=auth_headers)
        assert deleted.json()["data"] == {"deleted": True}
        assert (await client.get(f"/api/books/{book_id}", headers=auth_headers)).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_written_book_conflicts(self, client, auth_headers, blueprint_data):
        created = (await _create(client, auth_headers, blueprint_data)).json()["data"]
        book_id = created["book"]["id"]
        await book_store.update_chapter_content(created["chapters"][0]["id"], "Opening words.", 2)

        response = await client.delete(f"/api/books/{book_id}", headers=auth_headers)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "BOOK_IN_USE"
        assert (await client.get(f"/api/books/{book_id}", headers=auth_headers)).status_code == 200
