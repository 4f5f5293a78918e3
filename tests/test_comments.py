"""
Comment endpoint tests — threaded replies, tree ordering over HTTP,
parent validation and cascading delete.
"""
import pytest
from httpx import AsyncClient


async def _setup_article(client: AsyncClient, register, username: str = "threader"):
    _, auth = await register(client, username)
    resp = await client.post(
        "/api/v1/articles", json={"title": "Thread", "content": "discuss"}, auth=auth
    )
    assert resp.status_code == 201
    return resp.json()["id"], auth


async def _comment(client: AsyncClient, article_id: int, auth, content: str, parent_id: int | None = None) -> dict:
    resp = await client.post(
        f"/api/v1/articles/{article_id}/comments",
        json={"content": content, "parent_comment_id": parent_id},
        auth=auth,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_create_comment(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    data = await _comment(async_client, article_id, auth, "Nice article!")
    assert data["content"] == "Nice article!"
    assert data["article_id"] == article_id
    assert data["parent_comment_id"] is None
    assert data["created_by"] == "threader"
    assert data["child_comments"] == []


@pytest.mark.asyncio
async def test_comment_requires_auth(async_client: AsyncClient, register):
    article_id, _ = await _setup_article(async_client, register)
    resp = await async_client.post(f"/api/v1/articles/{article_id}/comments", json={"content": "anon"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_comment_on_nonexistent_article(async_client: AsyncClient, register):
    _, auth = await register(async_client, "lost")
    resp = await async_client.post("/api/v1/articles/99999/comments", json={"content": "Hello"}, auth=auth)
    assert resp.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["", "x" * 501])
async def test_comment_content_length_is_validated(async_client: AsyncClient, register, content):
    article_id, auth = await _setup_article(async_client, register)
    resp = await async_client.post(f"/api/v1/articles/{article_id}/comments", json={"content": content}, auth=auth)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_reply_to_unknown_parent(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    resp = await async_client.post(
        f"/api/v1/articles/{article_id}/comments",
        json={"content": "reply", "parent_comment_id": 424242},
        auth=auth,
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Comment not found"


@pytest.mark.asyncio
async def test_reply_to_parent_on_another_article(async_client: AsyncClient, register):
    first_id, auth = await _setup_article(async_client, register, "crossposter")
    resp = await async_client.post("/api/v1/articles", json={"title": "Other", "content": "c"}, auth=auth)
    second_id = resp.json()["id"]
    parent = await _comment(async_client, first_id, auth, "on first")

    resp = await async_client.post(
        f"/api/v1/articles/{second_id}/comments",
        json={"content": "wrong thread", "parent_comment_id": parent["id"]},
        auth=auth,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_comment_tree_ordering(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    older = await _comment(async_client, article_id, auth, "older root")
    newer = await _comment(async_client, article_id, auth, "newer root")
    first_reply = await _comment(async_client, article_id, auth, "first reply", older["id"])
    second_reply = await _comment(async_client, article_id, auth, "second reply", older["id"])
    nested = await _comment(async_client, article_id, auth, "nested", first_reply["id"])

    resp = await async_client.get(f"/api/v1/articles/{article_id}/comments")
    assert resp.status_code == 200
    roots = resp.json()

    assert [c["id"] for c in roots] == [newer["id"], older["id"]]
    replies = roots[1]["child_comments"]
    assert [c["id"] for c in replies] == [first_reply["id"], second_reply["id"]]
    assert [c["id"] for c in replies[0]["child_comments"]] == [nested["id"]]
    assert roots[0]["child_comments"] == []


@pytest.mark.asyncio
async def test_article_detail_embeds_comment_tree(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    root = await _comment(async_client, article_id, auth, "root")
    reply = await _comment(async_client, article_id, auth, "reply", root["id"])

    resp = await async_client.get(f"/api/v1/articles/{article_id}")
    comments = resp.json()["comments"]
    assert [c["id"] for c in comments] == [root["id"]]
    assert [c["id"] for c in comments[0]["child_comments"]] == [reply["id"]]


@pytest.mark.asyncio
async def test_comments_of_nonexistent_article(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/articles/99999/comments")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_comment_cascades_to_replies(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    root = await _comment(async_client, article_id, auth, "root")
    reply = await _comment(async_client, article_id, auth, "reply", root["id"])
    await _comment(async_client, article_id, auth, "deep", reply["id"])
    survivor = await _comment(async_client, article_id, auth, "survivor")

    resp = await async_client.delete(f"/api/v1/comments/{root['id']}", auth=auth)
    assert resp.status_code == 204

    remaining = (await async_client.get(f"/api/v1/articles/{article_id}/comments")).json()
    assert [c["id"] for c in remaining] == [survivor["id"]]

    metrics = (await async_client.get("/api/v1/metrics")).json()
    assert metrics["total_comments"] == 1


@pytest.mark.asyncio
async def test_delete_comment_by_non_author(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    _, other = await register(async_client, "stranger")
    comment = await _comment(async_client, article_id, auth, "mine")

    resp = await async_client.delete(f"/api/v1/comments/{comment['id']}", auth=other)
    assert resp.status_code == 404

    remaining = (await async_client.get(f"/api/v1/articles/{article_id}/comments")).json()
    assert [c["id"] for c in remaining] == [comment["id"]]


@pytest.mark.asyncio
async def test_update_comment(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    comment = await _comment(async_client, article_id, auth, "typo")

    resp = await async_client.put(f"/api/v1/comments/{comment['id']}", json={"content": "fixed"}, auth=auth)
    assert resp.status_code == 200
    assert resp.json()["content"] == "fixed"

    tree = (await async_client.get(f"/api/v1/articles/{article_id}/comments")).json()
    assert [c["content"] for c in tree] == ["fixed"]


@pytest.mark.asyncio
async def test_update_comment_by_non_author(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    _, other = await register(async_client, "editor")
    comment = await _comment(async_client, article_id, auth, "original")

    resp = await async_client.put(f"/api/v1/comments/{comment['id']}", json={"content": "edited"}, auth=other)
    assert resp.status_code == 404

    tree = (await async_client.get(f"/api/v1/articles/{article_id}/comments")).json()
    assert [c["content"] for c in tree] == ["original"]


@pytest.mark.asyncio
async def test_update_nonexistent_comment(async_client: AsyncClient, register):
    _, auth = await register(async_client, "phantom")
    resp = await async_client.put("/api/v1/comments/99999", json={"content": "x"}, auth=auth)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_comment_validation(async_client: AsyncClient, register):
    article_id, auth = await _setup_article(async_client, register)
    comment = await _comment(async_client, article_id, auth, "ok")
    resp = await async_client.put(f"/api/v1/comments/{comment['id']}", json={"content": ""}, auth=auth)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_delete_nonexistent_comment(async_client: AsyncClient, register):
    _, auth = await register(async_client, "nobody")
    resp = await async_client.delete("/api/v1/comments/99999", auth=auth)
    assert resp.status_code == 404
