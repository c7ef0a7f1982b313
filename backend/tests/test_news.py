"""News CRUD, validation, listing, votes and comments."""
import math

import pytest
from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql

from conftest import ARTICLE_CONTENT, article_payload, auth, signup
from newshub.config import get_settings
from newshub.main import app
from newshub.news.models import Comment, News
from newshub.news.service import search_condition


async def create(client, token, **overrides):
    resp = await client.post("/api/news", json=article_payload(**overrides), headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()


async def news_count(db) -> int:
    return (await db.execute(select(func.count(News.id)))).scalar_one()


class TestCreate:
    async def test_article(self, client, alice):
        body = await create(client, alice["token"])
        assert body["author"]["username"] == "alice"
        assert body["author"]["credibilityScore"] == 50
        assert body["categories"] == ["Weather", "Local"]
        assert body["viewCount"] == 0
        assert body["isModerated"] is False
        assert body["location"]["city"] == "Austin"

    async def test_requires_token(self, client):
        resp = await client.post("/api/news", json=article_payload())
        assert resp.status_code == 401

    async def test_short_article_content_rejected(self, client, db, alice):
        resp = await client.post(
            "/api/news", json=article_payload(content="x" * 50), headers=auth(alice["token"])
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Content must be at least 100 characters long"
        assert await news_count(db) == 0

    async def test_long_article_content_accepted(self, client, alice):
        body = await create(client, alice["token"], content="y" * 150, thumbnail="https://img.example.com/a.jpg")
        assert len(body["content"]) == 150

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"content": None}, "Content is required for articles"),
            ({"thumbnail": None}, "Thumbnail is required for articles"),
            ({"title": "Too short"}, "Title must be at least 10 characters long"),
            ({"description": "Brief text"}, "Description must be at least 20 characters long"),
            ({"categories": []}, "At least one category is required"),
            ({"categories": ["  "]}, "At least one category is required"),
        ],
    )
    async def test_article_rules(self, client, db, alice, overrides, message):
        resp = await client.post("/api/news", json=article_payload(**overrides), headers=auth(alice["token"]))
        assert resp.status_code == 400
        assert resp.json()["message"] == message
        assert await news_count(db) == 0

    async def test_video_requires_url(self, client, db, alice):
        resp = await client.post(
            "/api/news",
            json=article_payload(type="video", content=None, thumbnail=None),
            headers=auth(alice["token"]),
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Video URL is required for video news"
        assert await news_count(db) == 0

    async def test_video_skips_article_rules(self, client, alice):
        body = await create(
            client,
            alice["token"],
            type="video",
            content="short",
            thumbnail=None,
            videoUrl="https://video.example.com/clip.mp4",
        )
        assert body["type"] == "video"
        assert body["videoUrl"] == "https://video.example.com/clip.mp4"

    async def test_article_ignores_video_url(self, client, alice):
        body = await create(client, alice["token"], videoUrl="https://video.example.com/clip.mp4")
        assert body["videoUrl"] == ""

    async def test_coordinates_round_trip(self, client, alice):
        location = {"city": "Austin", "state": "Texas", "country": "USA", "coordinates": {"lat": 30.27, "lng": -97.74}}
        body = await create(client, alice["token"], location=location)
        assert body["location"]["coordinates"] == {"lat": 30.27, "lng": -97.74}


class TestRead:
    async def test_every_read_counts_a_view(self, client, alice):
        news_id = (await create(client, alice["token"]))["id"]
        for expected in range(1, 5):
            resp = await client.get(f"/api/news/{news_id}")
            assert resp.status_code == 200
            assert resp.json()["viewCount"] == expected

    async def test_includes_full_author_profile(self, client, alice):
        news_id = (await create(client, alice["token"]))["id"]
        author = (await client.get(f"/api/news/{news_id}")).json()["author"]
        assert author["username"] == "alice"
        assert "bio" in author
        assert "followersCount" in author
        assert "joinedDate" in author
        assert "email" not in author

    async def test_missing(self, client):
        resp = await client.get("/api/news/12345")
        assert resp.status_code == 404
        assert resp.json()["message"] == "News article not found"


class TestUpdateDelete:
    async def test_author_can_update(self, client, alice):
        news = await create(client, alice["token"])
        resp = await client.patch(
            f"/api/news/{news['id']}",
            json={"title": "Flood waters recede downtown", "categories": ["Weather"]},
            headers=auth(alice["token"]),
        )
        assert resp.status_code == 200
        assert resp.json()["title"] == "Flood waters recede downtown"
        assert resp.json()["categories"] == ["Weather"]
        assert resp.json()["description"] == news["description"]

    async def test_update_checks_supplied_fields(self, client, alice):
        news = await create(client, alice["token"])
        resp = await client.patch(f"/api/news/{news['id']}", json={"title": "short"}, headers=auth(alice["token"]))
        assert resp.status_code == 400

    async def test_stranger_cannot_update(self, client, db, alice, bob):
        news = await create(client, alice["token"])
        resp = await client.patch(
            f"/api/news/{news['id']}",
            json={"title": "Hijacked headline text"},
            headers=auth(bob["token"]),
        )
        assert resp.status_code == 403
        assert resp.json()["message"] == "Not authorized to update this news article"
        stored = (await db.execute(select(News.title).where(News.id == news["id"]))).scalar_one()
        assert stored == news["title"]

    async def test_stranger_cannot_delete(self, client, db, alice, bob):
        news = await create(client, alice["token"])
        resp = await client.delete(f"/api/news/{news['id']}", headers=auth(bob["token"]))
        assert resp.status_code == 403
        assert await news_count(db) == 1

    async def test_admin_can_update_and_delete(self, client, alice, admin):
        news = await create(client, alice["token"])
        resp = await client.patch(
            f"/api/news/{news['id']}",
            json={"description": "Edited by the moderation team for accuracy."},
            headers=auth(admin["token"]),
        )
        assert resp.status_code == 200
        resp = await client.delete(f"/api/news/{news['id']}", headers=auth(admin["token"]))
        assert resp.status_code == 200

    async def test_author_can_delete(self, client, alice):
        news = await create(client, alice["token"])
        resp = await client.delete(f"/api/news/{news['id']}", headers=auth(alice["token"]))
        assert resp.status_code == 200
        assert resp.json()["message"] == "News article deleted successfully"
        assert (await client.get(f"/api/news/{news['id']}")).status_code == 404

    async def test_update_missing(self, client, alice):
        resp = await client.patch("/api/news/999", json={"title": "Does not matter at all"}, headers=auth(alice["token"]))
        assert resp.status_code == 404


class TestList:
    async def test_pagination(self, client, alice):
        for i in range(7):
            await create(client, alice["token"], title=f"Community update number {i}")
        for limit in (1, 2, 3, 5, 7, 10):
            resp = await client.get("/api/news", params={"page": 1, "limit": limit})
            body = resp.json()
            assert body["totalPages"] == math.ceil(7 / limit)
            assert body["currentPage"] == 1
            assert len(body["news"]) == min(limit, 7)

        resp = await client.get("/api/news", params={"page": 4, "limit": 3})
        assert resp.status_code == 200
        assert resp.json()["news"] == []
        assert resp.json()["totalPages"] == 3

    async def test_newest_first_by_default(self, client, alice):
        first = await create(client, alice["token"], title="The first story of the day")
        second = await create(client, alice["token"], title="The second story of the day")
        ids = [n["id"] for n in (await client.get("/api/news")).json()["news"]]
        assert ids == [second["id"], first["id"]]

    async def test_category_filter(self, client, alice):
        await create(client, alice["token"], categories=["Politics"])
        await create(client, alice["token"], categories=["Sports", "Local"])
        await create(client, alice["token"], categories=["Tech"])

        resp = await client.get("/api/news", params={"category": "politics"})
        assert [n["categories"] for n in resp.json()["news"]] == [["Politics"]]

        resp = await client.get("/api/news", params={"category": "POLITICS, sports"})
        assert len(resp.json()["news"]) == 2
        assert resp.json()["totalPages"] == 1

    async def test_location_filter(self, client, alice):
        await create(client, alice["token"], location={"city": "Austin", "state": "Texas", "country": "USA"})
        await create(client, alice["token"], location={"city": "Lyon", "state": "Rhone", "country": "France"})

        resp = await client.get("/api/news", params={"location": "fran"})
        assert [n["location"]["city"] for n in resp.json()["news"]] == ["Lyon"]
        resp = await client.get("/api/news", params={"location": "tex"})
        assert [n["location"]["city"] for n in resp.json()["news"]] == ["Austin"]

    async def test_search(self, client, alice):
        await create(client, alice["token"], title="Wildfire threatens hillside homes")
        await create(client, alice["token"], title="City council approves budget")
        resp = await client.get("/api/news", params={"search": "wildfire"})
        titles = [n["title"] for n in resp.json()["news"]]
        assert titles == ["Wildfire threatens hillside homes"]

    async def test_sort_popular_and_trending(self, client, alice, bob):
        quiet = await create(client, alice["token"], title="A quiet story nobody read")
        viewed = await create(client, alice["token"], title="A story everybody has read")
        voted = await create(client, alice["token"], title="A story with many upvotes")
        for _ in range(3):
            await client.get(f"/api/news/{viewed['id']}")
        await client.get(f"/api/news/{voted['id']}")
        await client.post(f"/api/news/{voted['id']}/vote", json={"vote": "up"}, headers=auth(bob["token"]))

        popular = [n["id"] for n in (await client.get("/api/news", params={"sortBy": "popular"})).json()["news"]]
        assert popular[0] == viewed["id"]
        assert popular[-1] == quiet["id"]

        trending = [n["id"] for n in (await client.get("/api/news", params={"sortBy": "trending"})).json()["news"]]
        assert trending[:2] == [voted["id"], viewed["id"]]

    async def test_invalid_page(self, client):
        resp = await client.get("/api/news", params={"page": 0})
        assert resp.status_code == 400

    async def test_limit_above_maximum(self, client, settings, alice):
        app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"MAX_PAGE_SIZE": 2})
        for i in range(3):
            await create(client, alice["token"], title=f"Community update number {i}")

        resp = await client.get("/api/news", params={"limit": 3})
        assert resp.status_code == 400
        assert resp.json()["message"] == "limit must be at most 2"

        resp = await client.get("/api/news", params={"limit": 2})
        assert resp.json()["totalPages"] == 2
        assert len(resp.json()["news"]) == 2

    def test_postgres_search_uses_index_expression(self):
        stmt = select(News.id).where(search_condition("postgresql", "flood"))
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert (
            "to_tsvector('english', coalesce(news.title, '') || ' ' || "
            "coalesce(news.description, '') || ' ' || coalesce(news.content, ''))"
        ) in sql
        assert "plainto_tsquery('english', " in sql


class TestVotes:
    async def test_up_and_down(self, client, alice, bob):
        news = await create(client, alice["token"])
        for vote in ("up", "up", "down"):
            resp = await client.post(f"/api/news/{news['id']}/vote", json={"vote": vote}, headers=auth(bob["token"]))
            assert resp.status_code == 200
        assert resp.json() == {"upvotes": 2, "downvotes": 1}

    async def test_requires_token(self, client, alice):
        news = await create(client, alice["token"])
        resp = await client.post(f"/api/news/{news['id']}/vote", json={"vote": "up"})
        assert resp.status_code == 401

    async def test_bad_direction(self, client, alice):
        news = await create(client, alice["token"])
        resp = await client.post(f"/api/news/{news['id']}/vote", json={"vote": "sideways"}, headers=auth(alice["token"]))
        assert resp.status_code == 400

    async def test_missing_news(self, client, alice):
        resp = await client.post("/api/news/404/vote", json={"vote": "up"}, headers=auth(alice["token"]))
        assert resp.status_code == 404


class TestComments:
    async def test_add_and_list(self, client, alice, bob):
        news = await create(client, alice["token"])
        resp = await client.post(
            f"/api/news/{news['id']}/comments",
            json={"content": "  Stay safe everyone  "},
            headers=auth(bob["token"]),
        )
        assert resp.status_code == 201
        comment = resp.json()
        assert comment["content"] == "Stay safe everyone"
        assert comment["author"]["username"] == "bob"
        assert comment["newsId"] == news["id"]
        assert comment["parentId"] is None

        reply = await client.post(
            f"/api/news/{news['id']}/comments",
            json={"content": "Thanks!", "parentId": comment["id"]},
            headers=auth(alice["token"]),
        )
        assert reply.status_code == 201
        assert reply.json()["parentId"] == comment["id"]

        listed = (await client.get(f"/api/news/{news['id']}/comments")).json()
        assert [c["id"] for c in listed] == [comment["id"], reply.json()["id"]]
        assert (await client.get(f"/api/news/{news['id']}")).json()["comments"] == 2

    async def test_blank_content(self, client, db, alice):
        news = await create(client, alice["token"])
        resp = await client.post(f"/api/news/{news['id']}/comments", json={"content": "   "}, headers=auth(alice["token"]))
        assert resp.status_code == 400
        assert resp.json()["message"] == "Comment content is required"
        assert (await db.execute(select(func.count(Comment.id)))).scalar_one() == 0

    async def test_parent_from_other_news(self, client, alice):
        first = await create(client, alice["token"])
        second = await create(client, alice["token"])
        parent = (
            await client.post(f"/api/news/{first['id']}/comments", json={"content": "Hello"}, headers=auth(alice["token"]))
        ).json()
        resp = await client.post(
            f"/api/news/{second['id']}/comments",
            json={"content": "Wrong thread", "parentId": parent["id"]},
            headers=auth(alice["token"]),
        )
        assert resp.status_code == 404

    async def test_missing_news(self, client, alice):
        resp = await client.post("/api/news/77/comments", json={"content": "Hi"}, headers=auth(alice["token"]))
        assert resp.status_code == 404
        assert (await client.get("/api/news/77/comments")).status_code == 404

    async def test_deleting_news_removes_comments(self, client, db, alice):
        news = await create(client, alice["token"])
        await client.post(f"/api/news/{news['id']}/comments", json={"content": "First"}, headers=auth(alice["token"]))
        await client.delete(f"/api/news/{news['id']}", headers=auth(alice["token"]))
        assert (await db.execute(select(func.count(Comment.id)))).scalar_one() == 0


async def test_end_to_end_article_submission(client):
    alice = await signup(client, "alice", "a@x.com", "secret1")
    resp = await client.post(
        "/api/news", json=article_payload(content="z" * 50), headers=auth(alice["token"])
    )
    assert resp.status_code == 400
    assert "100 characters" in resp.json()["message"]

    resp = await client.post(
        "/api/news",
        json=article_payload(content=ARTICLE_CONTENT[:150], thumbnail="https://img.example.com/t.jpg"),
        headers=auth(alice["token"]),
    )
    assert resp.status_code == 201
