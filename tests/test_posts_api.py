"""
Tests for posts: feed, detail, editing, likes and images.
"""
from conftest import make_image
from myblog.config import settings


def write(client, headers, title, **fields):
    payload = {"title": title, "content": f"content of {title}"}
    payload.update(fields)
    response = client.post("/posts", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreatePost:
    """Validation on create."""

    def test_create(self, client, alice, post):
        """Slug comes from the title; author and tags are returned."""
        assert post["slug"] == "hello-world"
        assert post["tags"] == ["intro"]
        assert post["author"]["nickname"] == "alice"
        assert post["can_edit"] is True
        assert post["likes_count"] == 0

    def test_title_and_content_required(self, client, alice):
        """Blank title or content is rejected."""
        _, headers = alice
        response = client.post("/posts", headers=headers, json={"title": "  ", "content": "x"})
        assert response.status_code == 422

    def test_at_most_five_tags(self, client, alice):
        """Six tags is one too many."""
        _, headers = alice
        response = client.post("/posts", headers=headers, json={
            "title": "Tags",
            "content": "x",
            "tags": ["a", "b", "c", "d", "e", "f"],
        })
        assert response.status_code == 422

    def test_duplicate_tag(self, client, alice):
        """The same tag cannot be added twice."""
        _, headers = alice
        response = client.post("/posts", headers=headers, json={
            "title": "Tags",
            "content": "x",
            "tags": ["a", " a "],
        })
        assert response.status_code == 422

    def test_slug_conflict(self, client, alice, post):
        """A second post with the same title gets 409."""
        _, headers = alice
        response = client.post("/posts", headers=headers, json={
            "title": "Hello World",
            "content": "again",
        })
        assert response.status_code == 409

    def test_requires_login(self, client):
        """Anonymous users cannot post."""
        response = client.post("/posts", json={"title": "x", "content": "y"})
        assert response.status_code == 401


class TestFeed:
    """Public feed listing."""

    def test_latest_first_and_private_hidden(self, client, alice):
        """Private posts never show in the feed."""
        _, headers = alice
        write(client, headers, "First")
        write(client, headers, "Second")
        write(client, headers, "Secret", is_public=False)

        body = client.get("/posts").json()

        assert [p["title"] for p in body["posts"]] == ["Second", "First"]
        assert body["has_more"] is False

    def test_popular_sort(self, client, alice, bob):
        """Popular orders by likes."""
        _, alice_headers = alice
        _, bob_headers = bob
        write(client, alice_headers, "Quiet")
        loved = write(client, alice_headers, "Loved")
        write(client, alice_headers, "Newest")

        client.post(f"/posts/{loved['id']}/like", headers=bob_headers)

        body = client.get("/posts", params={"sort": "popular"}).json()
        assert body["posts"][0]["title"] == "Loved"

    def test_pagination(self, client, alice):
        """Pages hold POSTS_PER_PAGE posts."""
        _, headers = alice
        for i in range(settings.POSTS_PER_PAGE + 2):
            write(client, headers, f"Post {i}")

        first = client.get("/posts", params={"page": 0}).json()
        second = client.get("/posts", params={"page": 1}).json()

        assert len(first["posts"]) == settings.POSTS_PER_PAGE
        assert first["has_more"] is True
        assert len(second["posts"]) == 2
        assert second["has_more"] is False


class TestPostDetail:
    """Reading, editing and deleting a post."""

    def test_views_increment(self, client, post):
        """Each read counts a view."""
        client.get(f"/posts/{post['id']}")
        response = client.get(f"/posts/{post['id']}")
        assert response.json()["views"] == 2

    def test_private_post_only_for_author(self, client, alice, bob):
        """Other users get 404 for a private post."""
        _, alice_headers = alice
        _, bob_headers = bob
        secret = write(client, alice_headers, "Diary", is_public=False)

        assert client.get(f"/posts/{secret['id']}", headers=alice_headers).status_code == 200
        assert client.get(f"/posts/{secret['id']}", headers=bob_headers).status_code == 404
        assert client.get(f"/posts/{secret['id']}").status_code == 404

    def test_edit_own_post(self, client, alice, post):
        """The author can edit and the slug follows the title."""
        _, headers = alice
        response = client.put(f"/posts/{post['id']}", headers=headers, json={
            "title": "Hello Again",
            "content": "Edited.",
            "tags": [],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Hello Again"
        assert body["slug"] == "hello-again"
        assert body["tags"] is None

    def test_cannot_edit_others_post(self, client, bob, post):
        """Only the author may edit."""
        _, headers = bob
        response = client.put(f"/posts/{post['id']}", headers=headers, json={
            "title": "Mine now",
            "content": "x",
        })
        assert response.status_code == 403

    def test_delete_removes_comments(self, client, alice, bob, post):
        """Deleting a post takes its comments with it."""
        _, alice_headers = alice
        _, bob_headers = bob
        client.post(f"/posts/{post['id']}/comments", headers=bob_headers, json={"content": "nice"})

        assert client.delete(f"/posts/{post['id']}", headers=bob_headers).status_code == 403
        assert client.delete(f"/posts/{post['id']}", headers=alice_headers).status_code == 200
        assert client.get(f"/posts/{post['id']}").status_code == 404
        assert client.get(f"/posts/{post['id']}/comments").status_code == 404


class TestPostLikes:
    """Like toggling and liked-post listing."""

    def test_toggle(self, client, bob, post):
        """Liking twice returns to zero."""
        _, headers = bob

        first = client.post(f"/posts/{post['id']}/like", headers=headers).json()
        assert first == {"liked": True, "likes_count": 1}

        detail = client.get(f"/posts/{post['id']}", headers=headers).json()
        assert detail["liked"] is True

        second = client.post(f"/posts/{post['id']}/like", headers=headers).json()
        assert second == {"liked": False, "likes_count": 0}

    def test_liked_posts(self, client, bob, post):
        """Liked posts are listed on the profile."""
        _, headers = bob
        client.post(f"/posts/{post['id']}/like", headers=headers)

        liked = client.get("/profiles/me/liked-posts", headers=headers).json()
        assert [p["id"] for p in liked] == [post["id"]]
        assert liked[0]["liked"] is True


class TestMyPosts:
    """Own post listing with filters."""

    def test_filter_private(self, client, alice):
        """Filters split public and private posts."""
        _, headers = alice
        write(client, headers, "Open")
        write(client, headers, "Closed", is_public=False)

        private = client.get("/profiles/me/posts", headers=headers, params={"filter": "private"}).json()
        public = client.get("/profiles/me/posts", headers=headers, params={"filter": "public"}).json()
        everything = client.get("/profiles/me/posts", headers=headers).json()

        assert [p["title"] for p in private] == ["Closed"]
        assert [p["title"] for p in public] == ["Open"]
        assert len(everything) == 2

    def test_sort_by_views(self, client, alice):
        """Most viewed first."""
        _, headers = alice
        seen = write(client, headers, "Seen")
        write(client, headers, "Unseen")
        client.get(f"/posts/{seen['id']}")

        posts = client.get("/profiles/me/posts", headers=headers, params={"sort": "views"}).json()
        assert posts[0]["title"] == "Seen"


class TestImageUpload:
    """Post image uploads."""

    def test_upload_and_resize(self, client, alice):
        """Large images are resized and stored."""
        _, headers = alice
        data = make_image(2400, 1200)

        response = client.post(
            "/posts/images",
            headers=headers,
            files={"file": ("big.png", data, "image/png")},
        )
        assert response.status_code == 200
        assert response.json()["url"].endswith(".jpg")

    def test_wrong_type(self, client, alice):
        """Text files are refused."""
        _, headers = alice
        response = client.post(
            "/posts/images",
            headers=headers,
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 415

    def test_avatar_upload(self, client, alice):
        """Avatar uploads update the profile."""
        _, headers = alice
        response = client.post(
            "/profiles/me/avatar",
            headers=headers,
            files={"file": ("me.png", make_image(50, 50), "image/png")},
        )
        assert response.status_code == 200
        assert "/media/avatars/" in response.json()["avatar_url"]

    def test_non_image_with_image_type(self, client, alice):
        """Bytes that are not an image are refused whatever the client claims."""
        _, headers = alice
        response = client.post(
            "/posts/images",
            headers=headers,
            files={"file": ("evil.html", b"<html><script>alert(1)</script></html>", "image/png")},
        )
        assert response.status_code == 400

    def test_extension_from_image_format(self, client, alice):
        """A real image is stored under its own format's extension."""
        _, headers = alice
        response = client.post(
            "/posts/images",
            headers=headers,
            files={"file": ("photo.html", make_image(30, 30), "image/png")},
        )
        assert response.status_code == 200
        assert response.json()["url"].endswith(".png")
