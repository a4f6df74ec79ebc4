from app.models.follow import Follow
from app.models.user import User
from app.schemas.user import IdentityUser


class TestUserProfile:

    def test_by_id_and_identity_id(self, client, user_factory, post_factory):
        user = user_factory("user_a", name="Alice")
        post_factory(user)
        post_factory(user)

        by_id = client.get(f"/api/users/{user.id}")
        by_identity = client.get("/api/users/user_a")
        assert by_id.status_code == 200
        assert by_id.json() == by_identity.json()

        body = by_id.json()
        assert body["user_id"] == user.id
        assert body["identity_id"] == "user_a"
        assert body["name"] == "Alice"
        assert body["posts_count"] == 2
        assert body["followers_count"] == 0
        assert body["following_count"] == 0
        assert body["is_following"] is False
        assert body["is_own_profile"] is False

    def test_is_following(self, client, db_session, user_factory, auth_headers):
        viewer = user_factory("user_a")
        target = user_factory("user_b")
        db_session.add(Follow(follower_id=viewer.id, following_id=target.id))
        db_session.commit()

        body = client.get(f"/api/users/{target.id}", headers=auth_headers("user_a")).json()
        assert body["is_following"] is True
        assert body["followers_count"] == 1
        assert body["is_own_profile"] is False

    def test_own_profile(self, client, user_factory, auth_headers):
        me = user_factory("user_a")
        body = client.get(f"/api/users/{me.id}", headers=auth_headers("user_a")).json()
        assert body["is_own_profile"] is True
        assert body["is_following"] is False

    def test_not_found(self, client):
        res = client.get("/api/users/user_missing")
        assert res.status_code == 404
        assert res.json()["error"] == "User not found"

    def test_unicode_digit_ref_is_not_found(self, client, user_factory):
        user_factory("user_a")
        res = client.get("/api/users/²")
        assert res.status_code == 404
        assert res.json()["error"] == "User not found"

    def test_out_of_range_numeric_ref(self, client):
        res = client.get("/api/users/99999999999999999999999")
        assert res.status_code == 404


class TestMe:

    def test_existing_user(self, client, user_factory, auth_headers):
        me = user_factory("user_a", name="Alice")
        res = client.get("/api/users/me", headers=auth_headers("user_a"))
        assert res.status_code == 200
        assert res.json()["user_id"] == me.id
        assert res.json()["is_own_profile"] is True

    def test_first_access_syncs_user(self, client, db_session, auth_headers, identity_records):
        identity_records["user_new"] = IdentityUser(
            identity_id="user_new",
            name="New Person",
            profile_image_url="https://img.test/new.png",
        )

        res = client.get("/api/users/me", headers=auth_headers("user_new"))
        assert res.status_code == 200
        assert res.json()["name"] == "New Person"
        assert res.json()["profile_image_url"] == "https://img.test/new.png"

        # 두 번째 요청은 기존 행을 그대로 사용
        client.get("/api/users/me", headers=auth_headers("user_new"))
        assert db_session.query(User).filter(User.identity_id == "user_new").count() == 1

    def test_sync_failure(self, client, db_session, auth_headers):
        res = client.get("/api/users/me", headers=auth_headers("user_ghost"))
        assert res.status_code == 404
        assert res.json() == {"error": "User not found", "details": "Failed to find user in database"}
        assert db_session.query(User).count() == 0

    def test_synced_user_can_act(self, client, user_factory, post_factory, auth_headers, identity_records):
        post = post_factory(user_factory("user_a"))
        identity_records["user_new"] = IdentityUser(identity_id="user_new", name="New Person")

        res = client.post("/api/likes", headers=auth_headers("user_new"), json={"postId": post.id})
        assert res.status_code == 200
        assert res.json()["like_count"] == 1

    def test_requires_auth(self, client):
        res = client.get("/api/users/me")
        assert res.status_code == 401
        assert res.headers["www-authenticate"] == "Bearer"
