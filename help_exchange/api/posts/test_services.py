# help_exchange/api/posts/test_services.py
import pytest

from conftest import add_post, add_user
from help_exchange.api.posts.services import PostService, DEFAULT_AVATAR_URL


@pytest.fixture
def service(db):
    return PostService(db=db)


def test_list_filters_by_tag_newest_first_and_skips_completed(db, service):
    add_post(db, "old", minutes=1, tags=["tutoring", "math"])
    add_post(db, "new", minutes=5, tags=["tutoring"])
    add_post(db, "done", minutes=9, tags=["tutoring"], is_completed=True)
    add_post(db, "other-tag", minutes=7, tags=["moving"])
    add_post(db, "offered", minutes=8, tags=["tutoring"], type="helpOffered")

    posts = service.list_posts("helpNeeded", tag_filters=["tutoring"])

    assert [p["post_id"] for p in posts] == ["new", "old"]


def test_list_location_filter_is_case_insensitive_substring(db, service):
    add_post(db, "riyadh", minutes=1, location="Al Nuzha, Riyadh")
    add_post(db, "jeddah", minutes=2, location="Jeddah")

    posts = service.list_posts("helpNeeded", location_filter="riyADH")

    assert [p["post_id"] for p in posts] == ["riyadh"]


def test_achievements_list_includes_any_completion_state(db, service):
    add_post(db, "origin", minutes=1)
    add_post(db, "ach", minutes=2, type="achievement", original_post_id="origin", is_completed=True)

    assert [p["post_id"] for p in service.list_posts("achievement")] == ["ach"]


def test_list_rejects_unknown_type(service):
    with pytest.raises(ValueError):
        service.list_posts("somethingElse")


def test_list_completed_returns_only_help_posts(db, service):
    add_post(db, "needed-done", minutes=1, is_completed=True)
    add_post(db, "offered-done", minutes=3, type="helpOffered", is_completed=True)
    add_post(db, "open", minutes=4)
    add_post(db, "ach", minutes=5, type="achievement", is_completed=True, original_post_id="needed-done")

    assert [p["post_id"] for p in service.list_completed()] == ["offered-done", "needed-done"]


def test_filter_suggestions(db, service):
    add_post(db, "a", location="Riyadh", tags=["b", "a"])
    add_post(db, "b", location="Jeddah", tags=["a"])

    assert service.filter_suggestions() == {"locations": ["Jeddah", "Riyadh"], "tags": ["a", "b"]}


def test_list_by_user(db, service):
    add_post(db, "mine-1", minutes=1, user_id="me")
    add_post(db, "mine-2", minutes=2, user_id="me")
    add_post(db, "theirs", minutes=3, user_id="them")

    assert [p["post_id"] for p in service.list_by_user("me")] == ["mine-2", "mine-1"]
    assert service.list_by_user(None) == []
    assert service.count_posts_by_user("me") == 2


def test_get_post_by_id_returns_none_when_missing(db, service):
    add_post(db, "p1")
    assert service.get_post_by_id("p1")["post_id"] == "p1"
    assert service.get_post_by_id("nope") is None


def test_create_denormalises_author(db, service):
    add_user(db, "u1", "Ali", image="https://example.com/ali.png")

    post = service.create_post("u1", "Need a ride", "To the hospital", "Riyadh", "0555", "helpNeeded", ["ride"], [])

    stored = db.collection("posts").document(post["post_id"]).get().to_dict()
    assert stored["username"] == "Ali"
    assert stored["user_avatar"] == "https://example.com/ali.png"
    assert stored["is_completed"] is False
    assert stored["liked_by_users"] == []


def test_create_without_user_document_uses_fallbacks(service):
    post = service.create_post("ghost", "t", "d", "l", "c", "helpOffered", [], [])
    assert post["username"] == "Anonymous"
    assert post["user_avatar"] == DEFAULT_AVATAR_URL


def test_achievement_requires_existing_non_achievement_original(db, service):
    add_post(db, "origin")
    add_post(db, "ach", type="achievement", original_post_id="origin")

    with pytest.raises(ValueError):
        service.create_post("u1", "t", "d", "l", "c", "achievement", [], [])
    with pytest.raises(ValueError):
        service.create_post("u1", "t", "d", "l", "c", "achievement", [], [], original_post_id="missing")
    with pytest.raises(ValueError):
        service.create_post("u1", "t", "d", "l", "c", "achievement", [], [], original_post_id="ach")
    with pytest.raises(ValueError):
        service.create_post("u1", "t", "d", "l", "c", "helpNeeded", [], [], original_post_id="origin")

    created = service.create_post("u1", "t", "d", "l", "c", "achievement", [], [], original_post_id="origin")
    assert created["original_post_id"] == "origin"


def test_create_achievement_completes_original(db, service):
    add_post(db, "origin", description="Move my sofa", location="Jeddah", contact_info="0532")

    achievement = service.create_achievement("helper", "origin", "Sofa moved", "We did it", ["done"], [])

    assert db.collection("posts").document("origin").get().to_dict()["is_completed"] is True
    assert achievement["type"] == "achievement"
    assert achievement["location"] == "Jeddah"
    assert achievement["contact_info"] == "0532"
    assert achievement["description"] == "We did it\n\nOriginal request: Move my sofa"
    assert achievement["original_post_id"] == "origin"


def test_delete_only_by_author(db, service):
    add_post(db, "p1", user_id="author")

    with pytest.raises(PermissionError):
        service.delete_post("p1", "intruder")
    assert db.collection("posts").document("p1").get().exists

    assert service.delete_post("p1", "author") is True
    assert not db.collection("posts").document("p1").get().exists

    with pytest.raises(ValueError):
        service.delete_post("p1", "author")


def test_toggle_like_twice_restores_original_state(db, service):
    add_post(db, "p1", liked_by_users=["someone"])

    assert service.toggle_post_like("u1", "p1") == (True, 2)
    assert service.toggle_post_like("u1", "p1") == (False, 1)
    assert db.collection("posts").document("p1").get().to_dict()["liked_by_users"] == ["someone"]


def test_toggle_like_missing_post(service):
    with pytest.raises(ValueError):
        service.toggle_post_like("u1", "missing")


def test_mark_completed_by_any_user(db, service):
    add_post(db, "p1", user_id="author")

    service.mark_completed("p1", "someone-else")

    assert db.collection("posts").document("p1").get().to_dict()["is_completed"] is True
    with pytest.raises(ValueError):
        service.mark_completed("missing", "someone-else")
