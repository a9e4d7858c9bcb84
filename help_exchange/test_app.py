# help_exchange/test_app.py
"""
HTTP 계층 통합 테스트

mock-firestore와 가짜 Storage/완성 API를 주입한 앱으로 주요 흐름을 확인합니다.
"""
import json

from conftest import add_post

POST_BODY = {
    "title": "Math tutoring needed",
    "description": "My son needs help with algebra",
    "location": "Jeddah",
    "contact_info": "0538765432",
    "type": "helpNeeded",
    "tags": ["tutoring"],
}


# --- 인증 ---

def test_signup_signin_and_me(client, signup):
    user_id, headers = signup()

    me = client.get('/api/auth/me', headers=headers).get_json()
    assert me["user"]["user_id"] == user_id
    assert "password_hash" not in me["user"]

    identity = client.get('/api/auth/identity', headers=headers).get_json()["identity"]
    assert identity == {"subject": user_id, "name": "Ali", "picture_url": None, "email": "ali@example.com"}

    response = client.post('/api/auth/signin', json={"email": "ali@example.com", "password": "password123"})
    assert response.status_code == 200
    assert response.get_json()["user_id"] == user_id


def test_auth_errors(client, signup):
    signup()
    duplicate = client.post('/api/auth/signup', json={"email": "ali@example.com", "password": "password123"})
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error_code"] == "EMAIL_ALREADY_EXISTS"

    wrong = client.post('/api/auth/signin', json={"email": "ali@example.com", "password": "nope-nope"})
    assert wrong.status_code == 401
    assert wrong.get_json()["error_code"] == "INVALID_CREDENTIALS"


def test_anonymous_user_and_unauthenticated_reads(client):
    assert client.get('/api/auth/me').get_json() == {"user": None}
    assert client.get('/api/auth/identity').get_json() == {"identity": None}

    response = client.post('/api/auth/anonymous')
    assert response.status_code == 201
    assert response.get_json()["user_info"]["is_anonymous"] is True


def test_logout_revokes_tokens(client):
    tokens = client.post('/api/auth/signup', json={"email": "ali@example.com", "password": "password123"}).get_json()
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}
    assert client.get('/api/posts/mine', headers=headers).status_code == 200

    response = client.post('/api/auth/logout', json={
        "access_token": tokens["access_token"], "refresh_token": tokens["refresh_token"],
    })
    assert response.status_code == 200

    assert client.post('/api/posts', json=POST_BODY, headers=headers).status_code == 401
    refresh_headers = {"Authorization": f"Bearer {tokens['refresh_token']}"}
    assert client.post('/api/auth/token/refresh', headers=refresh_headers).status_code == 401


# --- 게시물 / 댓글 ---

def test_post_lifecycle(client, signup):
    _, headers = signup()

    created = client.post('/api/posts', json=POST_BODY, headers=headers)
    assert created.status_code == 201
    post = created.get_json()
    assert post["username"] == "Ali"
    assert post["like_count"] == 0

    listed = client.get('/api/posts?type=helpNeeded&tags=tutoring,moving').get_json()["posts"]
    assert [p["post_id"] for p in listed] == [post["post_id"]]
    assert client.get('/api/posts?type=helpNeeded&location=riyadh').get_json()["posts"] == []

    liked = client.post(f"/api/posts/{post['post_id']}/like", headers=headers).get_json()
    assert liked == {"is_liked": True, "like_count": 1}

    assert client.post(f"/api/posts/{post['post_id']}/complete", headers=headers).status_code == 200
    assert client.get('/api/posts?type=helpNeeded').get_json()["posts"] == []
    assert len(client.get('/api/posts/completed').get_json()["posts"]) == 1

    assert client.delete(f"/api/posts/{post['post_id']}", headers=headers).status_code == 204
    assert client.get(f"/api/posts/{post['post_id']}").get_json() == {"post": None}


def test_post_validation_and_permissions(client, db, signup):
    _, headers = signup()
    add_post(db, "someone-elses", user_id="other")

    assert client.post('/api/posts', json=POST_BODY).status_code == 401
    assert client.post('/api/posts', json={**POST_BODY, "type": "other"}, headers=headers).status_code == 400
    assert client.post('/api/posts', json={**POST_BODY, "type": "achievement"}, headers=headers).status_code == 400
    assert client.get('/api/posts').status_code == 400

    forbidden = client.delete('/api/posts/someone-elses', headers=headers)
    assert forbidden.status_code == 403
    assert forbidden.get_json()["error_code"] == "FORBIDDEN"
    assert client.delete('/api/posts/missing', headers=headers).status_code == 404


def test_achievement_route(client, db, signup):
    _, headers = signup()
    add_post(db, "origin", description="Fix my sink", location="Medina")

    response = client.post('/api/posts/achievements', json={
        "original_post_id": "origin", "title": "Sink fixed", "description": "Done in an hour",
    }, headers=headers)

    assert response.status_code == 201
    assert response.get_json()["location"] == "Medina"
    assert client.get('/api/posts/origin').get_json()["post"]["is_completed"] is True
    missing = client.post('/api/posts/achievements', json={
        "original_post_id": "missing", "title": "x", "description": "y",
    }, headers=headers)
    assert missing.status_code == 404


def test_replies(client, db, signup):
    _, headers = signup()
    add_post(db, "p1")

    created = client.post('/api/posts/p1/replies', json={"text": "I can help"}, headers=headers)
    assert created.status_code == 201
    assert created.get_json()["username"] == "Ali"

    assert client.post('/api/posts/p1/replies', json={"text": ""}, headers=headers).status_code == 400
    assert client.post('/api/posts/p1/replies', json={"text": "    "}, headers=headers).status_code == 400
    trimmed = client.post('/api/posts/p1/replies', json={"text": "  on my way  "}, headers=headers)
    assert trimmed.get_json()["text"] == "on my way"
    assert client.post('/api/posts/p1/replies', json={"text": "x" * 1001}, headers=headers).status_code == 400
    assert client.post('/api/posts/missing/replies', json={"text": "hi"}, headers=headers).status_code == 404

    replies = client.get('/api/posts/p1/replies').get_json()["replies"]
    assert sorted(r["text"] for r in replies) == ["I can help", "on my way"]


# --- 사용자 ---

def test_profile_update_cascades_name(client, signup):
    user_id, headers = signup()
    post_id = client.post('/api/posts', json=POST_BODY, headers=headers).get_json()["post_id"]

    response = client.patch('/api/users/me', json={"name": "Ali M.", "theme": "dark"}, headers=headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["user"]["name"] == "Ali M."
    assert body["user"]["preferences"]["theme"] == "dark"
    assert body["cascade"] == {"posts_updated": 1, "replies_updated": 0, "failed": []}
    assert client.get(f'/api/posts/{post_id}').get_json()["post"]["username"] == "Ali M."
    assert client.get(f'/api/users/{user_id}').get_json()["post_count"] == 1


def test_profile_update_rejects_unknown_keys(client, signup):
    _, headers = signup()

    assert client.patch('/api/users/me', json={"email": "x@example.com"}, headers=headers).status_code == 400
    assert client.patch('/api/users/me', json={"theme": "blue"}, headers=headers).status_code == 400
    assert client.patch('/api/users/me', json={}, headers=headers).status_code == 400


def test_uploads_and_profile_image(client, bucket, signup):
    user_id, headers = signup()

    url_info = client.post('/api/uploads/url', json={
        "upload_type": "user_profile", "filename": "me.png", "content_type": "image/png",
    }, headers=headers).get_json()
    file_path = url_info["file_path"]
    assert file_path.startswith(f"user_profiles/{user_id}/")

    assert client.post('/api/uploads/finalize', json={"file_path": file_path}, headers=headers).status_code == 404
    bucket.uploaded.add(file_path)

    finalized = client.post('/api/uploads/finalize', json={"file_path": file_path}, headers=headers)
    assert finalized.status_code == 200
    assert client.post('/api/uploads/finalize', json={"file_path": "posts/other/a.png"}, headers=headers).status_code == 403

    updated = client.patch('/api/users/me/profile-image', json={"file_path": file_path}, headers=headers)
    assert updated.status_code == 200
    assert updated.get_json()["image"] == finalized.get_json()["public_url"]


# --- 대화형 작성 도우미 ---

def test_chat_reply_uses_header_key(client, completion, signup):
    _, headers = signup()
    completion.queue("assistant: What kind of help do you need?")

    response = client.post('/api/chat/reply', json={"intent": "need_help", "language": "en"},
                           headers={**headers, "X-Completion-Api-Key": "sk-user-key-123"})

    body = response.get_json()
    assert body["reply"] == "What kind of help do you need?"
    assert body["messages"] == [
        {"role": "user", "text": "I need help with something"},
        {"role": "assistant", "text": "What kind of help do you need?"},
    ]
    assert body["notices"] == []
    assert completion.api_keys == ["sk-user-key-123"]


def test_chat_reply_without_any_key(client, completion, signup):
    _, headers = signup()

    body = client.post('/api/chat/reply', json={"intent": "offer_help", "message": "hello there"}, headers=headers).get_json()

    assert body["reply"] is None
    assert [n["code"] for n in body["notices"]] == ["NO_API_KEY"]
    assert completion.prompts == []


def test_chat_extract_and_submit(client, completion, signup):
    _, headers = signup()
    completion.queue(json.dumps({
        "title": "Help moving furniture", "description": "Two people on Friday",
        "location": "Riyadh", "contactInfo": "0555123456", "tags": ["moving"],
    }))
    messages = [
        {"role": "user", "text": "I need help with something"},
        {"role": "assistant", "text": "What do you need?"},
        {"role": "user", "text": "Moving furniture in Riyadh, 0555123456"},
    ]
    key_headers = {**headers, "X-Completion-Api-Key": "sk-user-key-123"}

    extracted = client.post('/api/chat/extract', json={"intent": "need_help", "messages": messages},
                            headers=key_headers).get_json()
    assert extracted["extracted"] is True
    draft = extracted["draft"]
    assert draft["type"] == "helpNeeded"

    incomplete = client.post('/api/chat/submit', json={"draft": {**draft, "contact_info": " "}}, headers=headers)
    assert incomplete.status_code == 400
    assert incomplete.get_json()["missing_fields"] == ["contact_info"]

    submitted = client.post('/api/chat/submit', json={"draft": draft}, headers=headers)
    assert submitted.status_code == 201
    post = client.get(f"/api/posts/{submitted.get_json()['post_id']}").get_json()["post"]
    assert post["title"] == "Help moving furniture"
    assert post["images"] == []


def test_chat_extract_rejects_search_intent(client, signup):
    _, headers = signup()
    body = client.post('/api/chat/extract', json={"intent": "search", "messages": []},
                       headers={**headers, "X-Completion-Api-Key": "sk-user-key-123"}).get_json()
    assert body["draft"] is None
    assert [n["code"] for n in body["notices"]] == ["CANNOT_CREATE_POST_WITHOUT_INTENT"]


def test_verify_api_key(client, signup):
    _, headers = signup()

    assert client.post('/api/chat/api-key/verify', json={"api_key": "short"}, headers=headers).get_json() == {"valid": False}
    assert client.post('/api/chat/api-key/verify', json={"api_key": "sk-user-key-123"}, headers=headers).get_json() == {"valid": True}


# --- 목업 데이터 ---

def test_mock_data_import_and_clear(client, signup):
    _, headers = signup()
    assert client.get('/api/mock-data/status').get_json() == {"arabic_data_count": 0, "arabic_data_present": False}

    imported = client.post('/api/mock-data/import', headers=headers)
    assert imported.status_code == 201
    assert imported.get_json()["posts_imported"] == 13
    assert client.get('/api/mock-data/status').get_json()["arabic_data_present"] is True

    cleared = client.delete('/api/mock-data', headers=headers).get_json()
    assert cleared == {"deleted_count": 13, "replies_deleted": 13}
    assert client.get('/api/mock-data/status').get_json()["arabic_data_count"] == 0
