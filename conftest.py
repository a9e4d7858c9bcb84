# conftest.py
"""
공용 테스트 픽스처

Firestore는 mock-firestore로, Storage 버킷과 완성 API는 간단한 가짜 객체로 대체합니다.
"""
from datetime import datetime, timedelta, timezone

import pytest
from mockfirestore import MockFirestore

from help_exchange import create_app
from help_exchange.chat.errors import InvalidCredentialError
from help_exchange.services.storage_service import StorageService

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class ScriptedCompletion:
    """미리 정해둔 응답(또는 예외)을 순서대로 돌려주는 완성 API 대역."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.prompts = []
        self.api_keys = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def complete(self, prompt, api_key=None, model=None):
        self.prompts.append(prompt)
        self.api_keys.append(api_key)
        if not self.responses:
            return ""
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def verify_api_key(self, api_key):
        try:
            self.complete("Test", api_key=api_key)
            return True
        except InvalidCredentialError:
            return False


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    def exists(self):
        return self.name in self.bucket.uploaded

    def make_public(self):
        self.bucket.public.add(self.name)

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"

    def generate_signed_url(self, **kwargs):
        self.bucket.signed_requests.append(kwargs)
        return f"https://signed.example.com/{self.name}"


class FakeBucket:
    name = "testing-bucket"

    def __init__(self):
        self.uploaded = set()
        self.public = set()
        self.signed_requests = []

    def blob(self, name):
        return FakeBlob(self, name)


def add_user(db, user_id, name, image=None, **extra):
    data = {"user_id": user_id, "name": name, "image": image, "email": None, "is_anonymous": False,
            "password_hash": None, "bio": None, "location": None, "preferences": {}, "created_at": BASE_TIME}
    data.update(extra)
    db.collection('users').document(user_id).set(data)
    return data


def add_post(db, post_id, minutes=0, **fields):
    """created_at을 BASE_TIME + minutes로 고정한 게시물 문서를 직접 넣습니다."""
    data = {
        "post_id": post_id, "user_id": "owner", "username": "Owner", "user_avatar": "https://example.com/a.png",
        "title": f"title {post_id}", "description": "desc", "location": "Riyadh", "contact_info": "0500000000",
        "type": "helpNeeded", "tags": [], "images": [], "is_completed": False, "liked_by_users": [],
        "original_post_id": None, "created_at": BASE_TIME + timedelta(minutes=minutes),
    }
    data.update(fields)
    db.collection('posts').document(post_id).set(data)
    return data


def add_reply(db, reply_id, post_id, user_id="owner", username="Owner", minutes=0, text="reply"):
    data = {"reply_id": reply_id, "post_id": post_id, "user_id": user_id, "username": username,
            "user_avatar": "https://example.com/a.png", "text": text,
            "created_at": BASE_TIME + timedelta(minutes=minutes)}
    db.collection('replies').document(reply_id).set(data)
    return data


@pytest.fixture
def db():
    return MockFirestore()


@pytest.fixture
def completion():
    return ScriptedCompletion()


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def app(db, completion, bucket):
    app = create_app('testing', overrides={
        'db': db,
        'storage': StorageService(bucket=bucket),
        'completion': completion,
    })
    app.config['OPENAI_API_KEY'] = None
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signup(client):
    """회원가입 후 (user_id, Authorization 헤더)를 돌려주는 헬퍼"""
    def _signup(email="ali@example.com", name="Ali", password="password123"):
        response = client.post('/api/auth/signup', json={"email": email, "password": password, "name": name})
        assert response.status_code == 201
        body = response.get_json()
        return body['user_id'], {"Authorization": f"Bearer {body['access_token']}"}
    return _signup
