# help_exchange/api/users/services.py
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from help_exchange.services.firestore_service import get_client

# 프로필 수정 요청이 다룰 수 있는 항목 (이외의 키는 거부)
PROFILE_FIELDS = ("name", "bio", "location")
PREFERENCE_FIELDS = ("language", "theme", "notifications_enabled", "profile_visible")

@dataclass(frozen=True)
class ProfileFieldUpdate:
    """사용자 문서 최상위 항목 하나의 변경."""
    name: str
    value: Any

@dataclass(frozen=True)
class PreferenceUpdate:
    """preferences 안의 항목 하나의 변경. 기존 환경설정에 병합됩니다."""
    name: str
    value: Any

ProfileUpdate = Union[ProfileFieldUpdate, PreferenceUpdate]

def build_profile_updates(data: Dict[str, Any]) -> List[ProfileUpdate]:
    """검증된 요청 본문을 변경 목록으로 바꿉니다. 알 수 없는 키는 ValueError."""
    updates: List[ProfileUpdate] = []
    for key, value in data.items():
        if key in PROFILE_FIELDS:
            updates.append(ProfileFieldUpdate(key, value))
        elif key in PREFERENCE_FIELDS:
            updates.append(PreferenceUpdate(key, value))
        else:
            raise ValueError(f"수정할 수 없는 항목입니다: {key}")
    return updates

def apply_profile_updates(user_data: Dict[str, Any], updates: List[ProfileUpdate]) -> Dict[str, Any]:
    """
    사용자 문서에 반영할 patch를 만듭니다.
    요청에 포함된 항목만 바뀌고, preferences는 기존 값과 병합됩니다.
    """
    patch: Dict[str, Any] = {}
    preferences = dict(user_data.get('preferences') or {})
    preferences_changed = False

    for update in updates:
        if isinstance(update, PreferenceUpdate):
            preferences[update.name] = update.value
            preferences_changed = True
        else:
            patch[update.name] = update.value

    if preferences_changed:
        patch['preferences'] = preferences
    return patch

@dataclass
class CascadeReport:
    """이름 변경 전파 결과. 실패한 문서는 되돌리지 않고 ID만 기록합니다."""
    posts_updated: int = 0
    replies_updated: int = 0
    failed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"posts_updated": self.posts_updated, "replies_updated": self.replies_updated, "failed": list(self.failed)}

class UserService:
    """사용자 프로필 관련 비즈니스 로직을 담당하는 서비스 클래스."""

    def __init__(self, db=None, storage_service=None, post_service=None):
        self.db = get_client(db)
        self.users_ref = self.db.collection('users')
        self.posts_ref = self.db.collection('posts')
        self.replies_ref = self.db.collection('replies')
        self.storage_service = storage_service
        self.post_service = post_service

    def get_user_profile(self, user_id: str, viewer_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        공개 프로필 정보와 게시물 수를 조회합니다.
        profile_visible이 꺼진 프로필은 본인에게만 보입니다.
        """
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            return None

        user_data = user_doc.to_dict()
        preferences = user_data.get('preferences') or {}
        if preferences.get('profile_visible') is False and viewer_id != user_id:
            return None

        user_data['post_count'] = self.post_service.count_posts_by_user(user_id) if self.post_service else 0
        return user_data

    def update_profile(self, user_id: str, updates: List[ProfileUpdate]) -> Tuple[Dict[str, Any], Optional[CascadeReport]]:
        """
        프로필을 수정합니다.
        이름이 바뀌면 작성한 게시물/댓글의 작성자 이름도 함께 갱신하고 그 결과를 반환합니다.
        """
        user_ref = self.users_ref.document(user_id)
        user_doc = user_ref.get()
        if not user_doc.exists:
            raise ValueError("사용자를 찾을 수 없습니다.")

        user_data = user_doc.to_dict()
        old_name = user_data.get('name')
        patch = apply_profile_updates(user_data, updates)
        if patch:
            user_ref.update(patch)
            user_data.update(patch)

        report = None
        new_name = patch.get('name')
        if new_name is not None and new_name != old_name:
            report = self.cascade_username(user_id, new_name)

        user_data['post_count'] = self.post_service.count_posts_by_user(user_id) if self.post_service else 0
        return user_data, report

    def cascade_username(self, user_id: str, new_name: str) -> CascadeReport:
        """
        사용자가 작성한 게시물과 댓글의 username을 하나씩 갱신합니다.
        한 문서의 실패가 나머지 갱신을 막지 않습니다.
        """
        report = CascadeReport()
        targets = (
            ('posts_updated', self.posts_ref.where('user_id', '==', user_id)),
            ('replies_updated', self.replies_ref.where('user_id', '==', user_id)),
        )
        for counter, query in targets:
            for doc in query.stream():
                try:
                    doc.reference.update({'username': new_name})
                    setattr(report, counter, getattr(report, counter) + 1)
                except Exception as e:
                    logging.error(f"작성자 이름 갱신 실패 (doc_id: {doc.id}, user_id: {user_id}): {e}", exc_info=True)
                    report.failed.append(doc.id)

        logging.info(f"작성자 이름 변경 전파 완료 (user_id: {user_id}, posts: {report.posts_updated}, "
                     f"replies: {report.replies_updated}, failed: {len(report.failed)})")
        return report

    def update_user_profile_image(self, user_id: str, file_path: str) -> Optional[Dict[str, Any]]:
        """업로드된 파일 경로를 공개 URL로 바꿔 사용자의 image로 저장합니다."""
        user_ref = self.users_ref.document(user_id)
        user_doc = user_ref.get()
        if not user_doc.exists:
            return None

        if not self.storage_service.is_owned_by(user_id, file_path):
            raise PermissionError("본인이 업로드한 파일만 프로필 이미지로 사용할 수 있습니다.")
        image_url = self.storage_service.make_public_and_get_url(file_path)
        user_ref.update({'image': image_url})

        user_data = user_doc.to_dict()
        user_data['image'] = image_url
        user_data['post_count'] = self.post_service.count_posts_by_user(user_id) if self.post_service else 0
        return user_data
