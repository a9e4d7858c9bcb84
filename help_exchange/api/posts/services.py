# help_exchange/api/posts/services.py
import logging
import uuid
from dataclasses import asdict
from firebase_admin import firestore
from typing import Optional, Dict, Any, List, Tuple

from help_exchange.models.post import Post, PostType, POST_TYPES
from help_exchange.services.firestore_service import get_client, stream_dicts, load_author
from help_exchange.utils.post_filters import filter_posts

DEFAULT_AVATAR_URL = "https://eu.ui-avatars.com/api/?name=John+Doe&size=250"
LIST_ALL_LIMIT = 1000

# 완료 여부로 피드에서 빠지는 게시물 종류
_COMPLETABLE_TYPES = (PostType.HELP_NEEDED.value, PostType.HELP_OFFERED.value)

class PostService:
    """
    게시물 관련 비즈니스 로직을 담당하는 서비스 클래스.
    모든 수정은 단순한 읽기 후 갱신이며, 동시 수정은 마지막 쓰기가 남습니다.
    """
    def __init__(self, db=None, default_avatar_url: str = DEFAULT_AVATAR_URL):
        self.db = get_client(db)
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.default_avatar_url = default_avatar_url

    # --- 조회 ---
    def list_posts(self, post_type: str, location_filter: Optional[str] = None,
                   tag_filters: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """
        종류별 게시물을 최신순으로 조회합니다.
        도움 요청/제공 게시물은 완료된 것을 제외합니다.
        """
        if post_type not in POST_TYPES:
            raise ValueError(f"'{post_type}'은(는) 유효한 게시물 종류가 아닙니다.")

        query = self.posts_ref.where('type', '==', post_type)
        if post_type in _COMPLETABLE_TYPES:
            query = query.where('is_completed', '==', False)
        query = query.order_by('created_at', direction=firestore.Query.DESCENDING)

        return filter_posts(stream_dicts(query), location_filter, tag_filters)

    def list_completed(self, location_filter: Optional[str] = None,
                       tag_filters: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """완료 처리된 도움 요청/제공 게시물을 최신순으로 조회합니다."""
        query = self.posts_ref.where('is_completed', '==', True).order_by('created_at', direction=firestore.Query.DESCENDING)
        posts = [p for p in stream_dicts(query) if p.get('type') in _COMPLETABLE_TYPES]
        return filter_posts(posts, location_filter, tag_filters)

    def list_all(self, limit: int = LIST_ALL_LIMIT) -> List[Dict[str, Any]]:
        """필터 후보 생성을 위해 게시물을 최대 limit개까지 가져옵니다."""
        return stream_dicts(self.posts_ref.limit(limit))

    def filter_suggestions(self) -> Dict[str, List[str]]:
        """필터 화면에 보여줄 위치/태그 후보 목록"""
        locations, tags = set(), set()
        for post in self.list_all():
            if post.get('location'):
                locations.add(post['location'])
            tags.update(post.get('tags') or [])
        return {"locations": sorted(locations), "tags": sorted(tags)}

    def list_by_user(self, user_id: Optional[str]) -> List[Dict[str, Any]]:
        """특정 사용자가 작성한 게시물을 최신순으로 조회합니다. 비로그인이면 빈 목록."""
        if not user_id:
            return []
        query = self.posts_ref.where('user_id', '==', user_id).order_by('created_at', direction=firestore.Query.DESCENDING)
        return stream_dicts(query)

    def count_posts_by_user(self, user_id: str) -> int:
        return len(self.list_by_user(user_id))

    def get_post_by_id(self, post_id: str) -> Optional[Dict[str, Any]]:
        """게시물이 없으면 예외 대신 None을 반환합니다. 호출자가 None을 확인해야 합니다."""
        doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            return None
        return doc.to_dict()

    # --- 생성 ---
    def create_post(self, author_id: str, title: str, description: str, location: str, contact_info: str,
                    post_type: str, tags: List[str], images: List[str],
                    original_post_id: Optional[str] = None) -> Dict[str, Any]:
        """
        새 게시물을 생성합니다.
        성과(achievement) 게시물은 완료 대상이 될 수 있는 원본 게시물을 반드시 참조해야 합니다.
        """
        if post_type not in POST_TYPES:
            raise ValueError(f"'{post_type}'은(는) 유효한 게시물 종류가 아닙니다.")

        if post_type == PostType.ACHIEVEMENT.value:
            self._require_original_post(original_post_id)
        elif original_post_id:
            raise ValueError("원본 게시물 참조는 성과 게시물에만 사용할 수 있습니다.")

        try:
            username, user_avatar = load_author(self.users_ref, author_id, self.default_avatar_url)
            post_id = str(uuid.uuid4())
            new_post = Post(
                post_id=post_id, user_id=author_id, username=username, user_avatar=user_avatar,
                title=title, description=description, location=location, contact_info=contact_info,
                type=post_type, tags=list(tags or []), images=list(images or []),
                original_post_id=original_post_id
            )
            self.posts_ref.document(post_id).set(asdict(new_post))
            logging.info(f"게시물 생성 완료 (post_id: {post_id}, user_id: {author_id}, type: {post_type})")
            return asdict(new_post)
        except Exception as e:
            logging.error(f"게시물 생성 실패 (user_id: {author_id}): {e}", exc_info=True)
            raise

    def _require_original_post(self, original_post_id: Optional[str]) -> Dict[str, Any]:
        if not original_post_id:
            raise ValueError("성과 게시물에는 원본 게시물 ID가 필요합니다.")
        original = self.get_post_by_id(original_post_id)
        if original is None:
            raise ValueError("원본 게시물을 찾을 수 없습니다.")
        if original.get('type') == PostType.ACHIEVEMENT.value:
            raise ValueError("성과 게시물은 다른 성과 게시물을 원본으로 참조할 수 없습니다.")
        return original

    def create_achievement(self, author_id: str, original_post_id: str, title: str, description: str,
                           tags: List[str], images: List[str], contact_info: Optional[str] = None) -> Dict[str, Any]:
        """
        원본 요청/제공 게시물을 완료 처리하고, 이를 참조하는 성과 게시물을 만듭니다.
        위치는 원본을 따르고, 설명 끝에 원본 요청 내용을 덧붙입니다.
        """
        original = self._require_original_post(original_post_id)
        self.mark_completed(original_post_id, author_id)

        full_description = f"{description}\n\nOriginal request: {original.get('description', '')}"
        return self.create_post(
            author_id=author_id, title=title, description=full_description,
            location=original.get('location', ''),
            contact_info=contact_info or original.get('contact_info', ''),
            post_type=PostType.ACHIEVEMENT.value, tags=tags, images=images,
            original_post_id=original_post_id
        )

    # --- 수정 / 삭제 ---
    def delete_post(self, post_id: str, user_id: str) -> bool:
        """
        작성자 본인만 삭제할 수 있습니다.
        댓글은 함께 삭제하지 않습니다. (목업 데이터 일괄 삭제 경로만 댓글을 먼저 지웁니다)
        """
        post_ref = self.posts_ref.document(post_id)
        doc = post_ref.get()
        if not doc.exists:
            raise ValueError("게시물을 찾을 수 없습니다.")
        if doc.to_dict().get('user_id') != user_id:
            raise PermissionError("게시물을 삭제할 권한이 없습니다.")

        post_ref.delete()
        logging.info(f"게시물 삭제 완료 (post_id: {post_id}, user_id: {user_id})")
        return True

    def toggle_post_like(self, user_id: str, post_id: str) -> Tuple[bool, int]:
        """
        좋아요 목록에서 사용자를 추가하거나 제거합니다.
        :return: (토글 후 좋아요 상태, 좋아요 수)
        """
        post_ref = self.posts_ref.document(post_id)
        doc = post_ref.get()
        if not doc.exists:
            raise ValueError("게시글을 찾을 수 없습니다.")

        liked_by_users = list(doc.to_dict().get('liked_by_users') or [])
        if user_id in liked_by_users:
            liked_by_users.remove(user_id)
            is_liked = False
        else:
            liked_by_users.append(user_id)
            is_liked = True

        post_ref.update({'liked_by_users': liked_by_users})
        return is_liked, len(liked_by_users)

    def mark_completed(self, post_id: str, user_id: str) -> None:
        """
        게시물을 완료 처리합니다.
        작성자 확인을 하지 않으므로 로그인한 누구나 호출할 수 있습니다.
        """
        post_ref = self.posts_ref.document(post_id)
        doc = post_ref.get()
        if not doc.exists:
            raise ValueError("게시물을 찾을 수 없습니다.")

        if doc.to_dict().get('user_id') != user_id:
            logging.info(f"작성자가 아닌 사용자가 완료 처리했습니다 (post_id: {post_id}, user_id: {user_id})")
        post_ref.update({'is_completed': True})
