# help_exchange/api/replies/services.py
import logging
import uuid
from dataclasses import asdict
from typing import Dict, Any, List

from help_exchange.models.reply import Reply
from help_exchange.services.firestore_service import get_client, stream_dicts, load_author
from help_exchange.api.posts.services import DEFAULT_AVATAR_URL

class ReplyService:
    """
    댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    댓글은 작성 후 수정되지 않습니다.
    """
    def __init__(self, db=None, default_avatar_url: str = DEFAULT_AVATAR_URL):
        """서비스 초기화 시 Firestore 클라이언트 및 컬렉션 참조를 설정합니다."""
        self.db = get_client(db)
        self.replies_ref = self.db.collection('replies')
        self.posts_ref = self.db.collection('posts')
        self.users_ref = self.db.collection('users')
        self.default_avatar_url = default_avatar_url

    def list_replies(self, post_id: str) -> List[Dict[str, Any]]:
        """게시물의 댓글을 작성 순서대로 조회합니다."""
        query = self.replies_ref.where('post_id', '==', post_id).order_by('created_at')
        return stream_dicts(query)

    def create_reply(self, post_id: str, author_id: str, text: str) -> Dict[str, Any]:
        """새로운 댓글을 생성합니다. 로그인한 누구나 작성할 수 있습니다."""
        if not self.posts_ref.document(post_id).get().exists:
            raise ValueError("댓글을 작성할 게시물이 존재하지 않습니다.")

        username, user_avatar = load_author(self.users_ref, author_id, self.default_avatar_url)
        reply_id = str(uuid.uuid4())
        new_reply = Reply(
            reply_id=reply_id,
            post_id=post_id,
            user_id=author_id,
            username=username,
            user_avatar=user_avatar,
            text=text.strip()
        )
        self.replies_ref.document(reply_id).set(asdict(new_reply))
        return asdict(new_reply)

    def delete_replies_for_post(self, post_id: str) -> int:
        """게시물에 달린 댓글을 모두 삭제하고 삭제 수를 반환합니다."""
        deleted = 0
        for doc in list(self.replies_ref.where('post_id', '==', post_id).stream()):
            try:
                doc.reference.delete()
                deleted += 1
            except Exception as e:
                logging.error(f"댓글 삭제 실패 (reply_id: {doc.id}): {e}", exc_info=True)
                raise
        return deleted
