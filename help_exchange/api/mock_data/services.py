# help_exchange/api/mock_data/services.py
import json
import logging
import os
import uuid
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from help_exchange.models.post import Post, PostType
from help_exchange.models.reply import Reply
from help_exchange.services.firestore_service import get_client

# 가져온 목업 게시물을 구분하고 일괄 삭제하기 위한 태그
MOCK_DATA_TAG = "arabic_mock_data"

DEFAULT_DATA_PATH = os.path.join(os.path.dirname(__file__), '..', '..', 'data', 'arabic_mock_data.json')

def load_mock_data(path: str = DEFAULT_DATA_PATH) -> Dict[str, Any]:
    with open(path, encoding='utf-8') as f:
        return json.load(f)

class MockDataService:
    """
    데모용 아랍어 목업 데이터를 가져오고 지우는 서비스.
    가져온 게시물은 모두 현재 사용자 소유로 저장되며 MOCK_DATA_TAG가 붙습니다.
    """
    def __init__(self, db=None, reply_service=None, data: Optional[Dict[str, Any]] = None):
        self.db = get_client(db)
        self.posts_ref = self.db.collection('posts')
        self.replies_ref = self.db.collection('replies')
        self.reply_service = reply_service
        self._data = data

    @property
    def data(self) -> Dict[str, Any]:
        if self._data is None:
            self._data = load_mock_data()
        return self._data

    def _tagged_posts(self) -> List[Any]:
        return list(self.posts_ref.where('tags', 'array_contains', MOCK_DATA_TAG).stream())

    def status(self) -> Dict[str, Any]:
        count = len(self._tagged_posts())
        return {"arabic_data_count": count, "arabic_data_present": count > 0}

    def import_data(self, user_id: str) -> Dict[str, int]:
        """
        게시물 → 성과 게시물의 원본 연결 → 댓글 순서로 가져옵니다.
        항목 하나가 실패해도 로그만 남기고 나머지를 계속 진행합니다.
        """
        logging.info(f"목업 데이터 가져오기 시작 (user_id: {user_id})")
        posts = self.data.get('posts', [])
        replies = self.data.get('replies', [])

        # 목업 데이터의 게시물 순서(index) → 저장된 post_id
        post_ids: Dict[int, str] = {}
        for index, item in enumerate(posts):
            try:
                post_id = str(uuid.uuid4())
                post = Post(
                    post_id=post_id,
                    user_id=user_id,
                    username=item['username'],
                    user_avatar=item['user_avatar'],
                    title=item['title'],
                    description=item['description'],
                    location=item['location'],
                    contact_info=item['contact_info'],
                    type=item['type'],
                    tags=list(item.get('tags') or []) + [MOCK_DATA_TAG],
                    images=list(item.get('images') or []),
                    is_completed=bool(item.get('is_completed'))
                )
                self.posts_ref.document(post_id).set(asdict(post))
                post_ids[index] = post_id
            except Exception as e:
                logging.error(f"목업 게시물 가져오기 실패 (\"{item.get('title')}\"): {e}", exc_info=True)

        # 성과 게시물의 original_post_number N은 성과가 아닌 게시물 중 N번째를 가리킵니다.
        originals = [i for i, item in enumerate(posts) if item['type'] != PostType.ACHIEVEMENT.value]
        achievements_linked = 0
        for index, item in enumerate(posts):
            number = item.get('original_post_number')
            if item['type'] != PostType.ACHIEVEMENT.value or not number or index not in post_ids:
                continue
            if number > len(originals) or originals[number - 1] not in post_ids:
                continue
            try:
                self.posts_ref.document(post_ids[index]).update({'original_post_id': post_ids[originals[number - 1]]})
                achievements_linked += 1
            except Exception as e:
                logging.error(f"성과 게시물 원본 연결 실패: {e}", exc_info=True)

        # 댓글의 post_number N은 전체 게시물 중 N번째를 가리킵니다.
        replies_imported = 0
        for item in replies:
            post_id = post_ids.get(item['post_number'] - 1)
            if not post_id:
                continue
            try:
                reply_id = str(uuid.uuid4())
                reply = Reply(
                    reply_id=reply_id,
                    post_id=post_id,
                    user_id=user_id,
                    username=item['username'],
                    user_avatar=item['user_avatar'],
                    text=item['text']
                )
                self.replies_ref.document(reply_id).set(asdict(reply))
                replies_imported += 1
            except Exception as e:
                logging.error(f"목업 댓글 가져오기 실패: {e}", exc_info=True)

        logging.info(f"목업 데이터 가져오기 완료 (posts: {len(post_ids)}, replies: {replies_imported})")
        return {
            "posts_imported": len(post_ids),
            "achievements_linked": achievements_linked,
            "replies_imported": replies_imported
        }

    def clear_data(self) -> Dict[str, int]:
        """목업 태그가 붙은 게시물의 댓글을 먼저 지우고 게시물을 지웁니다."""
        tagged = self._tagged_posts()
        replies_deleted = 0
        for doc in tagged:
            replies_deleted += self.reply_service.delete_replies_for_post(doc.id)
        for doc in tagged:
            doc.reference.delete()

        logging.info(f"목업 데이터 삭제 완료 (posts: {len(tagged)}, replies: {replies_deleted})")
        return {"deleted_count": len(tagged), "replies_deleted": replies_deleted}
