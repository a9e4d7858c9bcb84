# help_exchange/services/firestore_service.py
import logging
from typing import Any, Dict, List, Tuple
from firebase_admin import firestore

ANONYMOUS_NAME = "Anonymous"

def get_client(db=None):
    """주입된 클라이언트가 있으면 그것을, 없으면 firebase_admin의 기본 Firestore 클라이언트를 사용합니다."""
    return db if db is not None else firestore.client()

def stream_dicts(query) -> List[Dict[str, Any]]:
    """쿼리 결과 문서들을 딕셔너리 리스트로 변환합니다."""
    return [doc.to_dict() for doc in query.stream()]

def load_author(users_ref, user_id: str, default_avatar_url: str) -> Tuple[str, str]:
    """
    게시물/댓글에 비정규화해서 넣을 작성자 이름과 아바타를 조회합니다.
    사용자 문서가 없으면 'Anonymous'와 기본 아바타를 사용합니다.
    """
    user_doc = users_ref.document(user_id).get()
    if not user_doc.exists:
        logging.warning(f"작성자 사용자 문서를 찾을 수 없어 기본값을 사용합니다 (user_id: {user_id})")
        return ANONYMOUS_NAME, default_avatar_url

    user_data = user_doc.to_dict()
    return user_data.get('name') or ANONYMOUS_NAME, user_data.get('image') or default_avatar_url
