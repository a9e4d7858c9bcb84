# help_exchange/models/reply.py
from dataclasses import dataclass, field
from datetime import datetime

from help_exchange.utils.datetime_utils import DateTimeUtils

@dataclass
class Reply:
    """
    Firestore 'replies' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    생성 이후에는 수정되지 않습니다. (작성자 이름 변경 전파만 예외)
    """
    reply_id: str
    post_id: str
    user_id: str
    username: str
    user_avatar: str
    text: str
    created_at: datetime = field(default_factory=DateTimeUtils.now)
