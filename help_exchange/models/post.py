# help_exchange/models/post.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, List

from help_exchange.utils.datetime_utils import DateTimeUtils

class PostType(str, Enum):
    """게시물 종류. Firestore에는 value 문자열로 저장됩니다."""
    HELP_NEEDED = "helpNeeded"
    HELP_OFFERED = "helpOffered"
    ACHIEVEMENT = "achievement"

POST_TYPES = [t.value for t in PostType]

@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    작성자 이름/아바타는 생성 시점에 비정규화되어 저장됩니다.
    """
    post_id: str
    user_id: str
    username: str
    user_avatar: str
    title: str
    description: str
    location: str
    contact_info: str
    type: str
    tags: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    is_completed: bool = False
    liked_by_users: List[str] = field(default_factory=list)
    original_post_id: Optional[str] = None  # 성과(achievement) 게시물만 사용
    created_at: datetime = field(default_factory=DateTimeUtils.now)
