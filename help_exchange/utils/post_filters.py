# help_exchange/utils/post_filters.py
from typing import Any, Dict, Iterable, List, Optional


def matches_location(post: Dict[str, Any], location_filter: Optional[str]) -> bool:
    """위치 문자열에 필터가 부분 문자열로 포함되는지 (대소문자 무시) 확인합니다."""
    if not location_filter:
        return True
    return location_filter.lower() in (post.get('location') or '').lower()


def matches_tags(post: Dict[str, Any], tag_filters: Optional[Iterable[str]]) -> bool:
    """게시물 태그와 필터 태그의 교집합이 하나라도 있으면 통과합니다."""
    if not tag_filters:
        return True
    post_tags = set(post.get('tags') or [])
    return any(tag in post_tags for tag in tag_filters)


def filter_posts(posts: List[Dict[str, Any]], location_filter: Optional[str] = None,
                 tag_filters: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    # 조회 순서는 그대로 유지합니다.
    return [p for p in posts if matches_location(p, location_filter) and matches_tags(p, tag_filters)]
