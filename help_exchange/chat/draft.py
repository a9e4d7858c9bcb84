# help_exchange/chat/draft.py
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List

from help_exchange.chat.errors import DraftValidationError

# 제출 전에 반드시 채워져 있어야 하는 항목 (tags는 선택)
REQUIRED_FIELDS = ("title", "description", "location", "contact_info")


def normalize_tags(tags: Any) -> List[str]:
    """문자열 리스트로 정리하고 공백/빈 값과 중복을 제거합니다. (순서 유지)"""
    if not isinstance(tags, (list, tuple)):
        return []
    result = []
    for tag in tags:
        if not isinstance(tag, str):
            continue
        cleaned = tag.strip()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result


@dataclass
class Draft:
    """대화에서 추출되어 사용자 확인을 기다리는, 아직 저장되지 않은 게시물."""
    type: str
    title: str = ""
    description: str = ""
    location: str = ""
    contact_info: str = ""
    tags: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)

    @classmethod
    def empty(cls, post_type: str) -> "Draft":
        return cls(type=post_type)

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if not (getattr(self, name) or "").strip()]

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def validate(self) -> None:
        missing = self.missing_fields()
        if missing:
            raise DraftValidationError(missing)

    def with_edits(self, **edits: Any) -> "Draft":
        """
        검토 화면에서 수정한 값을 반영한 새 초안을 반환합니다.
        type은 의도에서 결정되므로 수정할 수 없습니다.
        """
        editable = {f.name for f in fields(self)} - {"type"}
        unknown = set(edits) - editable
        if unknown:
            raise ValueError(f"수정할 수 없는 항목입니다: {', '.join(sorted(unknown))}")
        if "tags" in edits:
            edits["tags"] = normalize_tags(edits["tags"])
        return replace(self, **edits)

    def to_post_payload(self) -> Dict[str, Any]:
        """게시물 생성 서비스에 넘길 인자 형태 (앞뒤 공백 제거)"""
        return {
            "title": self.title.strip(),
            "description": self.description.strip(),
            "location": self.location.strip(),
            "contact_info": self.contact_info.strip(),
            "type": self.type,
            "tags": normalize_tags(self.tags),
            "images": list(self.images),
        }
