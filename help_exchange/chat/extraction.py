# help_exchange/chat/extraction.py
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from help_exchange.chat.conversation import Conversation, Intent
from help_exchange.chat.draft import Draft, normalize_tags
from help_exchange.chat.prompts import build_extraction_prompt

# 응답에서 처음 등장하는 '{' 부터 마지막 '}' 까지
_JSON_OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')

# 모델 JSON 키 → Draft 필드
_STRING_KEYS = {
    "title": "title",
    "description": "description",
    "location": "location",
    "contactInfo": "contact_info",
}


@dataclass
class ExtractionResult:
    draft: Draft
    succeeded: bool


def parse_draft_response(text: Optional[str], intent: Intent) -> ExtractionResult:
    """
    모델 응답 텍스트에서 초안을 파싱합니다.
    JSON 객체가 없거나 파싱에 실패하면 예외 대신 빈 초안을 돌려줍니다.
    type은 모델 값과 무관하게 항상 의도에서 결정합니다.
    """
    post_type = intent.post_type.value
    match = _JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        logging.warning("초안 추출 실패: 응답에서 JSON 객체를 찾을 수 없습니다.")
        return ExtractionResult(Draft.empty(post_type), succeeded=False)

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logging.warning(f"초안 추출 실패: JSON 파싱 오류 ({e})")
        return ExtractionResult(Draft.empty(post_type), succeeded=False)

    if not isinstance(data, dict):
        logging.warning("초안 추출 실패: JSON 최상위 값이 객체가 아닙니다.")
        return ExtractionResult(Draft.empty(post_type), succeeded=False)

    return ExtractionResult(_draft_from_dict(data, post_type), succeeded=True)


def _draft_from_dict(data: Dict[str, Any], post_type: str) -> Draft:
    values = {}
    for key, attr in _STRING_KEYS.items():
        value = data.get(key)
        values[attr] = value.strip() if isinstance(value, str) else ""
    return Draft(type=post_type, tags=normalize_tags(data.get("tags")), **values)


def extract_draft(completion, conversation: Conversation, intent: Intent,
                  api_key: Optional[str] = None) -> ExtractionResult:
    """
    전체 대화를 모델에 보내 게시물 초안을 추출합니다.
    need_help / offer_help 의도만 허용합니다.
    완성 API 자체의 실패(CompletionError 계열)는 호출자에게 그대로 전달됩니다.
    """
    if intent is None or not intent.can_create_post:
        raise ValueError("게시물 초안은 도움 요청/도움 제공 의도에서만 만들 수 있습니다.")

    prompt = build_extraction_prompt(conversation, intent)
    response_text = completion.complete(prompt, api_key=api_key)
    return parse_draft_response(response_text, intent)
