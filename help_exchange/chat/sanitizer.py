# help_exchange/chat/sanitizer.py
import re

# 모델이 실수로 붙이는 'assistant:', 'user:', 'AI:' 접두사 (연속으로 붙은 경우 포함)
_ROLE_PREFIX_PATTERN = re.compile(r'^(?:\s*(?:assistant|user|ai)\s*:)*\s*', re.IGNORECASE)


def sanitize_response(text: str) -> str:
    """
    모델 응답 앞의 역할 접두사와 앞뒤 공백을 제거합니다.
    모든 문자열에 대해 실패하지 않으며, 이미 정리된 문자열에는 아무 영향이 없습니다.
    """
    if not text:
        return ""
    return _ROLE_PREFIX_PATTERN.sub('', text, count=1).strip()
