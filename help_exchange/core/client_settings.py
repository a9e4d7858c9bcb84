# help_exchange/core/client_settings.py
import json
import logging
import os
from typing import Optional

from help_exchange.models.user import THEMES

MIN_API_KEY_LENGTH = 10


def is_valid_api_key_format(key: Optional[str]) -> bool:
    """공백이 없고 최소 길이를 만족하는지만 확인합니다. (실제 유효성은 API 호출로 검증)"""
    if not key or " " in key:
        return False
    return len(key) >= MIN_API_KEY_LENGTH


class ClientSettings:
    """
    클라이언트 쪽에 보관되는 설정 (완성 API 키, 테마).
    명시적으로 load/save 하며, path가 없으면 메모리에만 유지됩니다.
    키는 평문 JSON으로 저장됩니다.
    """

    def __init__(self, api_key: Optional[str] = None, theme: str = "system", path: Optional[str] = None):
        self.api_key = api_key
        self.theme = theme if theme in THEMES else "system"
        self.path = path

    @classmethod
    def load(cls, path: str) -> "ClientSettings":
        """
        저장된 설정을 읽습니다.
        파일이 없거나 읽을 수 없으면 기본값을 돌려주고, 형식이 잘못된 키는 버립니다.
        """
        if not os.path.exists(path):
            return cls(path=path)

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"설정 파일을 읽을 수 없어 기본값을 사용합니다 ({path}): {e}")
            return cls(path=path)

        if not isinstance(data, dict):
            logging.warning(f"설정 파일 형식이 올바르지 않아 기본값을 사용합니다 ({path})")
            return cls(path=path)

        api_key = data.get("api_key")
        if api_key is not None:
            api_key = api_key.strip() if isinstance(api_key, str) else None
            if not is_valid_api_key_format(api_key):
                logging.warning("저장된 API 키 형식이 올바르지 않아 삭제합니다. 새 키를 입력해야 합니다.")
                api_key = None

        settings = cls(api_key=api_key, theme=data.get("theme", "system"), path=path)
        if api_key is None and data.get("api_key") is not None:
            settings.save()
        return settings

    def save(self) -> None:
        if not self.path:
            return
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({"api_key": self.api_key, "theme": self.theme}, f)

    def set_api_key(self, key: str) -> None:
        trimmed = (key or "").strip()
        if not is_valid_api_key_format(trimmed):
            raise ValueError("API 키 형식이 올바르지 않습니다. 공백이나 형식을 확인해주세요.")
        self.api_key = trimmed

    def clear_api_key(self) -> None:
        self.api_key = None

    def set_theme(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"'{theme}'은(는) 지원하지 않는 테마입니다. ({', '.join(THEMES)})")
        self.theme = theme

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)
