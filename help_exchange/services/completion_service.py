# help_exchange/services/completion_service.py
import logging
from typing import Optional
from flask import Flask
import openai
from openai import OpenAI

from help_exchange.chat.errors import CompletionError, InvalidCredentialError, QuotaExceededError

class CompletionService:
    """
    OpenAI API 연동을 담당하는 서비스 클래스.
    프롬프트 문자열을 받아 생성된 텍스트를 돌려주며,
    실패는 키 오류 / 한도 초과 / 기타 세 가지로 구분해서 올립니다.
    """

    def __init__(self):
        """
        클라이언트는 init_app 메서드를 통해 설정됩니다.
        서버 기본 키가 없어도 사용자가 자신의 키를 넘기면 동작합니다.
        """
        self.client = None
        self.model = "gpt-4o-mini"

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 OpenAI 클라이언트를 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        self.model = app.config.get('OPENAI_MODEL') or self.model
        api_key = app.config.get('OPENAI_API_KEY')
        if api_key:
            self.client = OpenAI(api_key=api_key)
            logging.info("CompletionService: 서버 기본 OpenAI 키로 초기화되었습니다.")
        else:
            logging.warning("CompletionService: OPENAI_API_KEY가 없어 사용자 키로만 동작합니다.")

    def complete(self, prompt: str, api_key: Optional[str] = None, model: Optional[str] = None) -> str:
        """
        프롬프트 하나를 보내고 생성된 텍스트를 반환합니다.

        :param prompt: 완성된 프롬프트 문자열
        :param api_key: 사용자 키 (없으면 서버 기본 키)
        :param model: 모델 이름 (없으면 설정값)
        :return: 생성된 텍스트 (빈 문자열일 수 있음)
        """
        if api_key:
            # 사용자 키 클라이언트는 요청이 끝나면 연결 풀을 닫습니다.
            with OpenAI(api_key=api_key.strip()) as client:
                return self._create(client, prompt, model)
        if not self.client:
            raise InvalidCredentialError("사용할 수 있는 API 키가 없습니다.")
        return self._create(self.client, prompt, model)

    def _create(self, client: OpenAI, prompt: str, model: Optional[str]) -> str:
        try:
            response = client.chat.completions.create(
                model=model or self.model,
                messages=[{"role": "user", "content": prompt}],
            )
            return response.choices[0].message.content or ""
        except openai.AuthenticationError as e:
            logging.warning(f"OpenAI 인증 실패 (키 오류): {e}")
            raise InvalidCredentialError(str(e)) from e
        except openai.RateLimitError as e:
            logging.warning(f"OpenAI 사용량 한도 초과: {e}")
            raise QuotaExceededError(str(e)) from e
        except openai.OpenAIError as e:
            logging.error(f"OpenAI 완성 요청 실패: {e}", exc_info=True)
            raise CompletionError(str(e)) from e

    def verify_api_key(self, api_key: str) -> bool:
        """
        짧은 프롬프트로 키를 확인합니다.
        키 오류일 때만 False이며, 네트워크 등 다른 오류는 키 문제로 보지 않습니다.
        """
        try:
            self.complete("Test", api_key=api_key)
            return True
        except InvalidCredentialError:
            return False
        except CompletionError as e:
            logging.warning(f"API 키 확인 중 키와 무관한 오류 발생: {e}")
            return True
