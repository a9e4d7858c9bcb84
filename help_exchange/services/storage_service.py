# help_exchange/services/storage_service.py
import uuid
import logging
from datetime import timedelta
from flask import Flask
from firebase_admin import storage

class StorageService:
    """
    Firebase Storage 관련 로직을 담당하는 서비스 클래스입니다.
    업로드는 두 단계입니다: (1) 서명된 업로드 URL 발급 → 클라이언트가 직접 PUT
    (2) 업로드된 파일 경로를 공개 URL로 교환.
    """

    # 업로드 목적별 저장 폴더
    PATH_MAP = {
        "user_profile": "user_profiles/{user_id}",
        "post_image": "posts/{user_id}",
    }

    def __init__(self, bucket=None):
        """
        버킷은 init_app에서 설정하거나, 테스트에서는 생성자로 직접 주입합니다.
        """
        self.bucket = bucket

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.bucket

    def generate_upload_url(self, user_id: str, upload_type: str, filename: str, content_type: str) -> dict:
        """
        업로드 목적에 맞는 경로로 15분간 유효한 PUT 전용 URL을 생성합니다.

        :param user_id: 현재 로그인된 사용자의 ID
        :param upload_type: "user_profile" 또는 "post_image"
        :param filename: 원본 파일명 (확장자 파악에 사용)
        :param content_type: 업로드할 파일의 MIME 타입
        :return: 업로드 URL과 파일 경로
        """
        bucket = self._require_bucket()

        folder_template = self.PATH_MAP.get(upload_type)
        if not folder_template:
            raise ValueError(f"'{upload_type}'은(는) 유효한 업로드 타입이 아닙니다.")

        extension = filename.rsplit('.', 1)[-1] if '.' in filename else ''
        unique_filename = f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())
        destination_blob_name = f"{folder_template.format(user_id=user_id)}/{unique_filename}"

        blob = bucket.blob(destination_blob_name)
        upload_url = blob.generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=15),
            method="PUT",
            content_type=content_type
        )

        return {
            "upload_url": upload_url,
            "file_path": destination_blob_name
        }

    def make_public_and_get_url(self, file_path: str) -> str:
        """
        업로드된 파일을 공개로 전환하고 URL을 반환합니다.

        :param file_path: generate_upload_url이 돌려준 파일 경로
        :return: 공개 URL
        """
        blob = self._require_bucket().blob(file_path)

        if not blob.exists():
            raise FileNotFoundError(f"파일을 찾을 수 없습니다: {file_path}")

        try:
            blob.make_public()
            return blob.public_url
        except Exception as e:
            logging.error(f"파일 공개 전환 실패: {e}", exc_info=True)
            raise

    def is_owned_by(self, user_id: str, file_path: str) -> bool:
        """파일 경로가 해당 사용자의 업로드 폴더 아래에 있는지 확인합니다."""
        return any(
            file_path.startswith(template.format(user_id=user_id) + "/")
            for template in self.PATH_MAP.values()
        )
