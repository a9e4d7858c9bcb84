# help_exchange/api/uploads/routes.py

import logging
from flask import request, jsonify, Blueprint, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import Schema, fields, validate, ValidationError

from help_exchange.services.storage_service import StorageService

# 이 블루프린트에 속한 모든 API는 '/api/uploads' 접두사를 갖습니다.
uploads_bp = Blueprint('uploads', __name__)

class UploadUrlRequestSchema(Schema):
    """업로드 URL 발급 요청"""
    upload_type = fields.Str(required=True, validate=validate.OneOf(list(StorageService.PATH_MAP)))
    filename = fields.Str(required=True, validate=validate.Length(min=1, max=255))
    content_type = fields.Str(required=True)

class FilePathSchema(Schema):
    """파일 경로 유효성 검사를 위한 스키마"""
    file_path = fields.Str(required=True, error_messages={"required": "파일 경로는 필수입니다."})


@uploads_bp.route('/url', methods=['POST'])
@jwt_required()
def get_upload_url():
    """
    게시물 이미지/프로필 이미지 업로드를 위한 Pre-signed URL을 발급합니다.
    클라이언트는 이 URL로 직접 PUT 한 뒤 /finalize 로 공개 URL을 받습니다.
    """
    user_id = get_jwt_identity()
    storage_service = current_app.services['storage']

    try:
        data = UploadUrlRequestSchema().load(request.get_json() or {})
        url_info = storage_service.generate_upload_url(user_id, data['upload_type'], data['filename'], data['content_type'])
        return jsonify(url_info), 200
    except ValidationError as err:
        logging.warning(f"URL 발급 요청 실패 (잘못된 파라미터): {err.messages}")
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "INVALID_UPLOAD_TYPE", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"Pre-signed URL 생성 중 서버 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "URL_GENERATION_FAILED", "message": "URL 생성 중 서버 오류가 발생했습니다."}), 500


@uploads_bp.route('/finalize', methods=['POST'])
@jwt_required()
def finalize_upload():
    """업로드가 끝난 파일을 공개로 전환하고 게시물에 넣을 URL을 반환합니다."""
    user_id = get_jwt_identity()
    storage_service = current_app.services['storage']

    try:
        data = FilePathSchema().load(request.get_json() or {})
        if not storage_service.is_owned_by(user_id, data['file_path']):
            return jsonify({"error_code": "FORBIDDEN", "message": "본인이 업로드한 파일만 사용할 수 있습니다."}), 403

        public_url = storage_service.make_public_and_get_url(data['file_path'])
        return jsonify({"public_url": public_url}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except FileNotFoundError as e:
        return jsonify({"error_code": "FILE_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"파일 공개 전환 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "파일 처리 중 오류가 발생했습니다."}), 500
