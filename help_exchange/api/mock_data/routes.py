# help_exchange/api/mock_data/routes.py
import logging
from flask import Blueprint, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

mock_data_bp = Blueprint('mock_data_bp', __name__)

@mock_data_bp.route('/status', methods=['GET'])
def get_mock_data_status():
    """목업 데이터가 들어가 있는지와 그 개수"""
    return jsonify(current_app.services['mock_data'].status()), 200

@mock_data_bp.route('/import', methods=['POST'])
@jwt_required()
def import_mock_data():
    """목업 데이터를 현재 사용자 소유로 가져옵니다."""
    user_id = get_jwt_identity()
    try:
        result = current_app.services['mock_data'].import_data(user_id)
        return jsonify(result), 201
    except Exception as e:
        logging.error(f"목업 데이터 가져오기 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "MOCK_DATA_IMPORT_FAILED", "message": "목업 데이터를 가져오지 못했습니다."}), 500

@mock_data_bp.route('', methods=['DELETE'])
@jwt_required()
def clear_mock_data():
    """목업 태그가 붙은 게시물과 그 댓글을 모두 삭제합니다."""
    try:
        return jsonify(current_app.services['mock_data'].clear_data()), 200
    except Exception as e:
        logging.error(f"목업 데이터 삭제 중 오류 발생: {e}", exc_info=True)
        return jsonify({"error_code": "MOCK_DATA_CLEAR_FAILED", "message": "목업 데이터를 삭제하지 못했습니다."}), 500
