# help_exchange/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from typing import Any, Dict, Optional
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정
from help_exchange.core.config import config_by_name

# - API 블루프린트
from help_exchange.api.auth.routes import auth_bp
from help_exchange.api.uploads.routes import uploads_bp
from help_exchange.api.users.routes import users_bp
from help_exchange.api.posts.routes import posts_bp
from help_exchange.api.replies.routes import replies_bp
from help_exchange.api.chat.routes import chat_bp
from help_exchange.api.mock_data.routes import mock_data_bp

# - 서비스 모듈
from help_exchange.services import storage_service as storage_service_module
from help_exchange.services import completion_service as completion_service_module
from help_exchange.api.auth import services as auth_service_module
from help_exchange.api.users import services as user_service_module
from help_exchange.api.posts import services as post_service_module
from help_exchange.api.replies import services as reply_service_module
from help_exchange.api.mock_data import services as mock_data_service_module

def create_app(config_name: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (없으면 FLASK_ENV)
    :param overrides: 테스트에서 주입할 객체 ('db', 'storage', 'completion')
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')
    overrides = overrides or {}

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    jwt = JWTManager(app)

    # DB가 주입되지 않은 경우에만 실제 Firebase에 연결합니다.
    db = overrides.get('db')
    if db is None and not firebase_admin._apps:
        cred_path = app.config.get('FIREBASE_CREDENTIALS_PATH')
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred, {
            'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
        })

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스 먼저 생성
    if 'storage' in overrides:
        app.services['storage'] = overrides['storage']
    else:
        try:
            storage_instance = storage_service_module.StorageService()
            storage_instance.init_app(app)
            app.services['storage'] = storage_instance
            logging.info("Storage service initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize storage service: {e}")
            raise

    if 'completion' in overrides:
        app.services['completion'] = overrides['completion']
    else:
        completion_instance = completion_service_module.CompletionService()
        completion_instance.init_app(app)
        app.services['completion'] = completion_instance

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스 생성
    default_avatar_url = app.config['DEFAULT_AVATAR_URL']
    app.services['posts'] = post_service_module.PostService(db=db, default_avatar_url=default_avatar_url)
    app.services['replies'] = reply_service_module.ReplyService(db=db, default_avatar_url=default_avatar_url)
    app.services['users'] = user_service_module.UserService(
        db=db,
        storage_service=app.services['storage'],
        post_service=app.services['posts']
    )
    app.services['mock_data'] = mock_data_service_module.MockDataService(
        db=db,
        reply_service=app.services['replies']
    )

    # - 인증 서비스 (앱 컨텍스트 필요)
    auth_service_module.auth_service.init_app(app, db=db)
    app.services['auth'] = auth_service_module.auth_service

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return auth_service_module.auth_service.is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(replies_bp, url_prefix='/api/posts')
    app.register_blueprint(chat_bp, url_prefix='/api/chat')
    app.register_blueprint(mock_data_bp, url_prefix='/api/mock-data')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return jsonify({"error_code": err.name.upper().replace(" ", "_"), "message": err.description}), err.code
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
