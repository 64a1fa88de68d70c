# placemap/__init__.py

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
from typing import Optional
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 설정
from placemap.core.config import config_by_name

# - API 블루프린트
from placemap.api.users.routes import users_bp
from placemap.api.favorites.routes import favorites_bp
from placemap.api.saved_locations.routes import saved_locations_bp
from placemap.api.posts.routes import posts_bp
from placemap.api.notifications.routes import notifications_bp

# - 서비스 모듈
from placemap.services.notification_service import NotificationService
from placemap.api.posts.services import PostService
from placemap.api.favorites.services import FavoriteService
from placemap.api.saved_locations.services import SavedLocationService
from placemap.api.users.services import UserService


def create_app(config_name: Optional[str] = None):
    """
    Flask 애플리케이션 팩토리 함수.
    config_name 을 생략하면 FLASK_ENV 환경 변수로 설정 클래스를 고릅니다.
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 확장 기능 및 외부 서비스 초기화
    # =====================================================================================
    JWTManager(app)

    if app.config['FIREBASE_ENABLED'] and not firebase_admin._apps:
        cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        firebase_admin.initialize_app(credentials.Certificate(cred_path))

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 테스트 환경에서는 Firestore 에 연결하지 않고, 테스트 코드가 서비스를 직접 주입합니다.
    if app.config['FIREBASE_ENABLED']:
        # 5-1. 다른 서비스의 기반이 되는 공용 서비스 먼저 생성
        app.services['notifications'] = NotificationService(
            push_enabled=app.config['NOTIFICATION_PUSH_ENABLED']
        )
        # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스 생성
        app.services['posts'] = PostService(notification_service=app.services['notifications'])
        app.services['favorites'] = FavoriteService()
        app.services['saved_locations'] = SavedLocationService()
        app.services['users'] = UserService()
        logging.info("Firestore services initialized successfully")

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    prefix = app.config['API_PREFIX']
    app.register_blueprint(users_bp, url_prefix=f'{prefix}/users')
    app.register_blueprint(favorites_bp, url_prefix=f'{prefix}/users/favorites')
    app.register_blueprint(saved_locations_bp, url_prefix=f'{prefix}/users/saved-locations')
    app.register_blueprint(posts_bp, url_prefix=f'{prefix}/posts')
    app.register_blueprint(notifications_bp, url_prefix=f'{prefix}/notifications')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(PermissionError)
    def handle_permission_error(err):
        return jsonify({"error_code": "FORBIDDEN", "message": str(err)}), 403

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        return jsonify({"error_code": err.name.upper().replace(" ", "_"), "message": err.description}), err.code

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
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
