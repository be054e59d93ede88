# meydan/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import atexit
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정
from meydan.core.config import config_by_name
from meydan.core.session import SessionRegistry

# - API 블루프린트
from meydan.api.auth.routes import auth_bp
from meydan.api.feed.routes import feed_bp
from meydan.api.posts.routes import posts_bp
from meydan.api.users.routes import users_bp
from meydan.api.uploads.routes import uploads_bp
from meydan.api.config.routes import config_bp
from meydan.api.captions.routes import caption_proxy_bp

# - 서비스 모듈
from meydan.services.storage_service import StorageService
from meydan.services.openai_service import OpenAIService
from meydan.services.caption_client import CaptionClient
from meydan.api.auth.services import auth_service
from meydan.api.feed.services import FeedService
from meydan.api.posts.services import PostService
from meydan.api.users.services import UserService


def create_app(config_name=None, db=None, bucket=None, openai_client=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값은 FLASK_ENV)
    :param db: Firestore 클라이언트를 직접 주입할 때 사용 (주입 시 Firebase 초기화 생략)
    :param bucket: 미디어 버킷을 직접 주입할 때 사용
    :param openai_client: OpenAI 클라이언트를 직접 주입할 때 사용
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
    jwt = JWTManager(app)

    # db 를 주입받지 않았으면 이 앱이 Firebase 연결과 구독 수명을 직접 관리
    app.config['FIREBASE_MANAGED'] = db is None
    if db is None:
        if not firebase_admin._apps:
            cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
            if not cred_path or not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred, {
                'storageBucket': app.config['FIREBASE_STORAGE_BUCKET']
            })
        db = firestore.client()

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스
    try:
        storage_instance = StorageService()
        storage_instance.init_app(app, bucket=bucket)
        app.services['storage'] = storage_instance
        logging.info("Storage service initialized successfully")
    except Exception as e:
        logging.error(f"Failed to initialize storage service: {e}")
        raise

    # 캡션 프록시용 생성형 API. 키가 없으면 비활성 상태로 남습니다.
    openai_instance = OpenAIService()
    openai_instance.init_app(app, client=openai_client)
    app.services['openai'] = openai_instance

    caption_client = CaptionClient()
    caption_client.init_app(app)
    app.services['captions'] = caption_client

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스
    app.services['feed'] = FeedService(db=db)
    app.services['posts'] = PostService(storage_service=app.services['storage'], db=db)
    app.services['users'] = UserService(db=db)
    app.services['sessions'] = SessionRegistry(feed_service=app.services['feed'], db=db)

    # 실제 Firebase에 연결한 경우에만 프로세스 종료 시 남은 변경 피드 구독을 모두 해제
    if app.config['FIREBASE_MANAGED']:
        atexit.register(app.services['sessions'].close_all)

    # - 인증 서비스 (앱 설정 필요)
    auth_service.init_app(app, db=db)

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return auth_service.is_token_revoked(jwt_payload)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(feed_bp, url_prefix='/api/feed')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(uploads_bp, url_prefix='/api/uploads')
    app.register_blueprint(config_bp, url_prefix='/api/config')
    app.register_blueprint(caption_proxy_bp, url_prefix='/functions/generate-caption')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # HTTP 예외(404, 405, 415 등)는 원래 상태 코드를 유지
        code = getattr(err, 'code', None)
        if isinstance(code, int) and 400 <= code < 500:
            return jsonify({"error_code": "HTTP_ERROR", "message": str(err)}), code
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
