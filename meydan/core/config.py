# meydan/core/config.py

import os


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명 키. 토큰 위변조 방지에 사용됩니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')

    # 클라이언트에 공개되어도 되는 Firebase 프로젝트 정보
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY')
    # 미디어 파일을 저장하는 단일 공개 버킷
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # 클라이언트가 캡션 생성을 요청하는 프록시 주소
    CAPTION_PROXY_URL = os.getenv('CAPTION_PROXY_URL', 'http://127.0.0.1:5000/functions/generate-caption')

    # 프록시 서버 전용. 절대 클라이언트 설정으로 내보내지 않습니다.
    OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
    OPENAI_CAPTION_MODEL = os.getenv('OPENAI_CAPTION_MODEL', 'gpt-4o-mini')

    # GET /api/config 로 노출되는 유일한 값들
    PUBLIC_CONFIG_KEYS = ('FIREBASE_PROJECT_ID', 'FIREBASE_WEB_API_KEY', 'FIREBASE_STORAGE_BUCKET', 'CAPTION_PROXY_URL')


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'testing-secret-key-with-enough-length')
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')


class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')


# FLASK_ENV 값에 따라 create_app 에서 설정 클래스를 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
