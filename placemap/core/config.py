# placemap/core/config.py

import os # 환경 변수를 읽기 위해 사용합니다.


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 액세스 토큰 서명 키. identity provider 교환 후 발급된 토큰을 검증하는 데 사용됩니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    # 모든 REST 엔드포인트의 공통 prefix
    API_PREFIX = os.getenv('API_PREFIX', '/api/v1')

    # 게시글 목록 조회 기본/최대 개수
    POSTS_DEFAULT_LIMIT = int(os.getenv('POSTS_DEFAULT_LIMIT', 50))
    POSTS_MAX_LIMIT = int(os.getenv('POSTS_MAX_LIMIT', 200))

    # FCM 데이터 메시지 전송 여부. 끄면 알림은 Firestore 에만 저장됩니다.
    NOTIFICATION_PUSH_ENABLED = os.getenv('NOTIFICATION_PUSH_ENABLED', 'true').lower() == 'true'

    # Firebase 초기화를 건너뛸지 여부 (테스트에서 서비스 주입 시 사용)
    FIREBASE_ENABLED = True


class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class ProductionConfig(Config):
    """운영 환경을 위한 설정 클래스입니다."""
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = 'testing-secret-key-with-enough-length-for-hs256'
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    # 테스트에서는 실제 Firebase 에 연결하지 않고 app.services 를 직접 주입합니다.
    FIREBASE_ENABLED = False
    NOTIFICATION_PUSH_ENABLED = False


# FLASK_ENV 값에 따라 create_app 에서 설정 클래스를 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    production=ProductionConfig,
    testing=TestingConfig
)
