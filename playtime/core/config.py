# playtime/core/config.py

import os  # 환경 변수를 읽기 위해 사용합니다.
from datetime import timedelta


class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # JWT 토큰 서명 키. 토큰의 위변조를 방지합니다.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=14)
    # EventSource(SSE)는 헤더를 보낼 수 없으므로 ?token= 쿼리 파라미터도 허용
    JWT_TOKEN_LOCATION = ['headers', 'query_string']
    JWT_QUERY_STRING_NAME = 'token'

    # 로그인 전 찜 목록(likedMovies)을 담는 세션 쿠키 서명 키
    SECRET_KEY = os.getenv('SECRET_KEY', os.getenv('JWT_SECRET_KEY'))

    # Firebase Auth REST(이메일/비밀번호 로그인)에 사용하는 웹 API 키
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY')
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # Google OAuth 인증에 필요한 클라이언트 시크릿 파일 경로
    GOOGLE_CLIENT_SECRETS_PATH = os.getenv('GOOGLE_CLIENT_SECRETS_PATH')
    GOOGLE_REDIRECT_URI = os.getenv('GOOGLE_REDIRECT_URI', 'postmessage')

    # TMDB (영화 메타데이터 API)
    TMDB_API_KEY = os.getenv('TMDB_API_KEY')
    TMDB_BASE_URL = os.getenv('TMDB_BASE_URL', 'https://api.themoviedb.org/3')
    TMDB_IMAGE_BASE = os.getenv('TMDB_IMAGE_BASE', 'https://image.tmdb.org/t/p/w300')
    TMDB_LANGUAGE = os.getenv('TMDB_LANGUAGE', 'ko-KR')
    TMDB_REGION = os.getenv('TMDB_REGION', 'KR')
    TMDB_TIMEOUT_SECONDS = float(os.getenv('TMDB_TIMEOUT_SECONDS', '10'))

    SEARCH_RESULT_LIMIT = 20
    POPULAR_RANKING_LIMIT = 30
    SSE_KEEPALIVE_SECONDS = 15


class DevelopmentConfig(Config):
    """개발 환경 설정. 코드 변경 시 자동 재시작, 상세 디버그 정보 표시."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)


class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'testing-secret-key')
    SECRET_KEY = 'testing-session-key'
    TMDB_API_KEY = os.getenv('TMDB_API_KEY', 'testing-tmdb-key')
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY', 'testing-web-api-key')
    SSE_KEEPALIVE_SECONDS = 0.05


class ProductionConfig(Config):
    DEBUG = False


# FLASK_ENV 값에 따라 create_app에서 적절한 설정을 선택합니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig,
)
