# playtime/__init__.py

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
from flask import Flask
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정 / 공통
from playtime.core.config import config_by_name
from playtime.core.errors import register_error_handlers
from playtime.core.security import init_jwt

# - API 블루프린트
from playtime.api.auth.routes import auth_bp
from playtime.api.users.routes import users_bp
from playtime.api.movies.routes import movies_bp
from playtime.api.favorites.routes import favorites_bp
from playtime.api.posts.routes import posts_bp
from playtime.api.comments.routes import comments_bp
from playtime.api.chat.routes import chat_bp
from playtime.api.notifications.routes import notifications_bp

# - 서비스 모듈
from playtime.services.tmdb_service import TmdbService
from playtime.services.identity_service import IdentityService
from playtime.services.notification_service import NotificationService
from playtime.api.auth.services import AuthService
from playtime.api.users.services import UserService
from playtime.api.favorites.services import FavoriteService
from playtime.api.posts.services import PostService
from playtime.api.comments.services import CommentService
from playtime.api.chat.services import ChatService


def create_app(config_name=None, db=None, auth_client=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param db: Firestore 클라이언트 (테스트에서는 MockFirestore를 주입)
    :param auth_client: firebase_admin.auth 대체 객체 (테스트용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 외부 서비스 초기화
    # =====================================================================================
    if db is None:
        if not firebase_admin._apps:
            cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
            if not cred_path or not os.path.exists(cred_path):
                raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
            firebase_admin.initialize_app(credentials.Certificate(cred_path))
        db = firestore.client()

    # =====================================================================================
    # 5. 서비스 인스턴스 생성 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    # 5-1. 다른 서비스의 기반이 되는 공용 서비스
    tmdb_instance = TmdbService()
    tmdb_instance.init_app(app)
    app.services['tmdb'] = tmdb_instance

    identity_instance = IdentityService()
    identity_instance.init_app(app)
    app.services['identity'] = identity_instance

    app.services['notifications'] = NotificationService(db=db)
    app.services['users'] = UserService(db=db, auth_client=auth_client)

    # 5-2. 다른 서비스를 주입받아야 하는 도메인 서비스
    app.services['favorites'] = FavoriteService(db=db)
    app.services['posts'] = PostService(db=db, user_service=app.services['users'])
    app.services['comments'] = CommentService(
        db=db,
        user_service=app.services['users'],
        notification_service=app.services['notifications'],
    )
    app.services['chat'] = ChatService(db=db, user_service=app.services['users'])

    # - 인증 서비스 (앱 컨텍스트 필요)
    auth_instance = AuthService(
        db=db,
        user_service=app.services['users'],
        identity_service=app.services['identity'],
        auth_client=auth_client,
    )
    auth_instance.init_app(app)
    app.services['auth'] = auth_instance
    init_jwt(app, auth_instance)

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(movies_bp, url_prefix='/api/movies')
    app.register_blueprint(favorites_bp, url_prefix='/api/favorites')
    app.register_blueprint(posts_bp, url_prefix='/api/posts')
    app.register_blueprint(comments_bp, url_prefix='/api')
    app.register_blueprint(chat_bp, url_prefix='/api/chat')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')

    # =====================================================================================
    # 7. 전역 에러 핸들러 설정
    # =====================================================================================
    register_error_handlers(app)

    # =====================================================================================
    # 8. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
