from flask import Flask, g
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()
_store = None


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {'1', 'true', 'yes'}


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal, _store
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['BANNER_SECONDS'] = float(os.getenv('BANNER_SECONDS', '3.5'))
    app.config['AUTO_CREATE_TABLES'] = _env_flag('AUTO_CREATE_TABLES')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))
    _store = None

    if app.config['AUTO_CREATE_TABLES']:
        from .models.authz import Base
        import powerdesk.models.document  # noqa: F401
        Base.metadata.create_all(db_engine)

    jwt.init_app(app)

    from .services.identity import is_token_revoked

    @jwt.token_in_blocklist_loader
    def _check_revoked(jwt_header, jwt_payload):  # type: ignore
        return is_token_revoked(jwt_payload)

    from .routes.auth import auth_bp  # session, login, logout
    from .routes.panels import panels_bp  # role shells + navigation
    from .routes.invoices import invoices_bp  # invoice editor
    from .routes.notifications import notif_bp  # per-user notifications
    from .routes.shops import shops_bp  # shop management
    from .routes.users import users_bp  # user accounts
    from .routes.generators import generators_bp  # generator records
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(panels_bp)
    app.register_blueprint(invoices_bp, url_prefix='/invoices')
    app.register_blueprint(notif_bp, url_prefix='/notifications')
    app.register_blueprint(shops_bp, url_prefix='/shops')
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(generators_bp, url_prefix='/generators')

    @app.teardown_request
    def _close_auth_session(exc):  # type: ignore
        session = g.pop('auth_session', None)
        if session is not None:
            session.close()

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    from .services.store import StoreError, describe_store_error, store_error_status

    @app.errorhandler(StoreError)
    def handle_store_errors(e):  # type: ignore
        app.logger.error('Store error %s: %s', e.code, e.message)
        status = store_error_status(e.code)
        return {
            'error': {
                'status': status,
                'title': 'Store Error',
                'detail': describe_store_error(e, 'Store request failed'),
            }
        }, status

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()


def get_store():
    """Return the shared document store, creating the SQL-backed default lazily."""
    global _store
    if _store is None:
        from .services.store import SqlDocumentStore
        _store = SqlDocumentStore(get_db)
    return _store


def set_store(store):
    """Swap the process document store (tests, alternative backends)."""
    global _store
    _store = store
    return store
