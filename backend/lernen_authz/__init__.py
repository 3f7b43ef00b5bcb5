from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None


def create_app(config: Optional[Dict[str, Any]] = None):
    """Bootstrap context for reconciliation runs: config, engine and session registry."""
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['AUTHZ_RESOLUTION_MODE'] = os.getenv('AUTHZ_RESOLUTION_MODE', 'lenient')
    app.config['AUTHZ_CATALOG_FILE'] = os.getenv('AUTHZ_CATALOG_FILE')
    app.config['SEED_ADMIN_EMAIL'] = os.getenv('SEED_ADMIN_EMAIL', 'admin@amentotech.com')

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

    app.logger.debug('Database configured: %s', db_engine.url.render_as_string(hide_password=True))
    return app


def get_db():
    return SessionLocal()
