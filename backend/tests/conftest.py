import os, sys, pytest
# Ensure backend directory is on path so 'lernen_authz' and 'scripts' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import lernen_authz
from lernen_authz import create_app, get_db
from lernen_authz.models.authz import Base


@pytest.fixture(scope='session')
def app_instance():
    app = create_app({'DATABASE_URL': 'sqlite+pysqlite:///:memory:', 'AUTHZ_RESOLUTION_MODE': 'lenient'})
    yield app


@pytest.fixture(autouse=True)
def db_session(app_instance):
    # Fresh schema per test; reconciliation state must not leak between tests
    engine = lernen_authz.db_engine
    Base.metadata.create_all(engine)
    session = get_db()
    yield session
    session.rollback()
    lernen_authz.SessionLocal.remove()
    Base.metadata.drop_all(engine)
