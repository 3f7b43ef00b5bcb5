import os
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

BACKEND = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def _alembic_config():
    cfg = Config(os.path.join(BACKEND, 'alembic.ini'))
    cfg.set_main_option('script_location', os.path.join(BACKEND, 'migrations'))
    return cfg


def test_upgrade_and_downgrade_on_sqlite(tmp_path, monkeypatch):
    db_url = f"sqlite:///{tmp_path / 'migrate.db'}"
    monkeypatch.setenv('DATABASE_URL', db_url)
    cfg = _alembic_config()
    command.upgrade(cfg, 'head')
    engine = create_engine(db_url)
    insp = inspect(engine)
    assert {'permissions', 'roles', 'role_permissions', 'users', 'user_roles'} <= set(insp.get_table_names())
    uniques = {u['name'] for u in insp.get_unique_constraints('role_permissions')}
    assert 'uq_role_permission' in uniques
    engine.dispose()

    command.downgrade(cfg, 'base')
    engine = create_engine(db_url)
    assert 'roles' not in inspect(engine).get_table_names()
    engine.dispose()
