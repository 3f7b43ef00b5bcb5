import pytest
from sqlalchemy import text

from lernen_authz import get_db
from lernen_authz.errors import StorageUnavailable
from lernen_authz.utils.db import foreign_key_checks_disabled, foreign_key_toggle_statements


class Result:
    def __init__(self, value):
        self.value = value

    def scalar(self):
        return self.value


class RecordingSession:
    def __init__(self, dialect_name, current=1, fail_on=None):
        self.statements = []
        self.current = current
        self.fail_on = fail_on
        self._bind = type('Bind', (), {'dialect': type('Dialect', (), {'name': dialect_name})()})()

    def get_bind(self):
        return self._bind

    def execute(self, stmt, *a, **k):
        sql = str(stmt)
        if sql == self.fail_on:
            raise RuntimeError('connection dropped')
        self.statements.append(sql)
        return Result(self.current)


def test_mysql_checks_restored_after_error():
    session = RecordingSession('mysql', current=1)
    with pytest.raises(RuntimeError):
        with foreign_key_checks_disabled(session):
            raise RuntimeError('boom')
    assert session.statements == ['SELECT @@FOREIGN_KEY_CHECKS', 'SET FOREIGN_KEY_CHECKS=0', 'SET FOREIGN_KEY_CHECKS=1']


def test_mysql_previous_setting_is_kept_when_already_off():
    session = RecordingSession('mysql', current=0)
    with foreign_key_checks_disabled(session):
        pass
    assert session.statements[-1] == 'SET FOREIGN_KEY_CHECKS=0'


def test_failed_restore_does_not_hide_original_error():
    session = RecordingSession('mysql', current=1, fail_on='SET FOREIGN_KEY_CHECKS=1')
    with pytest.raises(StorageUnavailable):
        with foreign_key_checks_disabled(session):
            raise StorageUnavailable('lost connection')


def test_failed_restore_after_success_is_raised():
    session = RecordingSession('mysql', current=1, fail_on='SET FOREIGN_KEY_CHECKS=1')
    with pytest.raises(RuntimeError):
        with foreign_key_checks_disabled(session):
            pass


def test_unsupported_dialect_is_noop():
    session = RecordingSession('postgresql')
    with foreign_key_checks_disabled(session) as s:
        assert s is session
    assert session.statements == []
    assert foreign_key_toggle_statements('postgresql') is None
    assert foreign_key_toggle_statements('sqlite') == ('PRAGMA foreign_keys', 'PRAGMA foreign_keys=OFF', 'PRAGMA foreign_keys=ON')


def test_sqlite_pragma_returns_to_previous_value():
    session = get_db()
    session.rollback()
    session.execute(text('PRAGMA foreign_keys=OFF'))
    with foreign_key_checks_disabled(session):
        assert session.execute(text('PRAGMA foreign_keys')).scalar() == 0
    assert session.execute(text('PRAGMA foreign_keys')).scalar() == 0

    session.execute(text('PRAGMA foreign_keys=ON'))
    with foreign_key_checks_disabled(session):
        assert session.execute(text('PRAGMA foreign_keys')).scalar() == 0
    assert session.execute(text('PRAGMA foreign_keys')).scalar() == 1
    session.execute(text('PRAGMA foreign_keys=OFF'))
