from __future__ import annotations
"""Session-level helpers for bulk maintenance writes.

Usage:
    with foreign_key_checks_disabled(session):
        store.reconcile(catalog)

On exit the setting goes back to whatever it was before the block, including
on error. A failed restore never replaces an error raised inside the block.
"""
import logging
from contextlib import contextmanager
from sqlalchemy import text

logger = logging.getLogger(__name__)

# dialect -> (read current value, set statement with {value} placeholder, off value, on value)
_TOGGLES = {
    'mysql': ('SELECT @@FOREIGN_KEY_CHECKS', 'SET FOREIGN_KEY_CHECKS={value}', '0', '1'),
    'mariadb': ('SELECT @@FOREIGN_KEY_CHECKS', 'SET FOREIGN_KEY_CHECKS={value}', '0', '1'),
    'sqlite': ('PRAGMA foreign_keys', 'PRAGMA foreign_keys={value}', 'OFF', 'ON'),
}


def foreign_key_toggle_statements(dialect_name: str):
    """(read, disable, enable) SQL for a dialect, or None where there is no session-level switch."""
    toggle = _TOGGLES.get(dialect_name)
    if toggle is None:
        return None
    read, template, off, on = toggle
    return read, template.format(value=off), template.format(value=on)


@contextmanager
def foreign_key_checks_disabled(session):
    dialect = session.get_bind().dialect.name
    toggle = _TOGGLES.get(dialect)
    if toggle is None:
        yield session
        return
    read, template, off, on = toggle
    previous = session.execute(text(read)).scalar()
    restore = template.format(value=on if previous and int(previous) else off)
    session.execute(text(template.format(value=off)))
    try:
        yield session
    except BaseException:
        try:
            session.execute(text(restore))
        except Exception:
            logger.exception('Could not restore foreign key checks (%s)', restore)
        raise
    session.execute(text(restore))

__all__ = ['foreign_key_checks_disabled', 'foreign_key_toggle_statements']
