from __future__ import annotations
import logging
from contextlib import contextmanager
from sqlalchemy.orm.exc import StaleDataError
from werkzeug.exceptions import Conflict

log = logging.getLogger(__name__)


@contextmanager
def unit_of_work(session):
    """Commit once when the block finishes; roll back everything if it raises.

    A lost optimistic-lock race surfaces as 409 so the caller can reload and retry.
    """
    try:
        yield session
        session.commit()
    except StaleDataError:
        session.rollback()
        log.warning('concurrent modification detected, transaction rolled back')
        raise Conflict(description='Record was modified by another request; reload and retry')
    except Exception:
        session.rollback()
        raise
