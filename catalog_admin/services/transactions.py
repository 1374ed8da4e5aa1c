"""Transaction boundary used by every write path."""
import logging
import zlib
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, OperationalError

from catalog_admin.errors import CatalogError, ConflictError, TransientStoreError
from catalog_admin.extensions import db

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_PGCODES = {"40001", "40P01", "55P03"}


def _is_lock_failure(exc):
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) in RETRYABLE_PGCODES:
        return True
    return "database is locked" in str(orig).lower()


@contextmanager
def atomic():
    """Commit the session when the block succeeds, roll back otherwise.

    Database errors are translated into the catalog error taxonomy:
    unique-constraint violations become ConflictError and lock or
    serialization failures become TransientStoreError.
    """
    try:
        yield db.session
        db.session.commit()
    except CatalogError:
        db.session.rollback()
        raise
    except IntegrityError as e:
        db.session.rollback()
        logger.info("Integrity violation rolled back: %s", e.orig)
        raise ConflictError("Record conflicts with an existing record") from e
    except OperationalError as e:
        db.session.rollback()
        if _is_lock_failure(e):
            logger.warning("Transaction aborted by concurrent writer: %s", e.orig)
            raise TransientStoreError(
                "The record was modified concurrently, please retry"
            ) from e
        raise
    except Exception:
        db.session.rollback()
        raise


def advisory_lock(name):
    """Serialize writers on `name` until the current transaction ends.

    Needed for rules that count rows before inserting, where a row lock has
    nothing to lock yet. PostgreSQL takes a transaction-scoped advisory
    lock; SQLite already serializes writers on the database file.
    """
    if db.session.get_bind().dialect.name != "postgresql":
        return
    key = zlib.crc32(name.encode()) & 0x7FFFFFFF
    db.session.execute(db.text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
