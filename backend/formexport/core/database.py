"""
Database engine, session factory and unit-of-work helper.
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from formexport.core.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=connect_args,
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a block of writes as one unit of work.

    Scopes nest: only the outermost scope commits (on success) or rolls back
    (on any exception), so a service method can call other transactional
    methods and still have all of their writes succeed or fail together.

    Usage:
        with transaction(db):
            db.add(row)
    """
    depth = db.info.get("transaction_depth", 0)
    db.info["transaction_depth"] = depth + 1
    try:
        yield db
        if depth == 0:
            db.commit()
    except Exception:
        if depth == 0:
            db.rollback()
        raise
    finally:
        db.info["transaction_depth"] = depth
