import os
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


def _build_database_url() -> str:
    raw_url = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")
    if raw_url.startswith("postgresql://"):
        return raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw_url


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    if url in {"sqlite://", "sqlite:///:memory:"}:
        options["poolclass"] = StaticPool
    return options


DATABASE_URL = _build_database_url()
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, expire_on_commit=False
)
Base = declarative_base()


def init_db() -> None:
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL is not configured")
    from clinic.models.schema import appointment as _appointment  # noqa: F401
    from clinic.models.schema import billing as _billing  # noqa: F401
    from clinic.models.schema import content as _content  # noqa: F401
    from clinic.models.schema import otp as _otp  # noqa: F401
    from clinic.models.schema import patient as _patient  # noqa: F401
    from clinic.models.schema import session as _session  # noqa: F401
    from clinic.models.schema import sms_setting as _sms_setting  # noqa: F401
    from clinic.models.schema import therapist as _therapist  # noqa: F401
    from clinic.models.schema import treatment as _treatment  # noqa: F401
    from clinic.models.schema import user as _user  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope():
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
