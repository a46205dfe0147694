from datetime import datetime, timezone
import re
import secrets

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$")


class InvalidIdentifier(ValueError):
    """Raised when a string is not a well-formed store identifier."""


class RecordNotFound(LookupError):
    """Raised when a lookup by identifier matches no record."""


def new_object_id() -> str:
    return secrets.token_hex(12)


def validate_object_id(value: str) -> str:
    if not isinstance(value, str) or not _OBJECT_ID_RE.match(value):
        raise InvalidIdentifier(f"Invalid identifier: {value!r}")
    return value


def create_db_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
