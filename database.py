from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
import logging

from core.exceptions import WorkflowException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./focus_games.db"
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    # Submission requires a complete License record when enabled
    require_license: bool = True
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite: sync routes run in a thread pool
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency: provide a database Session

    The session is closed once the request finishes.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def transactional(func):
    """
    Transaction decorator: makes a workflow operation atomic

    Usage:
        @transactional
        def some_business_logic(db: Session, ...):
            # every DB operation runs inside one transaction
            version = GameVersion(...)
            db.add(version)
            # no manual commit, the decorator handles it

    If the function raises:
        - the transaction is rolled back
        - the exception is re-raised for the caller to handle

    Notes:
        - the first argument must be db: Session (or pass db=...)
        - never commit inside the wrapped function
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        # locate the db session (positional or keyword)
        db = None
        if args and isinstance(args[0], Session):
            db = args[0]
        elif 'db' in kwargs:
            db = kwargs['db']

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except Exception as e:
            # WorkflowException is a refused request, not a failure
            if isinstance(e, WorkflowException):
                logger.info(f"Transaction aborted in {func.__name__}: {e}")
            else:
                logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
