from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from earnings_ledger.core.config import settings

# SQLite connections are shared across FastAPI's threadpool in local mode.
_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

# Engine and session factory for request handlers and scheduled jobs.
# Services never import these; they receive a Session from their caller.
engine = create_engine(
    settings.DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        # Always hand the connection back, even if the handler raised.
        db.close()
