from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.config import settings
import os

# Refuse to silently point the test suite at a hosted database
if os.getenv("TESTING") == "true" and not settings.DATABASE_URL.startswith("sqlite"):
    import warnings
    warnings.warn(
        f"Tests are running but DATABASE_URL points to non-SQLite: {settings.DATABASE_URL[:50]}...\n"
        "Set DATABASE_URL=sqlite:///:memory: before importing app modules.",
        RuntimeWarning,
        stacklevel=2,
    )

if settings.DATABASE_URL.startswith("sqlite"):
    from sqlalchemy.pool import NullPool

    engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": NullPool,
        "echo": False,
    }
else:
    # Supabase: use the pooler URL (port 6543), direct connections are capped
    engine_kwargs = {
        "connect_args": {"connect_timeout": 10},
        "pool_size": 10,
        "max_overflow": 5,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_timeout": 30,
        "echo": False,
    }

engine = create_engine(settings.DATABASE_URL, **engine_kwargs)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
