from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from emhr.core.config import settings

# Check if using SQLite
is_sqlite = "sqlite" in settings.DATABASE_URL.lower()

if is_sqlite:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False}
    )
else:
    engine = create_engine(
        settings.DATABASE_URL,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=settings.DEBUG
    )

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

# Base model
Base = declarative_base()


def get_db():
    """Dependency to get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models():
    """Import every domain model so Base.metadata is complete"""
    from emhr.domain.auth import models as _auth  # noqa: F401
    from emhr.domain.clients import models as _clients  # noqa: F401
    from emhr.domain.scheduling import models as _scheduling  # noqa: F401
    from emhr.domain.notes import models as _notes  # noqa: F401
    from emhr.domain.diagnoses import models as _diagnoses  # noqa: F401
    from emhr.domain.treatment import models as _treatment  # noqa: F401
    from emhr.domain.settings import models as _settings  # noqa: F401
    from emhr.domain.billing import models as _billing  # noqa: F401
    from emhr.domain.insurance import models as _insurance  # noqa: F401
    from emhr.domain.documents import models as _documents  # noqa: F401
    from emhr.domain.audit import models as _audit  # noqa: F401


def init_db():
    """Initialize database tables"""
    import_models()
    Base.metadata.create_all(bind=engine)


def close_db():
    """Close database connections"""
    engine.dispose()
