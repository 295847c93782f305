"""Dashboard settings read from the environment, and the shared database engine."""
import logging
import os
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = "./sdr_dashboard.db"
PRODUCTION_ENVS = ("prod", "production")


def is_production() -> bool:
    deploy_env = os.getenv("ENV") or os.getenv("RENDER", "").lower() or "dev"
    return deploy_env in PRODUCTION_ENVS or bool(os.getenv("RENDER"))


def resolve_database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if not url:
        if is_production():
            raise RuntimeError(
                "The SDR dashboard needs DATABASE_URL when deployed; "
                "a local SQLite file would lose every appointment on redeploy."
            )
        url = f"sqlite:///{os.getenv('DATABASE_PATH', DEFAULT_SQLITE_PATH)}"
    # SQLAlchemy only accepts the postgresql:// scheme
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    return url


DATABASE_URL = resolve_database_url()
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
MAX_IMPORT_BYTES = int(os.getenv("MAX_IMPORT_BYTES", str(5 * 1024 * 1024)))

logger.info(f"Dashboard database driver: {DATABASE_URL.partition(':')[0] or 'unknown'}")

# FastAPI may hand a request's session to a different worker thread than the one that opened it
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args)


def create_db_and_tables():
    """Create the four dashboard tables; existing rows are left alone."""
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
