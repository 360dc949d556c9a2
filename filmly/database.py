from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from filmly.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

# SQLite connections are used from FastAPI's threadpool as well as the event loop
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,  # Test connections before using them
    echo=settings.DB_ECHO  # Set DB_ECHO=true for SQL debugging
)


@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    """Log when a new connection is created"""
    logger.debug("Database connection established")


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

