import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from huddle.core.config import DATABASE_URL
from huddle.models.user import Base  # Only import Base from user.py


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    # SSL CA certificate (TiDB / managed MySQL)
    ssl_ca_path = os.getenv("TIDB_SSL_CA_PATH")
    if ssl_ca_path:
        return {"ssl": {"ca": ssl_ca_path}}
    return {}


# SQLAlchemy engine
engine = create_engine(
    DATABASE_URL,
    connect_args=_connect_args(DATABASE_URL),
    pool_pre_ping=True,  # avoids stale connections
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency for FastAPI routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Function to create tables
def init_db():
    Base.metadata.create_all(bind=engine)
