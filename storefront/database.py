from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront import config
from storefront.models import Base


def make_engine(url):
    connect_args = {}
    if url.startswith("sqlite"):
        # sessions are handed between worker threads
        connect_args = {"check_same_thread": False, "timeout": 30}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(config.DATABASE_URL)
SessionLocal = sessionmaker(autoflush=False, bind=engine)


def init_db(bind=None):
    # creates all the tables in models.py if they don't already exist
    Base.metadata.create_all(bind=bind or engine)


# ------------------------------------------------------------
# Dependency
# ------------------------------------------------------------

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
