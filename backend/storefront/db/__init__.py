import importlib
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from storefront.config import settings

log = logging.getLogger("storefront.db")

DATABASE_URL = settings.DATABASE_URL
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Model modules that must be imported before create_all so metadata is populated
MODEL_MODULES = [
    "storefront.models.product",
    "storefront.models.cart_session",
    "storefront.models.order",
]


def init_db(reset: bool = None):
    """
    Initialize DB schema.

    If `reset` is not given, the RESET_DB env var (1/true/yes) decides whether
    existing tables are dropped and recreated.
    """
    if reset is None:
        reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")

    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.info("Resetting database (RESET_DB set)")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.info("Database initialized", extra={"event": "db.initialized", "reset": bool(reset)})


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
