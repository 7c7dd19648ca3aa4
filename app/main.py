# app/main.py
from contextlib import asynccontextmanager

import uvicorn

from app.api import create_app
from app.data.database import Base, engine
from app.data import models  # noqa: F401  rejestracja modeli w Base.metadata
from app.utils.logging import get_logger

logger = get_logger(__name__)


def init_db():
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables created")


@asynccontextmanager
async def lifespan(app):
    init_db()
    yield


app = create_app(lifespan=lifespan)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
