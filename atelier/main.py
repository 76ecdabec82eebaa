# atelier/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from atelier.api import create_app
from atelier.data.database import Base, engine, init_db
from atelier.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    try:
        init_db(engine)
    except Exception:
        logger.exception("Failed to create tables")
        raise
    logger.info(f"Tables ready: {sorted(Base.metadata.tables)}")
    yield


app = create_app(lifespan=lifespan)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
