import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from database import create_tables
from settings import LOG_LEVEL
from tournaments.router import router as tournaments_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    yield


app = FastAPI(title="Club Tournaments", lifespan=lifespan)
app.include_router(tournaments_router)


@app.get("/")
async def index():
    return {"status": "ok"}
