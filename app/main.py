from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from app.api.v1.router import api_router
from app.core.backends import get_object_storage, get_record_store
from app.core.config import settings
from app.core.logging import configure_logging
from app.db.init_db import init_db
from app.services.board import MemoryBoard
from app.services.capture_booth import CaptureBooth

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    board = MemoryBoard(get_record_store(), get_object_storage())
    board.grid.fetch_all()
    app.state.board = board
    app.state.capture_booth = CaptureBooth()
    try:
        yield
    finally:
        app.state.capture_booth.shutdown()


app = FastAPI(title=settings.PROJECT_NAME, debug=settings.DEBUG, lifespan=lifespan)

allow_origins = settings.CORS_ORIGINS
allow_credentials = '*' not in allow_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(api_router)

if settings.STORE_BACKEND == 'sql':
    storage_dir = Path(settings.STORAGE_DIR)
    storage_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.STORAGE_MOUNT_PATH, StaticFiles(directory=storage_dir), name='storage')
