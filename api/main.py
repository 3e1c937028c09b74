import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from books import repository as books_repository
from books import router as books_router
from core import db, errors, log, settings

log.configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process and make sure `books` exists
    # before the first request is accepted.
    try:
        await db.init_pool()
        await books_repository.ensure_schema()
    except db.DB_ERRORS:
        logger.exception("database_init_failed")
        await db.close_pool()
        raise
    logger.info("database_initialized")
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="Book Catalog API", lifespan=lifespan)

origins = settings.cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

errors.install(app)

app.include_router(books_router.router, prefix="/api", tags=["books"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/", include_in_schema=False)
def root() -> FileResponse:
    index_file = Path(settings.static_dir()) / "index.html"
    if not index_file.is_file():
        raise HTTPException(status_code=404, detail="Frontend not found")
    return FileResponse(index_file)


# Mounted last so API routes always win over same-named files.
if Path(settings.static_dir()).is_dir():
    app.mount("/", StaticFiles(directory=settings.static_dir()), name="static")


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host(), port=settings.port())
