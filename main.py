import logging
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pymongo.errors import PyMongoError

import aggregates  # noqa: F401  subscribes the aggregate handlers
import config
import database
from errors import register_error_handlers
from routers import auth, bootcamps, courses, reviews, users

logging.basicConfig(
    level=logging.DEBUG if config.ENVIRONMENT == "development" else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("devcamper")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        db = database.connect()
        database.ensure_indexes(db)
    except PyMongoError as e:
        logger.error("Connect to database failed: %s", e)
        raise
    yield
    database.close()


# App and CORS
app = FastAPI(title="DevCamper API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if config.ENVIRONMENT == "development":
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s %s %d %.1f ms", request.method, request.url.path, response.status_code, elapsed)
        return response

register_error_handlers(app)

# Routers
for router in (
    bootcamps.router,
    courses.bootcamp_router,
    courses.router,
    reviews.bootcamp_router,
    reviews.router,
    auth.router,
    users.router,
):
    app.include_router(router, prefix=config.API_PREFIX)

# Uploaded photos
app.mount("/uploads", StaticFiles(directory=Path(config.FILE_UPLOAD_PATH), check_dir=False), name="uploads")


@app.get("/")
def root():
    return {"message": "DevCamper API running"}


def serve() -> int:
    """Run the server; returns 1 when startup fails (e.g. no database)."""
    server = uvicorn.Server(uvicorn.Config(app, host="0.0.0.0", port=config.PORT))
    try:
        server.run()
    except Exception as e:
        logger.error("Error: %s", e)
        return 1
    if not server.started:
        logger.error("Server failed to start")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(serve())
