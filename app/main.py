# app/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging
from sqlalchemy import exc as sa_exc

from app.config import settings
from app.database import engine, Base
from app.core.errors import DomainError
from app.models import user, profile, team, task, message  # noqa: F401  (register tables)
from app.routers import auth, teams, task as task_router, leaderboard, chat, storage, feed

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


app = FastAPI(title="Questboard - Gamified Team Tasks", version="1.0")

# Include Routers
app.include_router(auth.router)
app.include_router(teams.router)
app.include_router(task_router.router)
app.include_router(leaderboard.router)
app.include_router(chat.router)
app.include_router(storage.router)
app.include_router(feed.router)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(sa_exc.IntegrityError)
async def integrity_error_handler(request: Request, exc: sa_exc.IntegrityError):
    logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Conflicts with existing data"})


@app.exception_handler(sa_exc.OperationalError)
async def store_error_handler(request: Request, exc: sa_exc.OperationalError):
    logger.error("Database unavailable on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable"})


# Create DB Tables (for demo only; use Alembic in prod)
@app.on_event("startup")
async def startup_event():
    # create tables (async). ignore duplicate-object errors from previous partial runs.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logger.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise

@app.get("/")
def read_root():
    return {"message": "Welcome to Questboard"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
