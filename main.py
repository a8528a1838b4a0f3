from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from database import Base, engine
from models import AuthSession, Comment, Follow, Member, Organization, Post, User  # noqa: F401  register tables
from routes import (
    users,
    sessions,
    organizations,
    follows,
    profile,
    posts,
    comments,
    search,
)
from utils.logger import setup_api_logger

Base.metadata.create_all(bind=engine)

app = FastAPI(title="linkBD API (Users, Organizations, Followers, Posts, Comments)")

# setup file logger for API failures
api_logger = setup_api_logger()


@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    # log request info and stacktrace
    try:
        body = await request.body()
    except Exception:
        body = b""
    api_logger.error("Unhandled exception on %s %s | body=%s | error=%s",
                     request.method, request.url.path, body.decode('utf-8', errors='replace'), str(exc),
                     exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    try:
        body = await request.body()
    except Exception:
        body = b""
    api_logger.warning("HTTPException on %s %s | status=%s | body=%s | detail=%s",
                       request.method, request.url.path, exc.status_code,
                       body.decode('utf-8', errors='replace'), str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)


@app.get("/health", tags=["Health"])
def health():
    return {
        "status": "ok",
        "message": "linkBD API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(users.router)
app.include_router(sessions.router)
app.include_router(organizations.router)
app.include_router(follows.router)
app.include_router(profile.router)
app.include_router(posts.router)
app.include_router(comments.router)
app.include_router(search.router)
