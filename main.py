"""
Challenge Relay — FastAPI
=========================
Sends a team from the challenge they just finished to the next one on
their path. Teams and challenges live in two Notion databases:
  - GET  /next/{id}  → pick your team
  - POST /next/{id}  → redirect to the next challenge page, or "finished"
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from config import APP_PORT
from deps import render
from logging_setup import setup_logging
from notion_store import create_store

setup_logging()


# ── App lifecycle ─────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = create_store()
    logger.info("Notion store ready")
    yield
    app.state.store.close()


app = FastAPI(title="Challenge Relay", version="1.0.0", lifespan=lifespan)


# ── Include routers ──────────────────────────────────────────────────────────

from routes import challenges  # noqa: E402

app.include_router(challenges.router)


# ── Root routes ──────────────────────────────────────────────────────────────

@app.get("/", name="index")
def index(request: Request):
    return render("home.html", request)


@app.get("/health")
def health():
    return {"status": "healthy"}


# ── Error handlers ───────────────────────────────────────────────────────────

@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    return JSONResponse({"success": False, "message": "Not found"}, 404)


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    logger.opt(exception=exc).error(f"Unhandled error on {request.url.path}")
    return JSONResponse({"success": False, "message": "Internal server error"}, 500)


# ── CLI entry point ──────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server starting on http://localhost:{APP_PORT}")
    uvicorn.run("main:app", host="0.0.0.0", port=APP_PORT)
