"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from dungeon_loop import __version__
from dungeon_loop.config import get_settings
from dungeon_loop.middleware.error_handler import setup_error_handlers

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("dungeon_loop")


app = FastAPI(
    title="Dungeon Loop",
    description="Procedural dungeon level generator",
    version=__version__,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.debug("[REQUEST] %s %s", request.method, request.url.path)
    response = await call_next(request)
    logger.debug("[RESPONSE] %s %s -> %d", request.method, request.url.path, response.status_code)
    return response

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


setup_error_handlers(app, debug=settings.DEBUG)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "online", "service": "Dungeon Loop", "version": __version__}


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "debug_mode": settings.DEBUG,
        "max_difficulty": settings.MAX_DIFFICULTY,
    }


# Routes
from dungeon_loop.api.routes import dungeons  # noqa: E402

app.include_router(dungeons.router, prefix="/api", tags=["dungeons"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dungeon_loop.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
