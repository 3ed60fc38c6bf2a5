"""
FastAPI application entry point.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import AgentFactoryError
from app.db.init_db import init_db
from app.api.agent import router as agent_router, bridge_router
from app.api.tools import router as tools_router


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Agent Factory API",
    description="Projects, voice agents, tools and agent deployment",
    version="0.1.0",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AgentFactoryError)
async def agent_factory_error_handler(request: Request, exc: AgentFactoryError):
    """Render service errors with their status code and provider detail."""
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Register routers
app.include_router(agent_router)
app.include_router(bridge_router)
app.include_router(tools_router)


@app.on_event("startup")
async def startup_event():
    """Create database tables automatically on startup."""
    logger.info("Starting up application...")
    init_db()
    logger.info("Application startup complete")


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "status": "ok",
        "message": "Agent Factory API",
        "version": "0.1.0",
    }


@app.get("/health")
@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.host, port=settings.port, reload=settings.debug)
