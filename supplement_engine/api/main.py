"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from supplement_engine.config import settings
from supplement_engine.knowledge import get_knowledge_base
from supplement_engine.utils.logging import setup_logging, get_logger
from supplement_engine.api.routes import health, knowledge, scope, deltas, supplement

# Setup logging before anything else
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting application", environment=settings.environment)
    # Load the catalogue once at startup rather than on the first request
    get_knowledge_base()
    yield
    logger.info("Shutting down application")


# Create FastAPI application
app = FastAPI(
    title="Roofing Supplement Engine API",
    description="Detects carrier scope deltas and assembles citation-backed roofing supplement packages",
    version=settings.api_version,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if not settings.is_production else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
for module, tag in (
    (knowledge, "Knowledge Base"),
    (scope, "Scope"),
    (deltas, "Deltas"),
    (supplement, "Supplement"),
):
    app.include_router(
        module.router,
        prefix=f"/api/{settings.api_version}",
        tags=[tag],
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Roofing Supplement Engine API",
        "version": settings.api_version,
        "environment": settings.environment,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "supplement_engine.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
    )
