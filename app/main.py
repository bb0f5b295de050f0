"""
FastAPI application entry point.
"""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from app.config import settings
from app.middleware.logging import RequestLoggingMiddleware
from app.api import webhooks
from app.utils.logging import setup_logging, get_logger

VERSION = "0.1.0"

# Configure structured logging
setup_logging(settings.log_level)

logger = get_logger(__name__)

app = FastAPI(
    title="Bitbucket Task Bot",
    description="Comments and creates tasks on Bitbucket pull requests based on branch workflows",
    version=VERSION
)

app.add_middleware(RequestLoggingMiddleware)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "version": VERSION}


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint."""
    return "Hi, I'm the Bitbucket Task Bot!"


app.include_router(webhooks.router)


@app.on_event("startup")
async def startup_event():
    logger.info(
        "Starting Bitbucket Task Bot",
        extra={"workflow_config_path": settings.workflow_config_path, "task_api": settings.task_api}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
