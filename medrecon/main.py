from contextlib import asynccontextmanager
import os
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from medrecon import __version__
from medrecon.providers import registry
from medrecon.routes.reconcile import router as reconcile_router
from medrecon.utils.api_clients import close_http_client

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_http_client()


# Create FastAPI application
app = FastAPI(
    title="Medicine Reconciliation Engine",
    description="Cross-verifies medicine identifiers against FDA, RxNorm, DailyMed, ClinicalTrials.gov and PubMed",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "message": str(exc),
                "code": "internal_error",
                "type": "server_error"
            }
        }
    )


app.include_router(reconcile_router)
logger.info("Included reconcile router")


@app.get("/")
async def root():
    """Root endpoint to confirm the server is running."""
    return {"message": "Medicine Reconciliation Engine is running", "status": "ok"}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": __version__,
        "providers": dict(registry.DISPLAY_NAMES),
    }


def run():
    uvicorn.run("medrecon.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    uvicorn.run("medrecon.main:app", host="0.0.0.0", port=8000, reload=True)
