"""rssproxy FastAPI application."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from rssproxy.api import router as api_router
from rssproxy.config import get_settings
from rssproxy.errors import FallbackError, FetchError, ValidationError

VERSION = "0.1.0"

# Configure logging so all rssproxy loggers emit to stderr
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Any browser-based client may call the proxy.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

app = FastAPI(
    title="rssproxy",
    description="Feed proxy - fetches remote RSS/Atom feeds and normalizes them",
    version=VERSION,
)

app.include_router(api_router)


@app.middleware("http")
async def cors(request: Request, call_next):
    """Answer pre-flight requests and attach CORS headers to every response."""
    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error serving %s", request.url.path)
            response = JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "message": type(exc).__name__},
            )
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(FetchError)
async def fetch_error_handler(request: Request, exc: FetchError) -> JSONResponse:
    logger.error("Error fetching RSS feed from %s: %s (%s)", exc.url, exc.message, exc.kind.value)
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to fetch RSS feed", "message": exc.message, "url": exc.url},
    )


@app.exception_handler(FallbackError)
async def fallback_error_handler(request: Request, exc: FallbackError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to parse RSS feed", "message": exc.message, "url": exc.url},
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "version": VERSION}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.rssproxy_host, port=settings.rssproxy_port)
