"""FastAPI application exposing swap quotes and pool selection to agent tool layers."""

import os

import uvicorn
from fastapi import FastAPI

from refquote import __version__
from refquote.api.endpoints import router

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("REFQUOTE_HOST", "0.0.0.0")
PORT = int(os.environ.get("REFQUOTE_PORT", "8000"))
DEBUG = os.environ.get("REFQUOTE_DEBUG", "false").lower() in ("true", "1", "yes")

app = FastAPI(
    title="Ref Quote",
    description="Swap route quoting and pool selection for Ref-style exchanges",
    version=__version__,
)

app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the API server.

    Configuration via environment variables:
    - REFQUOTE_HOST: Host to bind to (default: 0.0.0.0)
    - REFQUOTE_PORT: Port to bind to (default: 8000)
    - REFQUOTE_DEBUG: Enable debug/reload mode (default: false)
    """
    uvicorn.run(
        "refquote.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
