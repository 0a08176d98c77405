"""
Main application module for the paving service.

This file sets up the FastAPI application, configures CORS so browser
clients can call the API directly and exposes a simple health check
endpoint.  The paving router is included under the ``/api`` namespace.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes_pave import router as pave_router


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="gridpave")

    # Allow all origins by default.  Restrict this when deploying behind a
    # known frontend.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint for monitoring and deployment probes.
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(pave_router, prefix="/api", tags=["pave"])

    return app


# Create the application instance.  Uvicorn imports this when running
# `uvicorn gridpave.main:app` from within the backend directory.
app = create_app()
