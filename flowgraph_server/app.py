"""FastAPI application for editing and validating flows."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flowgraph.errors import (
    FlowGraphError,
    FlowVersionConflictError,
    InputError,
    InvariantViolationError,
    NotFoundError,
)

load_dotenv()  # before modules that read the environment at import

from flowgraph_server.db import init_all
from flowgraph_server.flow_db import FLOW_DB_PATH
from flowgraph_server.flow_routes import router as flow_router
from flowgraph_server.node_routes import router as node_router
from flowgraph_server.schema_routes import router as schema_router

# Use comma-separated values for multiple origins, or "*" for all (development only)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def error_status(exc: FlowGraphError) -> int:
    """HTTP status code for a flowgraph error."""
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, FlowVersionConflictError):
        return 409
    if isinstance(exc, (InvariantViolationError, InputError)):
        return 400
    return 500


async def flowgraph_error_handler(request: Request, exc: FlowGraphError) -> JSONResponse:
    status_code = error_status(exc)
    if status_code >= 500:
        logger.error("Unhandled flowgraph error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    init_all()
    logger.info("Flow database ready at %s", FLOW_DB_PATH)
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Flowgraph API",
        description="API server for flow editing, schema resolution and validation",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FlowGraphError, flowgraph_error_handler)

    app.include_router(flow_router, prefix="/api")
    app.include_router(node_router, prefix="/api")
    app.include_router(schema_router, prefix="/api")

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": "0.1.0",
            "flow_db": str(FLOW_DB_PATH),
            "endpoints": {
                "flows": "/api/flows",
                "node_types": "/api/node-types",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
