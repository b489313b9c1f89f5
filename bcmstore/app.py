"""FastAPI application serving entities, relations and diagram snapshots."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bcmgraph.config import configure_logging
from bcmstore import connection
from bcmstore.db import init_all
from bcmstore.diagram_routes import router as diagram_router
from bcmstore.entity_routes import router as entity_router
from bcmstore.relation_routes import router as relation_router

from dotenv import load_dotenv
load_dotenv()  # load environment variables from .env file

# CORS origins - configurable via environment variable
# Use comma-separated values for multiple origins, or "*" for all (development only)
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database tables on startup."""
    init_all()
    yield


app = FastAPI(
    title="Continuity Map Store",
    description="Record store for business processes, resources, relations and diagrams",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include routes
app.include_router(entity_router, prefix="/api")
app.include_router(relation_router, prefix="/api")
app.include_router(diagram_router, prefix="/api")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "0.1.0",
        "store_db": str(connection.STORE_DB_PATH),
        "endpoints": {
            "entities": "/api/entities",
            "relations": "/api/relations",
            "dependencies": "/api/dependencies",
            "process_resource_links": "/api/process-resource-links",
            "resource_dependencies": "/api/resource-dependencies",
            "diagrams": "/api/diagrams",
        },
    }


if __name__ == "__main__":
    import uvicorn
    configure_logging(os.getenv("BCM_LOG_LEVEL", "INFO"))
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("STORE_PORT", "8000")))
