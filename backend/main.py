"""
Wallpaper Symmetry Lab - Python Backend
FastAPI server guiding a decision-tree classification of repeating patterns
with geometric proofs (rotation centres, mirror and glide axes).
"""

import argparse
import logging
import os
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from routers import classification, session
from services.session_store import TREE_PATH_ENV, get_session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    print("Starting Wallpaper Symmetry Lab Backend...")
    print("=" * 50)

    tree = get_session().tree
    print(f"Decision tree: {os.environ.get(TREE_PATH_ENV) or 'bundled wallpaper tree'}")
    print(f"Nodes: {len(tree.nodes)} (start: {tree.start})")
    print("Backend ready!")
    print("=" * 50)

    yield

    # Shutdown
    print("Shutting down Wallpaper Symmetry Lab Backend...")


app = FastAPI(
    title="Wallpaper Symmetry Lab API",
    description="Backend API for guided wallpaper and frieze symmetry classification",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for the desktop frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for local development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(session.router, prefix="/api/session", tags=["Session"])
app.include_router(classification.router, prefix="/api/classification", tags=["Classification"])


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "service": "symmetry-lab"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Wallpaper Symmetry Lab API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


def main():
    """Main entry point for the backend server."""
    parser = argparse.ArgumentParser(description="Wallpaper Symmetry Lab Backend")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8765, help="Port to bind to")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--tree", default=None, help="Decision tree JSON (defaults to the bundled wallpaper tree)")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # Passed through the environment so reload workers pick it up too.
    if args.tree:
        os.environ[TREE_PATH_ENV] = os.path.abspath(args.tree)

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )


if __name__ == "__main__":
    main()
