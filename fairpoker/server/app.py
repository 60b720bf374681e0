"""
FastAPI Application Entry Point for FairPoker.

This module creates and configures the FastAPI application with:
- HTTP routes for games, verification and hand evaluation
- An in-memory game manager per application
- CORS middleware for development
"""

import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fairpoker import __version__
from fairpoker.server.routes import GameManager, router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="FairPoker",
        description="Verifiable Texas Hold'em engine with commit-reveal fairness proofs",
        version=__version__,
    )

    # CORS middleware for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.games = GameManager()
    app.include_router(router)

    logger.info("FairPoker application created")
    return app


# Create the application instance
app = create_app()


def main():
    """Run the server (for use as entry point)."""
    import uvicorn
    uvicorn.run(
        "fairpoker.server.app:app",
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    main()
