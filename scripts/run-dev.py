"""
FastAPI Development Server

Run the interview completion relay in development mode.

Usage:
    python scripts/run-dev.py
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.chdir(project_root)

import uvicorn
from loguru import logger

from interview_chat.config.settings import settings


def main():
    """Start the FastAPI development server"""
    logger.info("="*80)
    logger.info("Interview Chat - Completion Relay")
    logger.info("="*80)
    logger.info(f"Server will be available at: http://localhost:{settings.relay_port}")
    logger.info(f"API Documentation: http://localhost:{settings.relay_port}/docs")
    logger.info(f"Complete interview: POST http://localhost:{settings.relay_port}/api/complete-interview")
    logger.info("Press CTRL+C to stop the server")
    logger.info("="*80)

    uvicorn.run(
        "interview_chat.api.app:app",
        host="0.0.0.0",
        port=settings.relay_port,
        reload=True,
        log_level="info",
        access_log=True,
        reload_dirs=[str(project_root / "interview_chat")]
    )


if __name__ == "__main__":
    main()
