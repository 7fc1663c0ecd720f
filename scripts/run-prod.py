"""
FastAPI Production Server

Run the interview completion relay in production mode.

Usage:
    python scripts/run-prod.py
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
    """Start the FastAPI production server"""
    logger.info(f"Interview Chat - Completion Relay (Production) on port {settings.relay_port}")

    uvicorn.run(
        "interview_chat.api.app:app",
        host="0.0.0.0",
        port=settings.relay_port,
        reload=False,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
