"""
Configuration management for the chat session core.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from loguru import logger

from interview_chat.config.constants import COMPLETION_THRESHOLD, SESSION_KEY_DELIMITER

# This file is at interview_chat/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

PROJECT_ROOT = _project_root

# Load environment variables from project root
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    logger.debug(f".env file not found at: {_env_file}, using process environment")
    load_dotenv(override=False)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Backend relay (history, streaming send, interview completion, accounts)
    backend_api_url: str = Field(default="http://localhost:8000")
    stream_path: str = Field(default="/chat/agent/send/stream")

    # Completion relay served by interview_chat.api.app
    relay_api_url: str = Field(default="http://localhost:8100")
    relay_port: int = Field(default=8100)

    # Timeouts
    stream_timeout_seconds: float = Field(default=30.0)  # Ceiling for one send without a terminal frame
    http_timeout_seconds: float = Field(default=15.0)  # Non-streaming collaborator calls

    # Session lifecycle
    completion_threshold: int = Field(default=COMPLETION_THRESHOLD)  # Exchanges before an interview can be completed
    session_key_delimiter: str = Field(default=SESSION_KEY_DELIMITER)

    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=False)
    log_dir: str = Field(default="data/logs")

    # Relay service
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])
    service_name: str = Field(default="interview-chat-relay")
    service_version: str = Field(default="1.0.0")

    class Config:
        env_file = str(_project_root / ".env")
        env_file_encoding = "utf-8"
        extra = "allow"


# Create global settings instance
settings = Settings()
