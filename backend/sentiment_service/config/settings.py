"""
Application Configuration Management

This module manages all application settings using Pydantic BaseSettings.
Configuration can be loaded from environment variables or .env file.

Responsibilities:
- Load and validate environment variables
- Provide typed configuration access
- Manage API keys and collaborator service URLs
- Configure processing limits and timeouts
"""

from pydantic_settings import BaseSettings
from typing import List, Optional
import logging
import os


class Settings(BaseSettings):
    """Application settings with environment variable support"""
    
    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8080"]
    
    # File Upload Configuration
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_FILE_TYPES: List[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
    ]
    
    # Processing Limits
    MAX_BATCH_SIZE: int = 50
    MAX_TEXT_LENGTH: int = 5000
    PDF_MAX_OUTPUT_CHARS: int = 2000
    REQUEST_TIMEOUT: int = 10  # seconds, every outbound HTTP call
    
    # Sentiment Classification Service (Hugging Face Inference API)
    HUGGINGFACE_API_URL: str = (
        "https://api-inference.huggingface.co/models/"
        "cardiffnlp/twitter-roberta-base-sentiment-latest"
    )
    HUGGINGFACE_API_KEY: Optional[str] = None
    
    # Generative Text Service (Gemini)
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-pro"
    GEMINI_MAX_RETRIES: int = 1
    
    # URL Extraction
    URL_FETCH_USER_AGENT: str = "SentimentAI-Bot/1.0"
    URL_MAX_BYTES: int = 2 * 1024 * 1024
    
    # OCR Configuration
    TESSERACT_LANGUAGES: str = "eng"
    TESSERACT_PSM: int = 6
    
    # PDF Processing
    PDF_USE_PARSER: bool = True
    
    # Persistence
    REMOTE_STORE_URL: Optional[str] = None
    REMOTE_STORE_TOKEN: Optional[str] = None
    REMOTE_STORE_COLLECTION: str = "sentiments"
    USERS_COLLECTION: str = "users"
    LOCAL_STORE_DIR: str = "data/local_store"
    
    # Telemetry
    ANALYTICS_URL: Optional[str] = None
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    
    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()


def get_local_store_path() -> str:
    """Get absolute path for the local fallback store directory"""
    store_path = os.path.abspath(settings.LOCAL_STORE_DIR)
    os.makedirs(store_path, exist_ok=True)
    return store_path


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure root logging once at application start.
    
    Args:
        level: Log level name (defaults to settings.LOG_LEVEL)
        log_file: Optional file path that also receives log records
    """
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_file = log_file or settings.LOG_FILE
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        handlers.append(logging.FileHandler(log_file))
    
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )
