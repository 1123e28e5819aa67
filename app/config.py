"""
Application configuration
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8080
    API_TITLE: str = "SoC Watch Analyzer API"
    API_VERSION: str = "0.1.0"

    # Workspace persistence (JSON key-value file); empty = in-memory only
    STORE_PATH: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
