"""Application configuration via environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from .env or environment."""

    DATABASE_URL: str = "sqlite:///./vinstack.db"
    CORS_ORIGINS: str = "http://localhost:5173"
    LOG_LEVEL: str = "INFO"

    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"

    ELEVENLABS_API_URL: str = "https://api.elevenlabs.io/v1"
    ELEVENLABS_API_KEY: str = ""
    ELEVENLABS_MODEL_ID: str = "eleven_monolingual_v1"

    TAVUS_API_URL: str = "https://tavusapi.com/v2"
    TAVUS_API_KEY: str = ""
    TAVUS_REPLICA_ID: str = ""

    STRIPE_API_URL: str = "https://api.stripe.com/v1"
    STRIPE_SECRET_KEY: str = ""
    STRIPE_SUCCESS_URL: str = "http://localhost:5173/billing/success"
    STRIPE_CANCEL_URL: str = "http://localhost:5173/pricing"
    STRIPE_PORTAL_RETURN_URL: str = "http://localhost:5173/settings"

    PROVIDER_TIMEOUT_SECONDS: float = 30.0

    SANDBOX_TIMEOUT_SECONDS: float = 5.0
    SANDBOX_MAX_CODE_BYTES: int = 50 * 1024
    SANDBOX_MAX_OUTPUT_BYTES: int = 64 * 1024
    SANDBOX_NODE_BINARY: str = "node"
    # Docker is the isolation boundary; the local fallback is for development only
    SANDBOX_USE_DOCKER: bool = True
    SANDBOX_ALLOW_FALLBACK: bool = False
    SANDBOX_DOCKER_BINARY: str = "docker"
    SANDBOX_DOCKER_PYTHON_IMAGE: str = "python:3.12-slim"
    SANDBOX_DOCKER_NODE_IMAGE: str = "node:20-slim"
    SANDBOX_DOCKER_PULL_TIMEOUT: int = 60
    SANDBOX_MEMORY_MB: int = 256
    SANDBOX_PIDS_LIMIT: int = 50
    SANDBOX_FALLBACK_USER: str = "nobody"

    class Config:
        env_file = ".env"


settings = Settings()
