"""Configuration management using Pydantic Settings"""

from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./finsignal.db"

    # LLM gateway (OpenAI-compatible chat completions)
    llm_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    llm_api_key: str = ""
    llm_model: str = "google/gemini-2.5-flash"

    # Service
    service_name: str = "finsignal-gateway"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # HTTP Client
    http_timeout_seconds: float = 30.0
    llm_max_retries: int = 3
    llm_backoff_base: float = 1.0  # Exponential backoff base in seconds

    # Forecasting
    forecast_noise: Literal["uniform", "none"] = "uniform"
    forecast_trend_factor: float = 0.98
    forecast_default_days: int = 7
    forecast_max_days: int = 90


settings = Settings()
