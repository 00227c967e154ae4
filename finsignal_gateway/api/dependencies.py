"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from finsignal_gateway.config import settings
from finsignal_gateway.domain.forecasting import NoiseSource, UniformNoise, ZeroNoise
from finsignal_gateway.infrastructure.clients.llm import PromptRelay


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_prompt_relay() -> PromptRelay:
    """Provide LLM gateway client instance"""
    return PromptRelay()


def build_noise(seed: int | None = None) -> NoiseSource:
    """Noise source for forecasts; 'none' in settings disables perturbation entirely"""
    if settings.forecast_noise == "none":
        return ZeroNoise()
    return UniformNoise(seed)


def resolve_days(days: int | None) -> int:
    """Apply the configured default horizon and cap"""
    if days is None:
        return settings.forecast_default_days
    return min(days, settings.forecast_max_days)
