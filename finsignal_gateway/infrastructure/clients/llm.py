"""LLM gateway client - relays system/user prompts to a chat-completion API"""

import asyncio
import httpx
from finsignal_gateway.config import settings
from finsignal_gateway.domain.exceptions import (
    LLMCreditsExhaustedError,
    LLMGatewayError,
    LLMRateLimitedError,
)
from finsignal_gateway.infrastructure.observability.metrics import llm_latency_histogram, llm_failure_counter


class PromptRelay:
    """Client for an OpenAI-compatible chat-completion gateway"""

    def __init__(
        self,
        gateway_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.gateway_url = gateway_url or settings.llm_gateway_url
        self.api_key = api_key if api_key is not None else settings.llm_api_key
        self.model = model or settings.llm_model
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.llm_max_retries
        self.backoff_base = backoff_base if backoff_base is not None else settings.llm_backoff_base
        self.transport = transport

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Send one chat completion and return the assistant text.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base, ...
        - Retries on 5xx errors and network failures only
        - 429 and 402 are surfaced immediately

        Raises:
            LLMRateLimitedError: Gateway returned 429
            LLMCreditsExhaustedError: Gateway returned 402
            LLMGatewayError: Not configured, timeout, other HTTP errors or malformed response
        """
        if not self.api_key:
            raise LLMGatewayError("LLM gateway not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while True:
                try:
                    with llm_latency_histogram.time():
                        response = await client.post(self.gateway_url, json=payload, headers=headers)
                    if response.status_code == 429:
                        raise LLMRateLimitedError("Rate limit exceeded, please try again later")
                    if response.status_code == 402:
                        raise LLMCreditsExhaustedError("LLM credits exhausted, please add funds")
                    response.raise_for_status()
                    return response.json()["choices"][0]["message"]["content"]

                except httpx.TimeoutException as e:
                    llm_failure_counter.inc()
                    raise LLMGatewayError(f"LLM gateway timeout after {self.timeout}s") from e
                except httpx.HTTPStatusError as e:
                    llm_failure_counter.inc()
                    if e.response.status_code < 500:
                        raise LLMGatewayError(f"LLM gateway error: {e.response.status_code}") from e
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise LLMGatewayError(f"LLM gateway error: {e.response.status_code}") from e
                except httpx.RequestError as e:
                    llm_failure_counter.inc()
                    attempt += 1
                    if attempt >= self.max_retries:
                        raise LLMGatewayError(f"LLM gateway unreachable: {e}") from e
                except (KeyError, IndexError, TypeError, ValueError) as e:
                    llm_failure_counter.inc()
                    raise LLMGatewayError(f"Invalid response from LLM gateway: {e}") from e

                await asyncio.sleep(self.backoff_base * (2 ** (attempt - 1)))
