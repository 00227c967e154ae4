"""POST /v1/assistant/{task} - relay a prompt to the LLM gateway"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from finsignal_gateway.api.v1.schemas import AssistantRequest, AssistantResponse
from finsignal_gateway.api.dependencies import get_prompt_relay, get_request_id
from finsignal_gateway.infrastructure.clients.llm import PromptRelay
from finsignal_gateway.domain.prompts import get_task
from finsignal_gateway.domain.exceptions import (
    LLMCreditsExhaustedError,
    LLMGatewayError,
    LLMRateLimitedError,
    UnknownTaskError,
)
from finsignal_gateway.infrastructure.observability.logging import log_analysis

router = APIRouter()


@router.post("/assistant/{task}", response_model=AssistantResponse)
async def run_assistant_task(
    task: str,
    request_body: AssistantRequest,
    request: Request,
    relay: PromptRelay = Depends(get_prompt_relay),
):
    """Complete the user's prompt with the system prompt registered for `task`"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        assistant_task = get_task(task)
        content = await relay.complete(assistant_task.system_prompt, request_body.prompt)

    except UnknownTaskError as e:
        raise HTTPException(status_code=404, detail=str(e))

    except LLMRateLimitedError as e:
        logging.warning(f"LLM rate limited: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=429, detail=str(e))

    except LLMCreditsExhaustedError as e:
        logging.warning(f"LLM credits exhausted: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=402, detail=str(e))

    except LLMGatewayError as e:
        logging.error(f"LLM gateway error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="AI service unavailable")

    log_analysis(request_id, f"assistant_{task}", 1, (time.time() - start_time) * 1000)

    return AssistantResponse(task=task, content=content)
