"""Registry of assistant tasks relayed to the LLM gateway"""

from dataclasses import dataclass
from typing import Dict
from finsignal_gateway.domain.exceptions import UnknownTaskError


@dataclass(frozen=True)
class AssistantTask:
    name: str
    system_prompt: str


_TASKS: Dict[str, AssistantTask] = {
    task.name: task
    for task in [
        AssistantTask(
            "budget_insights",
            "You are a financial analyst AI providing budget insights. "
            "Summarize the most critical financial risks and opportunities in 2-3 sentences.",
        ),
        AssistantTask(
            "chart_explain",
            "You are a financial data analyst. Explain the chart described by the user: "
            "key observations, why they matter, recommended actions and risk factors.",
        ),
        AssistantTask(
            "analyst_query",
            "You are a senior financial analyst. Answer the user's question about their "
            "business data concisely and state any assumptions you make.",
        ),
        AssistantTask(
            "anomaly_explain",
            "You are a fraud and risk analyst. Explain the flagged transaction patterns "
            "in plain language and suggest next steps for review.",
        ),
        AssistantTask(
            "forecast_explain",
            "You are a treasury analyst. Explain the liquidity forecast, highlight days "
            "at risk and recommend cash management actions.",
        ),
        AssistantTask(
            "daily_brief",
            "You are an executive assistant for a finance team. Write a short daily "
            "briefing with headline metrics, alerts and action items.",
        ),
    ]
}


def get_task(name: str) -> AssistantTask:
    """Look up an assistant task by name"""
    try:
        return _TASKS[name]
    except KeyError:
        raise UnknownTaskError(f"Unknown assistant task: {name}") from None


def task_names() -> list[str]:
    return sorted(_TASKS)
