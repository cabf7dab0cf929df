"""AI Agents package."""

from src.agents.ai_agents import (
    ERROR_MESSAGE,
    MISSING_KEY_MESSAGE,
    NO_RESULT_MESSAGE,
    FinancialSummary,
    SummaryAgent,
)

__all__ = [
    "ERROR_MESSAGE",
    "MISSING_KEY_MESSAGE",
    "NO_RESULT_MESSAGE",
    "FinancialSummary",
    "SummaryAgent",
]
