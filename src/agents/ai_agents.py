"""
AI Agent for Money Keeper

The summary agent turns the user's balances, automation rules and recent
activity into a short written analysis using Gemini.

CRITICAL BOUNDARIES:
- The LLM only ever sees data formatted from the current state
- The LLM never changes state; its output is display text
- Every failure path ends in a fixed, user-readable message.
  analyze() never raises.

If no API key is configured the service is not called at all.
"""

from typing import Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from src.config import get_settings
from src.config.settings import GeminiSettings
from src.models.ledger import (
    AppState,
    AutomationRule,
    Frequency,
    Transaction,
    TransactionType,
    WEEKDAY_NAMES,
)
from src.queries import LedgerQueries


logger = structlog.get_logger(__name__)

MISSING_KEY_MESSAGE = "Please configure a Gemini API key (GEMINI_API_KEY) to enable AI analysis."
NO_RESULT_MESSAGE = "Unable to generate an analysis."
ERROR_MESSAGE = "AI analysis failed. Please try again later."


class FinancialSummary(BaseModel):
    """What the agent produced, and whether the model was actually used."""

    text: str
    generated: bool = Field(
        description="True if the text came from the model, False for a fallback message"
    )
    reason: Optional[str] = Field(
        default=None,
        description="Why a fallback was used"
    )


def format_account_line(name: str, balance: float) -> str:
    return f"{name}: ${balance:,.2f}"


def format_rule_line(rule: AutomationRule) -> str:
    direction = "deposit" if rule.kind is TransactionType.DEPOSIT else "withdraw"
    if rule.frequency is Frequency.WEEKLY:
        days = ", ".join(WEEKDAY_NAMES[d] for d in rule.weekdays) or "no days"
        schedule = f"weekly on {days}"
    else:
        schedule = "daily, weekends excluded" if rule.exclude_weekends else "daily"
    return f"{rule.description}: {direction} ${rule.amount:,.2f} ({schedule})"


def format_transaction_line(tx: Transaction) -> str:
    sign = "+" if tx.kind is TransactionType.DEPOSIT else "-"
    return f"{tx.occurred_at:%Y-%m-%d} - {tx.note} ({sign}{tx.amount:,.2f})"


class SummaryAgent:
    """
    AI agent for the financial analysis page.

    RESPONSIBILITIES:
    - Format balances, active rules and the most recent transactions
    - Ask Gemini for a short analysis with suggestions
    - Degrade to a fixed message on any failure
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[object] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model
        self._setup_error: Optional[str] = None
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI. A failure leaves the agent unavailable."""
        try:
            genai.configure(api_key=self._settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=self._settings.model_name,
                generation_config={
                    "temperature": self._settings.temperature,
                    "max_output_tokens": self._settings.max_tokens,
                }
            )
        except Exception as e:
            logger.error("gemini_setup_failed", error=str(e))
            self._model = None
            self._setup_error = str(e)

    @property
    def is_available(self) -> bool:
        return self._model is not None

    def build_prompt(self, state: AppState) -> str:
        """Build the analysis prompt from the current state."""
        queries = LedgerQueries(state)
        limit = self._settings.recent_transaction_limit

        accounts = "\n".join(
            format_account_line(a.name, a.balance) for a in state.accounts
        ) or "No accounts"
        rules = "\n".join(
            format_rule_line(r) for r in queries.active_rules()
        ) or "No active automation rules"
        recent = "\n".join(
            format_transaction_line(t) for t in queries.recent_transactions(limit)
        ) or "No transactions yet"

        return f"""You are a professional financial advisor. Based on the user's financial data below, give a short, insightful analysis with suggestions.

Current account balances:
{accounts}

Automation rules:
{rules}

Most recent {limit} transactions (newest first):
{recent}

Analyse the cash flow, point out any potential risks, and suggest improvements to the automated deposit and withdrawal setup.
Keep the tone friendly and professional, and stay under 300 words."""

    async def analyze(self, state: AppState) -> FinancialSummary:
        """
        Generate the analysis text. Never raises.
        """
        if not self.is_available:
            if self._setup_error:
                return FinancialSummary(
                    text=ERROR_MESSAGE,
                    generated=False,
                    reason=self._setup_error,
                )
            return FinancialSummary(
                text=MISSING_KEY_MESSAGE,
                generated=False,
                reason="missing_api_key",
            )

        prompt = self.build_prompt(state)
        try:
            response = await self._model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            logger.error("summary_generation_failed", error=str(e))
            return FinancialSummary(text=ERROR_MESSAGE, generated=False, reason=str(e))

        if not text:
            return FinancialSummary(text=NO_RESULT_MESSAGE, generated=False, reason="empty_response")

        return FinancialSummary(text=text, generated=True)
