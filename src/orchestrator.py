"""
Main Orchestrator for Money Keeper

This module ties together all the components and defines the flows for:
1. Ledger changes (validate → apply → persist → audit)
2. Automation catch-up on startup (run engine → persist if changed)
3. AI analysis (state → prompt → Gemini → text)

DESIGN DECISION: State changes are pure functions (src.ledger,
src.automation). The flows here own the only mutable reference to the
current AppState and write it through to the store after every change.
A failed write is logged; the in-memory state stays authoritative until
the next successful write.
"""

from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional

import structlog

from src.agents import SummaryAgent
from src.audit import AuditLogger, configure_logging
from src.automation import AutomationEngine, AutomationRun
from src.config import get_settings
from src.ledger import operations
from src.models.audit import AuditEventBuilder
from src.models.ledger import (
    Account,
    AppState,
    AutomationRule,
    Frequency,
    Transaction,
    TransactionType,
)
from src.services.storage import (
    InMemoryStateStorage,
    LocalFileStateStorage,
    StateStorageInterface,
    StateStore,
)
from src.validation import InvalidInputError


logger = structlog.get_logger(__name__)


class LedgerFlow:
    """
    Owns the current AppState and applies user operations to it.

    Every successful operation:
    1. Produces a new state from a pure operation
    2. Replaces the current state
    3. Persists it (best effort)
    4. Records an audit event

    Rejected input raises InvalidInputError and changes nothing.
    """

    def __init__(
        self,
        store: StateStore,
        audit_logger: Optional[AuditLogger] = None,
        palette: Optional[list[str]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self._audit_logger = audit_logger or AuditLogger()
        self._palette = palette or get_settings().app.account_color_list
        self._clock = clock
        self._state = AppState()
        self._last_save_ok = True

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def last_save_ok(self) -> bool:
        """Whether the most recent persistence attempt succeeded."""
        return self._last_save_ok

    def today(self) -> date:
        return self._clock().date()

    def load(self) -> AppState:
        """Load the persisted state into memory."""
        self._state = self._store.load()
        self._audit_logger.log(AuditEventBuilder.state_loaded(
            accounts=len(self._state.accounts),
            transactions=len(self._state.transactions),
            rules=len(self._state.automation_rules),
        ))
        return self._state

    def commit(self, new_state: AppState) -> bool:
        """Replace the current state and persist it."""
        self._state = new_state
        self._last_save_ok = self._store.save(new_state)
        if self._last_save_ok:
            self._audit_logger.log(AuditEventBuilder.state_saved())
        else:
            self._audit_logger.log(AuditEventBuilder.save_failed())
        return self._last_save_ok

    def _apply(self, operation: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        """Run a pure operation, auditing rejected input."""
        try:
            return fn(self._state, *args, **kwargs)
        except InvalidInputError as e:
            self._audit_logger.log(AuditEventBuilder.input_rejected(
                operation=operation,
                issues=[issue.model_dump() for issue in e.result.issues],
            ))
            raise

    # -- Accounts -------------------------------------------------------------

    def create_account(self, name: str) -> Account:
        new_state, account = self._apply("create_account", operations.create_account, name, self._palette)
        self.commit(new_state)
        self._audit_logger.log(AuditEventBuilder.account_created(account.id, account.name))
        return account

    def delete_account(self, account_id: str) -> None:
        before = self._state
        new_state = operations.delete_account(before, account_id)
        if new_state == before:
            return
        self.commit(new_state)
        self._audit_logger.log(AuditEventBuilder.account_deleted(
            account_id=account_id,
            removed_transactions=len(before.transactions) - len(new_state.transactions),
            removed_rules=len(before.automation_rules) - len(new_state.automation_rules),
        ))

    # -- Transactions ---------------------------------------------------------

    def record_transaction(
        self,
        account_id: str,
        kind: TransactionType,
        amount: Any,
        note: str = "",
    ) -> Transaction:
        new_state, tx = self._apply(
            f"record_{kind.label}",
            operations.record_transaction,
            account_id,
            kind,
            amount,
            note,
            now=self._clock(),
        )
        self.commit(new_state)
        self._audit_logger.log(AuditEventBuilder.transaction_recorded(
            transaction_id=tx.id,
            account_id=tx.account_id,
            kind=tx.kind.value,
            amount=tx.amount,
        ))
        return tx

    def deposit(self, account_id: str, amount: Any, note: str = "") -> Transaction:
        return self.record_transaction(account_id, TransactionType.DEPOSIT, amount, note)

    def withdraw(self, account_id: str, amount: Any, note: str = "") -> Transaction:
        return self.record_transaction(account_id, TransactionType.WITHDRAW, amount, note)

    # -- Automation rules -----------------------------------------------------

    def add_rule(
        self,
        account_id: str,
        kind: TransactionType,
        amount: Any,
        description: str,
        frequency: Frequency = Frequency.DAILY,
        exclude_weekends: bool = True,
        weekdays: Iterable[int] = (),
    ) -> AutomationRule:
        new_state, rule = self._apply(
            "add_rule",
            operations.add_rule,
            account_id,
            kind,
            amount,
            description,
            self.today(),
            frequency=frequency,
            exclude_weekends=exclude_weekends,
            weekdays=weekdays,
        )
        self.commit(new_state)
        self._audit_logger.log(AuditEventBuilder.rule_created(
            rule.id, rule.description, rule.frequency.value,
        ))
        return rule

    def toggle_rule(self, rule_id: str) -> Optional[AutomationRule]:
        new_state = operations.toggle_rule(self._state, rule_id)
        rule = new_state.find_rule(rule_id)
        if rule is None:
            return None
        self.commit(new_state)
        self._audit_logger.log(AuditEventBuilder.rule_toggled(rule.id, rule.active))
        return rule

    def delete_rule(self, rule_id: str) -> None:
        if self._state.find_rule(rule_id) is None:
            return
        self.commit(operations.delete_rule(self._state, rule_id))
        self._audit_logger.log(AuditEventBuilder.rule_deleted(rule_id))

    # -- Preferences ----------------------------------------------------------

    def toggle_theme(self) -> None:
        self.commit(operations.toggle_theme(self._state))
        self._audit_logger.log(AuditEventBuilder.theme_changed(self._state.theme_mode.value))


class AutomationFlow:
    """
    Runs the automation catch-up against the ledger's current state.

    Meant to run once at startup. Persists whenever any watermark moved,
    even if no transaction was generated.
    """

    def __init__(
        self,
        ledger: LedgerFlow,
        engine: Optional[AutomationEngine] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._ledger = ledger
        self._engine = engine or AutomationEngine()
        self._audit_logger = audit_logger or AuditLogger()

    def run(self, as_of: Optional[date] = None) -> AutomationRun:
        as_of = as_of or self._ledger.today()
        result = self._engine.run(self._ledger.state, as_of)

        if result.changed:
            self._ledger.commit(result.state)
            self._audit_logger.log(AuditEventBuilder.automation_completed(
                as_of=as_of.isoformat(),
                rules_advanced=len(result.advanced_rule_ids),
                transactions_created=result.transaction_count,
            ))

        return result


class AnalysisFlow:
    """Runs the AI analysis. Always returns display text."""

    def __init__(
        self,
        agent: Optional[SummaryAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._agent = agent or SummaryAgent()
        self._audit_logger = audit_logger or AuditLogger()

    async def analyze(self, state: AppState) -> str:
        summary = await self._agent.analyze(state)
        if summary.generated:
            self._audit_logger.log(AuditEventBuilder.summary_generated(len(summary.text)))
        else:
            self._audit_logger.log(AuditEventBuilder.summary_failed(summary.reason or "unknown"))
        return summary.text


def create_storage(use_storage: bool = True) -> StateStorageInterface:
    """
    Build the configured storage backend.

    Falls back to in-memory storage when storage is disabled or the
    configured backend cannot be set up.
    """
    if not use_storage:
        return InMemoryStateStorage()

    settings = get_settings().storage
    if settings.backend == "google_sheets":
        try:
            from src.services.storage.google_sheets import GoogleSheetsStateStorage

            return GoogleSheetsStateStorage()
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_backend_unavailable", backend=settings.backend, error=str(e))
            return InMemoryStateStorage()

    return LocalFileStateStorage(settings.data_dir)


def create_app_components(
    use_storage: bool = True,
    clock: Callable[[], datetime] = datetime.now,
) -> tuple[LedgerFlow, AutomationFlow, AnalysisFlow]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to persist to the configured backend.
                    Set to False to keep everything in memory.
        clock: Source of "now"; today's date for automation comes from it.

    Returns:
        (ledger_flow, automation_flow, analysis_flow), with the persisted
        state already loaded into the ledger
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    audit_logger = AuditLogger()

    store = StateStore(create_storage(use_storage), key=settings.storage.state_key)
    ledger_flow = LedgerFlow(
        store,
        audit_logger=audit_logger,
        palette=settings.app.account_color_list,
        clock=clock,
    )
    ledger_flow.load()

    automation_flow = AutomationFlow(ledger_flow, audit_logger=audit_logger)
    analysis_flow = AnalysisFlow(audit_logger=audit_logger)

    return ledger_flow, automation_flow, analysis_flow
