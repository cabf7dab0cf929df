"""
Streamlit Frontend for Money Keeper

Pages:
1. Accounts - totals, create and delete accounts
2. Account detail - deposit, withdraw, history
3. Automation - create, pause and delete recurring rules
4. AI Analysis - Gemini written summary of the current state

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages in simple language
3. Visual feedback for all operations
4. Automation catch-up runs once per session, before anything is shown
"""

import asyncio

import streamlit as st

from src.models.ledger import (
    WEEKDAY_NAMES,
    Frequency,
    ThemeMode,
    TransactionType,
)
from src.orchestrator import AnalysisFlow, LedgerFlow, create_app_components
from src.queries import LedgerQueries
from src.validation import InputValidator, InvalidInputError


# Page configuration
st.set_page_config(
    page_title="Money Keeper",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

NORMAL_CSS = """
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
"""

CYBERPUNK_CSS = """
<style>
    .stApp {
        background-color: #0d0221;
        color: #f6f7d7;
    }
    .stButton>button {
        width: 100%;
        margin-top: 10px;
        border: 1px solid #ff2a6d;
        color: #05d9e8;
        background-color: #1a1a2e;
    }
    .info-box {
        padding: 20px;
        background-color: #1a1a2e;
        border-radius: 10px;
        border-left: 5px solid #05d9e8;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #ff2a6d;
    }
</style>
"""

PAGES = ["🏦 Accounts", "📒 Account Detail", "🔁 Automation", "🤖 AI Analysis"]


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize storage, keeping data in memory: {e}")
        return create_app_components(use_storage=False)


def show_rejection(error: InvalidInputError):
    st.error(InputValidator().get_user_friendly_summary(error.result))


def main():
    """Main application entry point."""
    ledger_flow, automation_flow, analysis_flow = get_components()

    # Catch up automation once per browser session
    if "automation_result" not in st.session_state:
        st.session_state.automation_result = automation_flow.run()

    state = ledger_flow.state
    css = CYBERPUNK_CSS if state.theme_mode is ThemeMode.CYBERPUNK else NORMAL_CSS
    st.markdown(css, unsafe_allow_html=True)

    st.sidebar.title("💰 Money Keeper")
    st.sidebar.markdown("---")

    page = st.sidebar.radio("Navigate to:", PAGES, index=0)

    st.sidebar.markdown("---")
    theme_label = "🌃 Cyberpunk mode" if state.theme_mode is ThemeMode.NORMAL else "☀️ Normal mode"
    if st.sidebar.button(theme_label):
        ledger_flow.toggle_theme()
        st.rerun()

    if not ledger_flow.last_save_ok:
        st.sidebar.warning("Changes could not be saved. They are kept for this session only.")

    result = st.session_state.automation_result
    if result.transaction_count:
        st.sidebar.info(f"Automation added {result.transaction_count} transactions since your last visit.")

    if page == PAGES[0]:
        render_accounts_page(ledger_flow)
    elif page == PAGES[1]:
        render_account_detail_page(ledger_flow)
    elif page == PAGES[2]:
        render_automation_page(ledger_flow)
    elif page == PAGES[3]:
        render_analysis_page(ledger_flow, analysis_flow)


def render_accounts_page(ledger_flow: LedgerFlow):
    """Render the account overview page."""
    st.title("🏦 Accounts")
    queries = LedgerQueries(ledger_flow.state)

    st.markdown(f"""
    <div class="info-box">
        <p>Total balance</p>
        <p class="big-number">${queries.total_balance():,.2f}</p>
    </div>
    """, unsafe_allow_html=True)

    with st.form("create_account", clear_on_submit=True):
        name = st.text_input("New account name", placeholder="e.g., Savings")
        if st.form_submit_button("➕ Create Account", type="primary"):
            try:
                account = ledger_flow.create_account(name)
                st.success(f"Created {account.name}")
                st.rerun()
            except InvalidInputError as e:
                show_rejection(e)

    st.markdown("---")

    if not ledger_flow.state.accounts:
        st.info("No accounts yet. Create your first account above.")
        return

    for account in ledger_flow.state.accounts:
        col1, col2, col3 = st.columns([3, 2, 1])
        with col1:
            st.markdown(f"**{account.name}** ({account.color_tag})")
        with col2:
            st.markdown(f"${account.balance:,.2f}")
        with col3:
            if st.button("🗑️ Delete", key=f"delete_account_{account.id}"):
                ledger_flow.delete_account(account.id)
                st.rerun()


def render_account_detail_page(ledger_flow: LedgerFlow):
    """Render one account with deposit/withdraw forms and its history."""
    st.title("📒 Account Detail")

    accounts = ledger_flow.state.accounts
    if not accounts:
        st.info("Create an account first.")
        return

    account = st.selectbox("Account", options=accounts, format_func=lambda a: a.name)
    st.markdown(f"### Balance: ${account.balance:,.2f}")

    col1, col2 = st.columns(2)
    for column, kind in ((col1, TransactionType.DEPOSIT), (col2, TransactionType.WITHDRAW)):
        with column:
            with st.form(f"{kind.label}_form", clear_on_submit=True):
                st.markdown(f"**{kind.label.title()}**")
                amount = st.text_input("Amount", key=f"{kind.label}_amount")
                note = st.text_input("Note (optional)", key=f"{kind.label}_note")
                if st.form_submit_button(kind.label.title()):
                    try:
                        ledger_flow.record_transaction(account.id, kind, amount, note)
                        st.rerun()
                    except InvalidInputError as e:
                        show_rejection(e)

    st.markdown("---")
    st.subheader("History")

    history = LedgerQueries(ledger_flow.state).account_history(account.id)
    if not history:
        st.info("No transactions yet.")
        return

    st.dataframe(
        [
            {
                "Date": tx.occurred_at.strftime("%Y-%m-%d %H:%M"),
                "Type": tx.kind.label,
                "Amount": f"{tx.signed_amount:+,.2f}",
                "Note": tx.note,
                "Auto": "✓" if tx.is_automated else "",
            }
            for tx in history
        ],
        use_container_width=True,
    )


def render_automation_page(ledger_flow: LedgerFlow):
    """Render the automation rule manager."""
    st.title("🔁 Automation")
    st.markdown("Recurring deposits and withdrawals are applied when you open the app.")

    accounts = ledger_flow.state.accounts
    if not accounts:
        st.info("Create an account first.")
        return

    with st.form("add_rule", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            account = st.selectbox("Account", options=accounts, format_func=lambda a: a.name)
            kind = st.selectbox("Type", options=list(TransactionType), format_func=lambda k: k.label.title())
            amount = st.text_input("Amount")
        with col2:
            description = st.text_input("Description", placeholder="e.g., Lunch")
            frequency = st.radio("Frequency", options=list(Frequency), format_func=lambda f: f.value.title())
            exclude_weekends = st.checkbox("Skip weekends (daily only)", value=True)
            weekdays = st.multiselect(
                "Days (weekly only)",
                options=list(range(7)),
                format_func=lambda d: WEEKDAY_NAMES[d],
            )

        if st.form_submit_button("➕ Add Rule", type="primary"):
            try:
                ledger_flow.add_rule(
                    account.id,
                    kind,
                    amount,
                    description,
                    frequency=frequency,
                    exclude_weekends=exclude_weekends,
                    weekdays=weekdays,
                )
                st.rerun()
            except InvalidInputError as e:
                show_rejection(e)

    st.markdown("---")

    rules = ledger_flow.state.automation_rules
    if not rules:
        st.info("No automation rules yet.")
        return

    for rule in rules:
        account = ledger_flow.state.find_account(rule.account_id)
        if rule.frequency is Frequency.WEEKLY:
            schedule = "Weekly: " + ", ".join(WEEKDAY_NAMES[d] for d in rule.weekdays)
        else:
            schedule = "Daily (weekdays)" if rule.exclude_weekends else "Daily"

        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            status = "▶️" if rule.active else "⏸️"
            st.markdown(
                f"{status} **{rule.description}**: {rule.kind.label} ${rule.amount:,.2f} "
                f"→ {account.name if account else 'missing account'} · {schedule} "
                f"· last run {rule.last_run_date.isoformat()}"
            )
        with col2:
            if st.button("Pause" if rule.active else "Resume", key=f"toggle_{rule.id}"):
                ledger_flow.toggle_rule(rule.id)
                st.rerun()
        with col3:
            if st.button("🗑️", key=f"delete_rule_{rule.id}"):
                ledger_flow.delete_rule(rule.id)
                st.rerun()


def render_analysis_page(ledger_flow: LedgerFlow, analysis_flow: AnalysisFlow):
    """Render the AI analysis page."""
    st.title("🤖 AI Analysis")
    st.markdown("Get a short written analysis of your balances and automation setup.")

    if st.button("🔍 Analyze", type="primary"):
        with st.spinner("Analyzing your finances..."):
            st.session_state.analysis_text = run_async(
                analysis_flow.analyze(ledger_flow.state)
            )

    if st.session_state.get("analysis_text"):
        st.markdown(st.session_state.analysis_text)


if __name__ == "__main__":
    main()
