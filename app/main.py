"""
Streamlit Frontend for Finance Tracker

One screen: a dashboard of totals on top, then two tabs (Transactions,
Debts), each with an entry form next to its list. The screen is gated
behind sign-in.

DESIGN PRINCIPLES:
1. The UI only renders view-models and forwards clicks to them
2. Every action ends in one visible notification
3. Nothing is updated optimistically; lists show what the store returned

Each browser session gets its own components (and its own Supabase
session), kept in st.session_state.
"""

import asyncio

import streamlit as st

from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.models.records import DebtType, TransactionType
from finance_tracker.orchestrator import FinancePage, create_app_components
from finance_tracker.views import NotificationLevel
from finance_tracker.views.formatting import (
    debt_badge,
    debt_date_line,
    format_display_date,
    format_money,
    transaction_amount_label,
)


# Page configuration
st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for amounts
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .positive {
        color: #28a745;
        font-weight: bold;
    }
    .negative {
        color: #dc3545;
        font-weight: bold;
    }
    .settled {
        opacity: 0.6;
    }
</style>
""", unsafe_allow_html=True)


_TOAST_ICONS = {
    NotificationLevel.SUCCESS: "✅",
    NotificationLevel.ERROR: "❌",
    NotificationLevel.INFO: "ℹ️",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_page() -> FinancePage:
    """Get or create this browser session's components."""
    if "page" not in st.session_state:
        page, client = create_app_components(use_storage=True)
        st.session_state.page = page
        st.session_state.offline = client is None
        st.session_state.loaded = False
    return st.session_state.page


def currency() -> str:
    return get_settings().app.currency_symbol


def show_notifications(page: FinancePage) -> None:
    for note in page.drain_notifications():
        st.toast(note.message, icon=_TOAST_ICONS[note.level])


def main():
    """Main application entry point."""
    page = get_page()

    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown("---")
    nav = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Overview", "⚙️ Settings"],
        index=0,
    )
    if st.session_state.offline:
        st.sidebar.warning("Offline mode: data is kept in memory only.")

    if nav == "🏠 Overview":
        render_overview(page)
    else:
        render_settings_page()

    show_notifications(page)


def render_sign_in(page: FinancePage):
    """Auth gate: shown whenever nobody is signed in."""
    st.title("💰 Finance Tracker")
    st.markdown("Sign in to see your finances.")

    with st.form("sign_in"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.form_submit_button("Sign In", type="primary"):
            if run_async(page.sign_in(email, password)):
                st.session_state.loaded = True
                st.rerun()


def render_overview(page: FinancePage):
    user = run_async(page.session.check())
    if user is None:
        st.session_state.loaded = False
        render_sign_in(page)
        return

    if not st.session_state.loaded:
        with st.spinner("Loading your records..."):
            run_async(page.load())
        st.session_state.loaded = True

    render_dashboard(page)

    transactions_tab, debts_tab = st.tabs(["Transactions", "Debts"])
    with transactions_tab:
        form_col, list_col = st.columns(2)
        with form_col:
            render_transaction_form(page)
        with list_col:
            render_transaction_list(page)
    with debts_tab:
        form_col, list_col = st.columns(2)
        with form_col:
            render_debt_form(page)
        with list_col:
            render_debt_list(page)


def render_dashboard(page: FinancePage):
    dashboard = page.dashboard
    symbol = currency()

    header_col, logout_col = st.columns([5, 1])
    with header_col:
        st.title(dashboard.greeting)
        st.markdown("Here's your financial overview")
    with logout_col:
        if st.button("🚪 Logout"):
            if run_async(page.sign_out()):
                st.session_state.loaded = False
                st.rerun()

    stats = dashboard.stats
    row1 = st.columns(3)
    row1[0].metric("Total Income", format_money(stats.total_income, symbol))
    row1[1].metric("Total Expense", format_money(stats.total_expense, symbol))
    row1[2].metric("Balance", format_money(stats.balance, symbol))
    row2 = st.columns(3)
    row2[0].metric("Money Borrowed", format_money(stats.pending_borrowed, symbol),
                   help="Pending to return")
    row2[1].metric("Money Lent", format_money(stats.pending_lent, symbol),
                   help="Pending to receive")


def _nonce(name: str) -> int:
    """Widget generation for a form; bumping it re-creates the widgets."""
    return st.session_state.setdefault(f"{name}_nonce", 0)


def _bump(name: str) -> None:
    st.session_state[f"{name}_nonce"] = _nonce(name) + 1


def render_transaction_form(page: FinancePage):
    form = page.transaction_form
    n = _nonce("transaction_form")
    st.subheader("Add Transaction")

    with st.form(f"transaction_form_{n}"):
        kind = st.selectbox(
            "Type",
            options=list(TransactionType),
            index=list(TransactionType).index(form.type),
            format_func=lambda x: x.value.title(),
        )
        category = st.text_input(
            "Category",
            value=form.category,
            placeholder="e.g., Salary, Food, Transport",
        )
        amount = st.text_input(f"Amount ({currency()})", value=form.amount, placeholder="0.00")
        entry_date = st.date_input("Date", value=form.date)
        description = st.text_area(
            "Description (Optional)",
            value=form.description,
            placeholder="Add notes about this transaction...",
        )
        submitted = st.form_submit_button(
            "Adding..." if form.submitting else "Add Transaction",
            type="primary",
            disabled=form.submitting,
        )

    if submitted:
        form.type, form.category, form.amount = kind, category, amount
        form.date, form.description = entry_date, description
        if run_async(form.submit()):
            _bump("transaction_form")
        st.rerun()


def render_transaction_list(page: FinancePage):
    view = page.transaction_list
    symbol = currency()
    st.subheader("Transaction History")

    if view.loading:
        st.caption("Loading...")
        return
    if view.is_empty:
        st.info(view.empty_message)
        return

    for txn in view.items:
        info_col, amount_col, action_col = st.columns([4, 2, 1])
        with info_col:
            st.markdown(f"**{txn.category}** `{txn.type.value}`")
            if txn.description:
                st.caption(txn.description)
            st.caption(format_display_date(txn.transaction_date))
        with amount_col:
            css = "positive" if txn.type == TransactionType.INCOME else "negative"
            st.markdown(
                f'<span class="{css}">{transaction_amount_label(txn, symbol)}</span>',
                unsafe_allow_html=True,
            )
        with action_col:
            if st.button("🗑️", key=f"delete_txn_{txn.id}", help="Delete"):
                run_async(view.delete(txn.id))
                st.rerun()


def render_debt_form(page: FinancePage):
    form = page.debt_form
    n = _nonce("debt_form")
    st.subheader("Add Debt Record")

    with st.form(f"debt_form_{n}"):
        kind = st.selectbox(
            "Type",
            options=list(DebtType),
            index=list(DebtType).index(form.type),
            format_func=lambda x: "I borrowed" if x == DebtType.BORROWED else "I lent",
        )
        person_name = st.text_input(
            "Person Name",
            value=form.person_name,
            placeholder="Who is this with?",
        )
        amount = st.text_input(f"Amount ({currency()})", value=form.amount, placeholder="0.00")
        entry_date = st.date_input("Date", value=form.date)
        description = st.text_area(
            "Description (Optional)",
            value=form.description,
            placeholder="Add notes about this debt...",
        )
        submitted = st.form_submit_button(
            "Adding..." if form.submitting else "Add Debt Record",
            type="primary",
            disabled=form.submitting,
        )

    if submitted:
        form.type, form.person_name, form.amount = kind, person_name, amount
        form.date, form.description = entry_date, description
        if run_async(form.submit()):
            _bump("debt_form")
        st.rerun()


def render_debt_list(page: FinancePage):
    view = page.debt_list
    symbol = currency()
    st.subheader("Debt Records")

    if view.loading:
        st.caption("Loading...")
        return
    if view.is_empty:
        st.info(view.empty_message)
        return

    for debt in view.items:
        info_col, amount_col, action_col = st.columns([4, 2, 1])
        with info_col:
            status = "" if debt.is_pending else " · ✅ Settled"
            st.markdown(f"**{debt.person_name}** `{debt_badge(debt)}`{status}")
            if debt.description:
                st.caption(debt.description)
            st.caption(debt_date_line(debt))
        with amount_col:
            css = "positive" if debt.type == DebtType.LENT else "negative"
            if not debt.is_pending:
                css += " settled"
            st.markdown(
                f'<span class="{css}">{format_money(debt.amount, symbol)}</span>',
                unsafe_allow_html=True,
            )
        with action_col:
            if view.can_settle(debt):
                if st.button("✔️", key=f"settle_debt_{debt.id}", help="Mark as settled"):
                    run_async(view.settle(debt.id))
                    st.rerun()
            if st.button("🗑️", key=f"delete_debt_{debt.id}", help="Delete"):
                run_async(view.delete(debt.id))
                st.rerun()


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Supabase (Auth + Storage)", "supabase"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    if status.get("app"):
        app_settings = get_settings().app
        st.markdown(f"**Environment:** {app_settings.app_environment}")
        st.markdown(f"**Log level:** {app_settings.log_level}")

    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with "
        "`SUPABASE_URL` and `SUPABASE_ANON_KEY`. "
        "See `.env.example` for all variables."
    )


if __name__ == "__main__":
    main()
