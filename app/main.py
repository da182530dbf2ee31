"""
Streamlit Frontend for Finance Tracker

This is the user interface for recording income and expenses and
watching where the money goes.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Validate before saving, and say exactly what is wrong
3. Clear error messages in simple language
4. Visual feedback for all operations
5. No hidden actions (reset and import always ask first)

The UI is a thin shell:
- All state lives in the FinanceTracker session object
- Every chart is rendered from the dashboard summary
- Nothing here computes totals or touches storage directly
"""

from datetime import date, datetime

import streamlit as st

from finance_tracker.config import get_settings, validate_all_settings
from finance_tracker.export import FormatError
from finance_tracker.models import (
    NO_FILTER,
    PaymentMethod,
    TransactionFilter,
    TransactionInput,
    TransactionType,
)
from finance_tracker.presenter import (
    category_pie,
    daily_line,
    format_currency,
    monthly_bar,
)
from finance_tracker.services import PersistenceError
from finance_tracker.tracker import FinanceTracker, create_tracker
from finance_tracker.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .income {
        color: #00c853;
        font-weight: bold;
    }
    .expense {
        color: #ff5252;
        font-weight: bold;
    }
    .big-number {
        font-size: 2.0em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_tracker() -> FinanceTracker:
    """Get or create the tracker session (cached)."""
    return create_tracker()


def main():
    """Main application entry point."""
    tracker = get_tracker()

    # Sidebar navigation
    st.sidebar.title("💰 Finance Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "➕ Add Transaction",
            "📋 Transactions",
            "💾 Import / Export",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    dark = tracker.theme == "dark"
    if st.sidebar.button("☀️ Light mode" if dark else "🌙 Dark mode"):
        try:
            tracker.toggle_theme()
        except PersistenceError as e:
            st.sidebar.error(str(e))
        st.rerun()

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(tracker)
    elif page == "➕ Add Transaction":
        render_add_page(tracker)
    elif page == "📋 Transactions":
        render_transactions_page(tracker)
    elif page == "💾 Import / Export":
        render_import_export_page(tracker)
    elif page == "⚙️ Settings":
        render_settings_page(tracker)


def render_dashboard_page(tracker: FinanceTracker):
    """Render summary cards and charts."""
    st.title("📊 Dashboard")

    symbol = tracker.settings.currency_symbol
    dark = tracker.theme == "dark"
    summary = tracker.summary()

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Income", format_currency(summary.totals.income, symbol))
    col2.metric("Total Expenses", format_currency(summary.totals.expense, symbol))
    col3.metric("Balance", format_currency(summary.totals.balance, symbol))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric(
        "Top Category",
        summary.top_category,
        format_currency(summary.top_category_amount, symbol),
        delta_color="off",
    )
    col2.metric("Savings Rate", f"{summary.savings_rate:.1f}%")
    col3.metric(
        f"Avg Daily Expense ({summary.average_window_days}d)",
        format_currency(summary.average_daily_expense, symbol),
    )
    col4.metric(
        "Most Active Day",
        summary.most_active_weekday or "-",
        f"{summary.most_active_weekday_count} transactions",
        delta_color="off",
    )

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        pie = category_pie(summary.category_expenses, dark=dark)
        if pie is None:
            st.info("No expense data yet.")
        else:
            st.plotly_chart(pie, use_container_width=True)
    with col2:
        st.plotly_chart(
            monthly_bar(summary.monthly_expenses, symbol=symbol, dark=dark),
            use_container_width=True,
        )

    st.plotly_chart(
        daily_line(summary.daily, symbol=symbol, dark=dark),
        use_container_width=True,
    )


def render_add_page(tracker: FinanceTracker):
    """Render the add-transaction form and the quick income entry."""
    st.title("➕ Add Transaction")

    settings = tracker.settings
    categories = settings.categories_list

    with st.form("add_transaction", clear_on_submit=True):
        col1, col2 = st.columns(2)

        with col1:
            title = st.text_input(
                "Title *",
                max_chars=settings.max_title_length,
                placeholder="e.g., Coffee",
            )
            amount = st.text_input(
                f"Amount ({settings.currency_symbol}) *",
                placeholder="0.00",
            )
            transaction_type = st.radio(
                "Type *",
                options=[t.value for t in TransactionType],
                index=1,
                horizontal=True,
                format_func=str.title,
            )

        with col2:
            category = st.selectbox("Category *", options=categories)
            transaction_date = st.date_input("Date", value=date.today())
            payment_method = st.selectbox(
                "Payment Method (optional)",
                options=[""] + [m.value for m in PaymentMethod],
            )

        submitted = st.form_submit_button("💾 Save Transaction", type="primary")

    if submitted:
        data = TransactionInput(
            title=title,
            amount=amount,
            type=transaction_type,
            category=category,
            date=transaction_date,
            payment_method=payment_method or None,
        )
        try:
            transaction = tracker.add_transaction(data)
        except ValidationError as e:
            st.error(str(e))
        except PersistenceError as e:
            st.error(f"Could not save: {e}")
        else:
            st.success(
                f"✅ Saved {transaction.title}: "
                f"{format_currency(transaction.amount, settings.currency_symbol)}"
            )

    st.markdown("---")
    st.subheader("⚡ Quick Income")
    st.markdown(f"*Saved under the {settings.default_income_category} category*")

    quick_amount = st.text_input("Income amount", key="quick_income_amount")
    if st.button("Add Income"):
        try:
            transaction = tracker.quick_add_income(quick_amount)
        except ValidationError as e:
            st.error(str(e))
        except PersistenceError as e:
            st.error(f"Could not save: {e}")
        else:
            st.success(
                f"✅ Income added: "
                f"{format_currency(transaction.amount, settings.currency_symbol)}"
            )


def render_transactions_page(tracker: FinanceTracker):
    """Render the filtered, paginated transaction list."""
    st.title("📋 Transactions")

    symbol = tracker.settings.currency_symbol

    # Filters
    col1, col2, col3 = st.columns(3)

    with col1:
        type_filter = st.selectbox(
            "Type",
            options=[NO_FILTER] + [t.value for t in TransactionType],
            format_func=lambda x: "All Types" if x == NO_FILTER else x.title(),
        )

    with col2:
        category_filter = st.selectbox(
            "Category",
            options=[NO_FILTER] + tracker.settings.categories_list,
            format_func=lambda x: "All Categories" if x == NO_FILTER else x,
        )

    with col3:
        text_filter = st.text_input("Search", placeholder="Title or category")

    date_range = st.date_input("Date Range", value=[], help="Select date range")
    date_from = date_range[0] if len(date_range) > 0 else None
    date_to = date_range[1] if len(date_range) > 1 else None

    page = tracker.view(
        TransactionFilter(
            type=type_filter,
            category=category_filter,
            text=text_filter or None,
            date_from=date_from,
            date_to=date_to,
        )
    )

    st.markdown("---")

    if not page.items:
        st.info(
            "📋 No transactions found. "
            "Use the 'Add Transaction' page to add your first one."
        )
        return

    for transaction in page.items:
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        css_class = "income" if transaction.is_income else "expense"
        col1.markdown(
            f"**{transaction.title}**  \n{transaction.category} · "
            f"{transaction.date.strftime('%d %b %Y')}"
        )
        col2.markdown(
            f"<span class='{css_class}'>"
            f"{format_currency(transaction.signed_amount, symbol)}</span>",
            unsafe_allow_html=True,
        )
        col3.markdown(transaction.payment_method or "")
        if col4.button("🗑️", key=f"delete_{transaction.id}"):
            try:
                tracker.delete_transaction(transaction.id)
            except PersistenceError as e:
                st.error(f"Could not delete: {e}")
            st.rerun()

    # Pager
    col1, col2, col3 = st.columns([1, 2, 1])
    with col1:
        if st.button("⬅️ Previous", disabled=not page.has_previous):
            tracker.cursor.previous_page()
            st.rerun()
    with col2:
        st.markdown(
            f"Page {page.page_number} of {max(page.total_pages, 1)} "
            f"({page.total_count} transactions)"
        )
    with col3:
        if st.button("Next ➡️", disabled=not page.has_next):
            tracker.cursor.next_page()
            st.rerun()


def render_import_export_page(tracker: FinanceTracker):
    """Render export downloads, backup import and reset."""
    st.title("💾 Import / Export")

    st.markdown("### Export")
    col1, col2 = st.columns(2)

    # Built on request; each build emits one export audit event
    with col1:
        if st.button("📄 Prepare CSV"):
            result = tracker.export_csv()
            if result.success:
                st.download_button(
                    "⬇️ Download CSV",
                    data=result.content,
                    file_name=result.filename,
                    mime="text/csv",
                )
            else:
                st.warning(result.message)

    with col2:
        if st.button("🗄️ Prepare JSON Backup"):
            backup = tracker.export_backup(now=datetime.now())
            st.download_button(
                "⬇️ Download JSON Backup",
                data=backup.content,
                file_name=backup.filename,
                mime="application/json",
            )

    st.markdown("---")
    st.markdown("### Import Backup")
    st.markdown("*Importing replaces all current transactions.*")

    uploaded_file = st.file_uploader("Choose a backup file", type=["json"])
    confirm_import = st.checkbox("I understand my current data will be replaced")
    if uploaded_file and st.button("📥 Import", disabled=not confirm_import):
        try:
            count = tracker.import_backup(uploaded_file.read())
        except FormatError as e:
            st.error(f"Invalid backup file: {e}")
        except PersistenceError as e:
            st.error(f"Could not save: {e}")
        else:
            st.success(f"✅ Imported {count} transactions")

    st.markdown("---")
    st.markdown("### Reset")

    confirm_reset = st.checkbox("Delete ALL transactions")
    if st.button("🗑️ Reset All Data", disabled=not confirm_reset):
        try:
            removed = tracker.reset()
        except PersistenceError as e:
            st.error(f"Could not reset: {e}")
        else:
            st.success(f"Removed {removed} transactions")


def render_settings_page(tracker: FinanceTracker):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    sections = [
        ("Storage", "storage"),
        ("Tracker", "tracker"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} settings - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} settings - {error}")

    storage = get_settings().storage
    st.markdown("---")
    st.markdown("### Storage")
    st.markdown(f"**Backend:** {storage.backend}")
    if storage.backend == "file":
        st.markdown(f"**Data directory:** `{storage.data_dir}`")
    st.markdown(f"**Transactions stored:** {len(tracker.store)}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
