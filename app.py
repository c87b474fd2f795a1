import logging
import sys
from datetime import date
from pathlib import Path

import streamlit as st
from pydantic import ValidationError

# Add current directory to path
sys.path.append(str(Path(__file__).parent))

from aggregation import ALL, MONTHS, DashboardState, Filters
from api_client import FinanceApiClient
from categories import AVAILABLE_ICONS, DEFAULT_ICON, CategoryRegistry
from config import Settings, configure_logging
from dashboard import _kpis, cat_spend, expenses_frame, incomes_frame, to_csv_bytes
from errors import AuthenticationError, BusyError, DuplicateCategoryError, FormValidationError, RemoteFailure
from insights import build_recommendation_request, compute_highlights
from reconcile import ExpenseDraft, reconcile
from records import RecordStore, to_decimal
from schemas import EARLIEST_DATE, CategoryForm, ExpenseForm, IncomeForm
from session import USER_STATE_KEYS, BusyFlag, Redirect, SessionGuard, TokenStore, end_session

# --- Configuration ---
st.set_page_config(page_title="ExpensePilot", layout="wide", page_icon="💰")
settings = Settings.from_env()
configure_logging(settings)
logger = logging.getLogger("expensepilot.app")

DRAFT_KEYS = {"name": "draft_name", "category": "draft_category", "amount": "draft_amount", "date": "draft_date"}

# Widget and hand-off keys that belong to the signed-in page
PAGE_KEYS = tuple(DRAFT_KEYS.values()) + (
    "expense_year",
    "expense_month",
    "expense_category",
    "income_year",
    "income_month",
    "financial_goals",
    "pending_expense",
    "pending_reconciliation",
    "clear_draft",
)


# --- Session objects ---
def init_session():
    ss = st.session_state
    if "registry" in ss:
        return
    ss.registry = CategoryRegistry(other_label=settings.other_category_label)
    ss.store = RecordStore()
    ss.client = FinanceApiClient(settings)
    ss.tokens = TokenStore(ss)
    ss.guard = SessionGuard(ss.tokens)
    ss.draft = ExpenseDraft()
    ss.draft.attach(ss.registry)
    ss.flash = []
    ss.expense_errors = {}
    ss.recommendations = None
    push_draft(ss.draft)


def push_draft(draft: ExpenseDraft):
    st.session_state[DRAFT_KEYS["name"]] = draft.name
    st.session_state[DRAFT_KEYS["category"]] = draft.category
    st.session_state[DRAFT_KEYS["amount"]] = float(draft.amount or 0)
    st.session_state[DRAFT_KEYS["date"]] = draft.date


def pull_draft(draft: ExpenseDraft):
    draft.name = st.session_state.get(DRAFT_KEYS["name"], "")
    draft.category = st.session_state.get(DRAFT_KEYS["category"])
    amount = st.session_state.get(DRAFT_KEYS["amount"])
    draft.amount = to_decimal(amount or 0)
    draft.date = st.session_state.get(DRAFT_KEYS["date"], date.today())


def flash(level: str, message: str):
    st.session_state.flash.append((level, message))


def show_flash():
    for level, message in st.session_state.flash:
        if level == "success":
            st.toast(message, icon="✅")
        else:
            getattr(st, level)(message)
    st.session_state.flash = []


init_session()


# --- Authentication ---
def start_action(action: str) -> bool:
    """on_click side of a network call: the page then redraws with the button disabled."""
    try:
        BusyFlag(st.session_state, action).start()
    except BusyError:
        return False
    return True


def do_login():
    ss = st.session_state
    try:
        token = ss.client.login(ss.get("login_username", ""), ss.get("login_password", ""))
    except AuthenticationError:
        flash("error", "❌ Invalid credentials")
        logger.info("Failed login attempt for user %s", ss.get("login_username"))
    except RemoteFailure as e:
        flash("error", f"Could not connect to the server: {e}")
    else:
        ss.tokens.save(token)
        ss.guard.reset()


def check_login():
    """Login view; returns True once a token is held for this session."""
    if not isinstance(st.session_state.guard.check(), Redirect):
        return True

    st.title("💰 ExpensePilot")
    st.subheader("Sign In")
    st.caption("Enter your email below to sign in to your account")
    show_flash()

    busy = BusyFlag(st.session_state, "login")
    with st.form("login_form"):
        st.text_input("Email", placeholder="m@example.com", key="login_username")
        st.text_input("Password", type="password", key="login_password")
        st.form_submit_button(
            "Sign In",
            type="primary",
            use_container_width=True,
            disabled=busy.is_set,
            on_click=start_action,
            args=("login",),
        )

    if settings.show_demo_credentials:
        st.caption("Demo credentials: demo@example.com / demo123")

    if busy.is_set:
        with busy.running(), st.spinner("Signing in..."):
            do_login()
        st.rerun()

    return False


if not check_login():
    st.stop()


registry: CategoryRegistry = st.session_state.registry
store: RecordStore = st.session_state.store
client: FinanceApiClient = st.session_state.client
draft: ExpenseDraft = st.session_state.draft


# --- Callbacks (run before the page is redrawn) ---
def request_categorize():
    pull_draft(draft)
    if not draft.name.strip():
        flash("error", "Please enter a description for the expense first.")
        return
    start_action("categorize")


def request_register():
    pull_draft(draft)
    st.session_state.expense_errors = {}
    try:
        form = ExpenseForm.model_validate(draft.as_form_data())
    except ValidationError as exc:
        st.session_state.expense_errors = FormValidationError.from_pydantic(exc).field_errors
        return
    if start_action("register"):
        st.session_state.pending_expense = form


def logout():
    ss = st.session_state
    end_session(ss, ss.tokens, ss.guard, USER_STATE_KEYS + PAGE_KEYS)


# --- Network calls, run at the end of the page once their buttons are drawn disabled ---
def do_categorize():
    try:
        suggestion = client.categorize_expense(draft.name)
    except RemoteFailure:
        flash("error", "The AI could not categorize the expense. Please choose a category manually.")
        return

    result = reconcile(suggestion, registry)
    # Widgets are already drawn; the draft picks this up on the next run
    st.session_state.pending_reconciliation = result
    if result.matched:
        flash(
            "success",
            f"Categorized as {registry.label_for(result.category_id)} with {result.confidence_percent}% confidence.",
        )
    else:
        flash(
            "info",
            f'We were not sure, so we suggested "{registry.other_label}". The AI suggested "{result.suggested_label}".',
        )


def do_register():
    form = st.session_state.pop("pending_expense", None)
    if form is None:
        return
    try:
        record = client.register_expense(form, st.session_state.tokens.get())
    except RemoteFailure as e:
        logger.warning("Expense registration failed: %s", e)
        flash("error", "Could not register the expense. Please try again.")
        return

    expense = store.add_registered_expense(record)
    st.session_state.clear_draft = True
    flash("success", f"{expense.name} for ${expense.amount:,.2f} has been registered.")


def do_recommend():
    if not state.time_filtered_expenses:
        flash("warning", "Add some expenses first.")
        return
    request = build_recommendation_request(
        store, registry, expense_filters, income_filters, st.session_state.get("financial_goals")
    )
    try:
        st.session_state.recommendations = client.recommend(request)
    except RemoteFailure as e:
        logger.warning("Recommendation flow failed: %s", e)
        flash("error", "Could not get recommendations. Please try again.")


# --- Main App ---
st.title("💰 ExpensePilot Dashboard")
show_flash()

# Sidebar
with st.sidebar:
    st.header("Categories")
    with st.form("category_form", clear_on_submit=True):
        label = st.text_input("Category name", placeholder="e.g. Gym, Books")
        icon = st.selectbox(
            "Icon",
            list(AVAILABLE_ICONS),
            index=list(AVAILABLE_ICONS).index(DEFAULT_ICON),
            format_func=AVAILABLE_ICONS.get,
        )
        if st.form_submit_button("Create Category"):
            try:
                values = CategoryForm(label=label, icon=icon)
                registry.create(values.label, values.icon)
            except ValidationError as exc:
                for field, msg in FormValidationError.from_pydantic(exc).field_errors.items():
                    st.error(f"{field}: {msg}")
            except DuplicateCategoryError as e:
                st.error(str(e))
            else:
                flash("success", f'Category "{values.label}" has been created.')
                st.rerun()

    st.divider()
    st.header("Add Income")
    with st.form("income_form", clear_on_submit=True):
        source = st.text_input("Income source", placeholder="e.g. Salary, Freelance")
        income_amount = st.number_input("Amount ($)", min_value=0.0, step=10.0, format="%.2f")
        income_date = st.date_input("Date", value=date.today(), min_value=EARLIEST_DATE, max_value=date.today())
        if st.form_submit_button("Add Income"):
            try:
                values = IncomeForm(source=source, amount=str(income_amount), date=income_date)
            except ValidationError as exc:
                for field, msg in FormValidationError.from_pydantic(exc).field_errors.items():
                    st.error(f"{field}: {msg}")
            else:
                store.add_income(values)
                flash("success", f"Income from {values.source} for ${values.amount:,.2f} has been added.")
                st.rerun()

    st.divider()
    st.button("🚪 Logout", use_container_width=True, on_click=logout)


# Keep the pending form pointing at a category that still exists
pull_draft(draft)
if st.session_state.pop("clear_draft", False):
    draft.reset()
pending = st.session_state.pop("pending_reconciliation", None)
if pending is not None:
    draft.apply(pending)
draft.revalidate(registry)
push_draft(draft)

# Filters live in widget state; read them before computing the snapshot
expense_filters = Filters(
    year=st.session_state.get("expense_year", ALL),
    month=st.session_state.get("expense_month", ALL),
    category=st.session_state.get("expense_category", ALL),
)
income_filters = Filters(
    year=st.session_state.get("income_year", ALL),
    month=st.session_state.get("income_month", ALL),
)
state = DashboardState.compute(store, registry, expense_filters, income_filters)
month_labels = dict(MONTHS)

tab1, tab2, tab3, tab4 = st.tabs(["📊 Dashboard", "💳 Expenses", "💵 Income", "🧠 Insights"])

with tab1:
    _kpis(state.totals)
    if state.distribution:
        st.plotly_chart(cat_spend(state.distribution), use_container_width=True)
    else:
        st.info("No expenses in the selected period.")

with tab2:
    st.subheader("Register Expense")
    errors = st.session_state.expense_errors
    st.text_input("Name", key=DRAFT_KEYS["name"], placeholder="e.g. Groceries at the market")
    if "name" in errors:
        st.caption(f":red[{errors['name']}]")

    cat_col, ai_col = st.columns([4, 1])
    with cat_col:
        st.selectbox(
            "Category",
            [None] + [c.id for c in registry],
            key=DRAFT_KEYS["category"],
            format_func=lambda cid: "Select a category" if cid is None else registry.label_for(cid),
        )
    with ai_col:
        st.button(
            "✨ AI",
            on_click=request_categorize,
            disabled=BusyFlag(st.session_state, "categorize").is_set,
            help="Suggest a category from the name",
        )
    if "category" in errors:
        st.caption(f":red[{errors['category']}]")

    st.number_input("Amount ($)", min_value=0.0, step=0.01, format="%.2f", key=DRAFT_KEYS["amount"])
    if "amount" in errors:
        st.caption(f":red[{errors['amount']}]")
    st.date_input("Date", key=DRAFT_KEYS["date"], min_value=EARLIEST_DATE, max_value=date.today())
    if "date" in errors:
        st.caption(f":red[{errors['date']}]")
    st.button(
        "Register Expense",
        type="primary",
        on_click=request_register,
        disabled=BusyFlag(st.session_state, "register").is_set,
    )

    st.divider()
    st.subheader("Expense Log")
    col1, col2, col3 = st.columns(3)
    col1.selectbox("Year", state.expense_years, key="expense_year",
                   format_func=lambda y: "All years" if y == ALL else y)
    col2.selectbox("Month", list(month_labels), key="expense_month", format_func=month_labels.get)
    col3.selectbox("Category", [ALL] + [c.id for c in registry], key="expense_category",
                   format_func=lambda cid: "All categories" if cid == ALL else registry.label_for(cid))

    table = expenses_frame(state.table_expenses, registry)
    if table.empty:
        st.info("No expenses.")
    else:
        st.dataframe(table, use_container_width=True, hide_index=True)
        st.download_button("⬇️ Export to CSV", to_csv_bytes(table), file_name="expenses.csv", mime="text/csv")

with tab3:
    st.subheader("Income Log")
    col1, col2 = st.columns(2)
    col1.selectbox("Year", state.income_years, key="income_year",
                   format_func=lambda y: "All years" if y == ALL else y)
    col2.selectbox("Month", list(month_labels), key="income_month", format_func=month_labels.get)

    income_table = incomes_frame(state.filtered_incomes)
    if income_table.empty:
        st.info("No income recorded.")
    else:
        st.dataframe(income_table, use_container_width=True, hide_index=True)

with tab4:
    highlights = compute_highlights(store, registry, expense_filters)
    if highlights:
        st.markdown(
            f"**{highlights['count']}** expenses, average ${highlights['avg_ticket']:,.2f}. "
            f"Top category: **{highlights['top_category']}** (${highlights['top_category_spend']:,.2f})."
        )

    st.subheader("Personalized Recommendations")
    st.text_area("Financial goals", key="financial_goals", placeholder="e.g. Save $2,000 for a trip by December")
    st.button(
        "Get Recommendations",
        on_click=start_action,
        args=("recommend",),
        disabled=BusyFlag(st.session_state, "recommend").is_set,
    )

    report = st.session_state.recommendations
    if report:
        st.info(report.summary)
        for rec in report.recommendations:
            savings = f" (save ~${rec.potential_savings:,.2f})" if rec.potential_savings is not None else ""
            st.markdown(f"- **{rec.category}**: {rec.recommendation}{savings}")


# Requested calls: the page above already shows their buttons disabled
for action, run, message in (
    ("categorize", do_categorize, "Categorizing..."),
    ("register", do_register, "Registering expense..."),
    ("recommend", do_recommend, "Asking the advisor..."),
):
    busy = BusyFlag(st.session_state, action)
    if busy.is_set:
        with busy.running(), st.spinner(message):
            run()
        st.rerun()
