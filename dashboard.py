# dashboard.py — KPI cards, category donut and table frames for the Streamlit page

import pandas as pd
import plotly.express as px
import streamlit as st

from aggregation import Totals, round_cents
from categories import CategoryRegistry

EXPENSE_COLUMNS = ["Date", "Name", "Category", "Amount"]
INCOME_COLUMNS = ["Date", "Source", "Amount"]


def expenses_frame(expenses, registry: CategoryRegistry) -> pd.DataFrame:
    """
    Table view of expenses with category ids swapped for labels.
    """
    if not expenses:
        return pd.DataFrame(columns=EXPENSE_COLUMNS)

    return pd.DataFrame(
        [
            {
                "Date": e.date,
                "Name": e.name,
                "Category": registry.label_for(e.category),
                "Amount": float(round_cents(e.amount)),
            }
            for e in expenses
        ],
        columns=EXPENSE_COLUMNS,
    )


def incomes_frame(incomes) -> pd.DataFrame:
    if not incomes:
        return pd.DataFrame(columns=INCOME_COLUMNS)

    return pd.DataFrame(
        [{"Date": i.date, "Source": i.source, "Amount": float(round_cents(i.amount))} for i in incomes],
        columns=INCOME_COLUMNS,
    )


def distribution_frame(distribution) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Category": c.label, "Amount": float(round_cents(v))} for c, v in distribution],
        columns=["Category", "Amount"],
    )


def to_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")


def _kpis(totals: Totals):
    """
    Displays income, spend and balance for the selected windows.
    """
    col1, col2, col3 = st.columns(3)
    col1.metric("💰 Total Income", f"${round_cents(totals.total_income):,.2f}")
    col2.metric("💸 Total Expenses", f"${round_cents(totals.total_expenses):,.2f}")
    col3.metric(
        "⚖️ Balance",
        f"${round_cents(totals.balance):,.2f}",
        help="Income in the income window minus expenses in the expense window.",
    )

    # Share of income already spent
    if totals.total_income > 0:
        st.caption("Income spent")
        st.progress(min(1.0, float(totals.total_expenses / totals.total_income)))


def cat_spend(distribution):
    """
    Donut chart of spending by category. Empty categories never reach here.
    """
    by_cat = distribution_frame(distribution)
    fig = px.pie(by_cat, values="Amount", names="Category", hole=0.4, title="Spending by Category")
    fig.update_traces(textposition="inside", textinfo="percent+label")
    return fig
