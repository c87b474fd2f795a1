from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional

from aggregation import Filters, distribution, round_cents, time_filtered, total_amount
from categories import CategoryRegistry
from records import RecordStore
from schemas import (
    RecommendationExpense,
    RecommendationItem,
    RecommendationRequest,
    RecommendationResponse,
)


def compute_highlights(store: RecordStore, registry: CategoryRegistry, filters: Filters = Filters()) -> dict:
    """Summarize the selected window for the quick-glance cards."""

    expenses = time_filtered(store.expenses, filters.year, filters.month)
    if not expenses:
        return {}

    by_cat = sorted(distribution(expenses, registry.list_all()), key=lambda item: item[1], reverse=True)
    spend = total_amount(expenses)
    top_category, top_spend = by_cat[0] if by_cat else (None, Decimal("0"))

    return {
        "spend": spend,
        "count": len(expenses),
        "top_category": top_category.label if top_category else None,
        "top_category_spend": top_spend,
        "avg_ticket": round_cents(spend / len(expenses)),
    }


def build_recommendation_request(
    store: RecordStore,
    registry: CategoryRegistry,
    expense_filters: Filters = Filters(),
    income_filters: Filters = Filters(),
    financial_goals: Optional[str] = None,
) -> RecommendationRequest:
    """
    Packs the filtered expenses and income total for the advisor flow.

    The advisor only understands category names, so ids are swapped for
    their labels here.
    """
    expenses = time_filtered(store.expenses, expense_filters.year, expense_filters.month)
    incomes = time_filtered(store.incomes, income_filters.year, income_filters.month)

    return RecommendationRequest(
        monthly_income=float(total_amount(incomes)),
        expenses=[
            RecommendationExpense(
                name=e.name,
                category=registry.label_for(e.category),
                amount=float(e.amount),
                date=e.date,
            )
            for e in expenses
        ],
        financial_goals=(financial_goals or "").strip() or None,
    )


def rule_based_recommendations(req: RecommendationRequest, cut_rate: float = 0.10) -> RecommendationResponse:
    """
    Offline stand-in for the advisor flow.

    Suggests trimming the three biggest categories by ``cut_rate`` and
    reports the resulting savings rate.
    """
    spend_by_cat: Dict[str, float] = defaultdict(float)
    for e in req.expenses:
        spend_by_cat[e.category] += e.amount

    ranked = sorted(spend_by_cat.items(), key=lambda kv: kv[1], reverse=True)
    recommendations: List[RecommendationItem] = []
    for category, spent in ranked[:3]:
        savings = round(spent * cut_rate, 2)
        recommendations.append(
            RecommendationItem(
                category=category,
                recommendation=(
                    f"You spent ${spent:,.2f} on {category}. Trimming it by {cut_rate:.0%} "
                    f"frees up about ${savings:,.2f}."
                ),
                potential_savings=savings,
            )
        )

    total_spend = sum(spend_by_cat.values())
    if req.monthly_income > 0:
        savings_rate = (req.monthly_income - total_spend) / req.monthly_income * 100
        summary = (
            f"Income ${req.monthly_income:,.2f}, spending ${total_spend:,.2f}: "
            f"you keep {savings_rate:.1f}% of what you earn."
        )
        if savings_rate < 20:
            summary += " Aim for at least 20% by cutting the categories above."
    else:
        summary = f"Spending ${total_spend:,.2f} with no income recorded for this period."

    if req.financial_goals:
        summary += f" Goal noted: {req.financial_goals}."

    return RecommendationResponse(recommendations=recommendations, summary=summary)
