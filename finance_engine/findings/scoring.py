"""
Scoring

Health score, net-worth summary and spending scorecards.

DESIGN DECISION: Every sub-score maps a metric onto a few hard-cutoff bands
rather than a continuous formula. The maxima sum to 100, so the total is a
plain sum. The net-worth trend has no signal yet and is a fixed constant,
which keeps the weighting stable until history is available.
"""

from typing import Optional

from finance_engine.engine.money import round_half_up
from finance_engine.models.findings import (
    CategoryScore,
    HealthInputs,
    HealthScore,
    HealthScoreBreakdown,
    NetWorthSummary,
    SpendingScorecard,
)
from finance_engine.models.snapshots import CategorySpend, FinancialSnapshot, SpendingSnapshot


NET_WORTH_TREND_PLACEHOLDER = 8
MULTIPLE_ASSETS_MIN_CLASSES = 3
NO_BUDGET_RATIO = 1.5


# =============================================================================
# HEALTH SCORE
# =============================================================================

def _target_readiness(gap_pct: Optional[float]) -> int:
    # Nothing to fund counts as fully ready
    if gap_pct is None or gap_pct <= 10:
        return 25
    if gap_pct <= 20:
        return 18
    if gap_pct <= 30:
        return 12
    return 5


def _debt_health(debt_to_income: float) -> int:
    if debt_to_income < 0.3:
        return 20
    if debt_to_income < 0.4:
        return 15
    if debt_to_income < 0.5:
        return 10
    return 5


def _liquidity(months: float) -> int:
    if months >= 6:
        return 15
    if months >= 3:
        return 10
    if months >= 1:
        return 5
    return 0


def score_label(total: int) -> str:
    if total >= 80:
        return "Excellent"
    if total >= 65:
        return "Good"
    if total >= 50:
        return "Fair"
    return "Needs Attention"


def health_score(inputs: HealthInputs) -> HealthScore:
    breakdown = HealthScoreBreakdown(
        target_readiness=_target_readiness(inputs.target_gap_pct),
        debt_health=_debt_health(inputs.debt_to_income),
        investment_diversity=15 if inputs.has_multiple_assets else 8,
        liquidity=_liquidity(inputs.liquid_months),
        retirement=15 if inputs.retirement_on_track else 8,
        net_worth_trend=NET_WORTH_TREND_PLACEHOLDER,
    )
    total = (
        breakdown.target_readiness
        + breakdown.debt_health
        + breakdown.investment_diversity
        + breakdown.liquidity
        + breakdown.retirement
        + breakdown.net_worth_trend
    )
    return HealthScore(total=total, label=score_label(total), breakdown=breakdown)


# =============================================================================
# NET WORTH
# =============================================================================

def summarize_net_worth(
    snapshot: FinancialSnapshot,
    usd_rate: Optional[float] = None,
) -> NetWorthSummary:
    """
    Net worth by asset class in the base currency.

    Real estate counts as equity (value minus mortgage). Private equity is
    priced in USD and converted with usd_rate; without a rate it is left
    out rather than guessed.
    """
    crypto = snapshot.crypto.total_value if snapshot.crypto else 0.0
    fixed_income = snapshot.fixed_income.total_principal if snapshot.fixed_income else 0.0
    real_estate = snapshot.real_estate.total_equity if snapshot.real_estate else 0.0
    retirement = snapshot.retirement.total_balance if snapshot.retirement else 0.0
    private_equity = 0.0
    if snapshot.private_equity and usd_rate:
        private_equity = snapshot.private_equity.total_value_usd * usd_rate

    total = crypto + fixed_income + real_estate + retirement + private_equity
    return NetWorthSummary(
        total=round_half_up(total),
        crypto=round_half_up(crypto),
        fixed_income=round_half_up(fixed_income),
        real_estate=round_half_up(real_estate),
        retirement=round_half_up(retirement),
        private_equity=round_half_up(private_equity),
    )


def has_multiple_assets(summary: NetWorthSummary) -> bool:
    """At least three of crypto, fixed income, real estate and retirement hold value."""
    held = [
        summary.crypto > 0,
        summary.fixed_income > 0,
        summary.real_estate > 0,
        summary.retirement > 0,
    ]
    return sum(held) >= MULTIPLE_ASSETS_MIN_CLASSES


def debt_to_income(snapshot: FinancialSnapshot) -> float:
    """Monthly minimums over monthly income; 0 without income or debts."""
    if snapshot.debt is None or snapshot.monthly_income <= 0:
        return 0.0
    return snapshot.debt.total_minimum / snapshot.monthly_income


# =============================================================================
# SPENDING SCORECARD
# =============================================================================

def grade_from_score(score: int) -> str:
    if score >= 85:
        return "A"
    if score >= 70:
        return "B"
    if score >= 50:
        return "C"
    if score >= 30:
        return "D"
    return "F"


def score_category(category: CategorySpend) -> CategoryScore:
    """
    Grade one category on budget adherence, trend and frequency.

    Each is a 1-5 band; weights 8/6/6 put a perfect category at 100. A
    category without a budget is scored as overspent.
    """
    budget_ratio = category.spent / category.budget if category.budget > 0 else NO_BUDGET_RATIO
    if category.previous_spent > 0:
        trend = (category.spent - category.previous_spent) / category.previous_spent * 100
    else:
        trend = 0.0

    if budget_ratio <= 0.8:
        budget_score = 5
    elif budget_ratio <= 1.0:
        budget_score = 4
    elif budget_ratio <= 1.2:
        budget_score = 2
    else:
        budget_score = 1

    if trend <= -10:
        trend_score = 5
    elif trend <= 0:
        trend_score = 4
    elif trend <= 10:
        trend_score = 3
    elif trend <= 25:
        trend_score = 2
    else:
        trend_score = 1

    count = category.transaction_count
    if count <= 10:
        frequency_score = 5
    elif count <= 20:
        frequency_score = 4
    elif count <= 30:
        frequency_score = 2
    else:
        frequency_score = 1

    total = budget_score * 8 + trend_score * 6 + frequency_score * 6
    return CategoryScore(
        category_id=category.category_id,
        name=category.name or category.category_id,
        spent=category.spent,
        budget=category.budget,
        trend_pct=round_half_up(trend),
        transaction_count=count,
        budget_score=budget_score,
        trend_score=trend_score,
        frequency_score=frequency_score,
        total_score=total,
        grade=grade_from_score(total),
    )


def score_spending(snapshot: SpendingSnapshot) -> SpendingScorecard:
    """Per-category grades plus the rounded mean as the overall score."""
    categories = [score_category(c) for c in snapshot.categories]
    if not categories:
        return SpendingScorecard()
    overall = round_half_up(sum(c.total_score for c in categories) / len(categories))
    return SpendingScorecard(
        categories=categories,
        overall_score=overall,
        overall_grade=grade_from_score(overall),
    )
