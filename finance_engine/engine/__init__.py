"""
Simulation engine.

Pure, synchronous functions of their arguments. Nothing here reads settings,
the clock or the network.
"""

from finance_engine.engine.amortization import step_debt
from finance_engine.engine.goals import (
    goal_milestones,
    monthly_needed,
    months_to_reach,
    project_goal,
    recommend_emergency_fund,
    risk_score,
)
from finance_engine.engine.growth import (
    build_milestones,
    months_between,
    period_labels,
    project_growth,
    run_scenarios,
    shift_period,
    transfer_event,
)
from finance_engine.engine.money import round_half_up
from finance_engine.engine.payoff import (
    DEFAULT_HORIZON_CAP,
    compare_strategies,
    order_debts,
    simulate_payoff,
    summarize_debts,
)
from finance_engine.engine.rates import (
    effective_net_rate,
    monthly_compound_rate,
    monthly_simple_rate,
    normalize_rate,
)

__all__ = [
    "step_debt",
    "goal_milestones",
    "monthly_needed",
    "months_to_reach",
    "project_goal",
    "recommend_emergency_fund",
    "risk_score",
    "build_milestones",
    "months_between",
    "period_labels",
    "project_growth",
    "run_scenarios",
    "shift_period",
    "transfer_event",
    "round_half_up",
    "DEFAULT_HORIZON_CAP",
    "compare_strategies",
    "order_debts",
    "simulate_payoff",
    "summarize_debts",
    "effective_net_rate",
    "monthly_compound_rate",
    "monthly_simple_rate",
    "normalize_rate",
]
