"""
Debt Payoff Simulation

Drives the amortization step across a set of debts, one period at a time,
under a fixed strategy until every balance is zero or the horizon cap is hit.

DESIGN DECISION: The simulator does not validate. Negative balances, rates
or minimums produce nonsensical but non-crashing output; InputValidator
rejects them before a run starts.

Per period, in strategy order:
1. The first debt with a positive balance receives the whole extra payment.
2. Each debt also absorbs the minimums of higher-priority debts that are
   already at zero. A folded minimum is zeroed permanently, so it is only
   ever counted once.
3. Interest is accrued only on debts whose balance is still positive.
"""

from typing import Sequence

from finance_engine.engine.amortization import step_debt
from finance_engine.engine.money import round_half_up
from finance_engine.engine.rates import monthly_simple_rate, normalize_rate
from finance_engine.models.debt import (
    Debt,
    DebtSummary,
    PayoffResult,
    PayoffStrategy,
    PayoffTimelineEntry,
    StrategyComparison,
)


DEFAULT_HORIZON_CAP = 360


def order_debts(debts: Sequence[Debt], strategy: PayoffStrategy) -> list[Debt]:
    """
    Sort debts into payoff priority.

    SNOWBALL: ascending balance. AVALANCHE: descending normalized rate.
    sorted() is stable, so ties keep input order.
    """
    if strategy == PayoffStrategy.SNOWBALL:
        return sorted(debts, key=lambda d: d.balance)
    return sorted(debts, key=lambda d: normalize_rate(d.annual_rate), reverse=True)


def simulate_payoff(
    debts: Sequence[Debt],
    strategy: PayoffStrategy,
    extra_payment: float = 0.0,
    horizon_cap: int = DEFAULT_HORIZON_CAP,
) -> PayoffResult:
    """
    Run one strategy to payoff or to the horizon cap.

    PRECONDITIONS: balances, rates, minimums and extra_payment are
    non-negative and debt ids are unique. horizon_cap >= 1.

    Returns a PayoffResult whose timeline starts at period 1. When balances
    are still outstanding at the cap, horizon_reached is True; that is a
    result, not an error.
    """
    strategy = PayoffStrategy(strategy)
    if not debts:
        return PayoffResult(
            strategy=strategy,
            extra_payment=extra_payment,
            total_periods=0,
            total_interest_paid=0,
        )

    ordered = order_debts(debts, strategy)
    ids = [d.id for d in ordered]
    balances = [d.balance for d in ordered]
    rates = [monthly_simple_rate(d.annual_rate) for d in ordered]
    minimums = [d.minimum_payment for d in ordered]

    timeline: list[PayoffTimelineEntry] = []
    total_interest = 0.0
    period = 0

    while any(b > 0 for b in balances) and period < horizon_cap:
        extra_left = extra_payment
        for i in range(len(balances)):
            if balances[i] <= 0:
                continue

            payment = minimums[i]
            if extra_left:
                payment += extra_left
                extra_left = 0.0

            for j in range(i):
                if balances[j] <= 0:
                    payment += minimums[j]
                    minimums[j] = 0.0

            step = step_debt(balances[i], rates[i], payment)
            total_interest += step.interest
            balances[i] = step.new_balance

        period += 1
        timeline.append(
            PayoffTimelineEntry(
                period_index=period,
                balances_by_entity=dict(zip(ids, balances)),
                total=sum(balances),
            )
        )

    return PayoffResult(
        strategy=strategy,
        extra_payment=extra_payment,
        total_periods=period,
        total_interest_paid=round_half_up(total_interest),
        timeline=timeline,
        horizon_reached=any(b > 0 for b in balances),
    )


def compare_strategies(
    debts: Sequence[Debt],
    extra_payment: float = 0.0,
    horizon_cap: int = DEFAULT_HORIZON_CAP,
) -> StrategyComparison:
    """
    Run snowball and avalanche plus their zero-extra baselines.

    The winner pays less total interest; ties go to avalanche. Savings are
    measured against the winner's own baseline and never go negative.
    """
    snowball = simulate_payoff(debts, PayoffStrategy.SNOWBALL, extra_payment, horizon_cap)
    avalanche = simulate_payoff(debts, PayoffStrategy.AVALANCHE, extra_payment, horizon_cap)
    baseline_snowball = simulate_payoff(debts, PayoffStrategy.SNOWBALL, 0.0, horizon_cap)
    baseline_avalanche = simulate_payoff(debts, PayoffStrategy.AVALANCHE, 0.0, horizon_cap)

    if avalanche.total_interest_paid <= snowball.total_interest_paid:
        winner, best, baseline = PayoffStrategy.AVALANCHE, avalanche, baseline_avalanche
    else:
        winner, best, baseline = PayoffStrategy.SNOWBALL, snowball, baseline_snowball

    return StrategyComparison(
        snowball=snowball,
        avalanche=avalanche,
        baseline_snowball=baseline_snowball,
        baseline_avalanche=baseline_avalanche,
        winner=winner,
        periods_saved=max(0, baseline.total_periods - best.total_periods),
        interest_saved=max(0, baseline.total_interest_paid - best.total_interest_paid),
    )


def summarize_debts(debts: Sequence[Debt]) -> DebtSummary:
    """Totals and the balance-weighted average annual rate (as a fraction)."""
    total_balance = sum(d.balance for d in debts)
    total_minimum = sum(d.minimum_payment for d in debts)
    weighted = 0.0
    if total_balance > 0:
        weighted = sum(normalize_rate(d.annual_rate) * d.balance for d in debts) / total_balance
    return DebtSummary(
        debt_count=len(debts),
        total_balance=total_balance,
        total_minimum=total_minimum,
        weighted_average_rate=weighted,
    )
