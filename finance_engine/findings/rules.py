"""
Findings Rules

Each rule is a pure function of one domain snapshot and the run context,
returning zero or more findings. Rules never raise on missing data: a field a
rule needs that is None means the rule has nothing to say about that record.

DESIGN DECISION: Related conditions with different severities or messages
are separate rules (e.g. commission tier approaching vs reached), not one
rule with branches. Each can then be tested and tuned on its own.

Finding ids are the rule name plus the entity key, so identical input always
yields identical ids.
"""

import math
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from finance_engine.engine.money import round_half_up
from finance_engine.engine.rates import effective_net_rate, normalize_rate
from finance_engine.formatting import FormatConfig
from finance_engine.models.findings import Finding, FindingCategory, FindingsThresholds, Severity
from finance_engine.models.snapshots import (
    CryptoSnapshot,
    Domain,
    FixedIncomeSnapshot,
    InstrumentType,
    LiquiditySnapshot,
    PrivateEquitySnapshot,
    PropertyType,
    RealEstateSnapshot,
    RetirementSnapshot,
)


DAYS_PER_MONTH = 30
DAYS_PER_MONTH_EXACT = 30.4
DAYS_PER_YEAR = 365.25


class RuleContext(BaseModel):
    """Run-wide inputs shared by every rule."""
    model_config = ConfigDict(frozen=True)

    as_of: date
    monthly_income: float = 0.0
    net_worth: float = 0.0
    thresholds: FindingsThresholds = Field(default_factory=FindingsThresholds)
    fmt: FormatConfig = Field(default_factory=FormatConfig)


RuleFn = Callable[[BaseModel, RuleContext], list[Finding]]


@dataclass(frozen=True)
class Rule:
    """A named rule bound to one snapshot domain."""
    name: str
    domain: Domain
    evaluate: RuleFn


def _age_days(as_of: date, then: date) -> int:
    return (as_of - then).days


def _add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year + years, day=28)


# =============================================================================
# CRYPTO
# =============================================================================

def crypto_concentration(snap: CryptoSnapshot, ctx: RuleContext) -> list[Finding]:
    limit = ctx.thresholds.crypto_concentration_pct
    findings = []
    for holding in snap.holdings:
        pct = snap.allocation_pct(holding)
        if pct > limit:
            findings.append(Finding(
                id=f"crypto-concentration-{holding.symbol}",
                severity=Severity.AMBER,
                category=FindingCategory.CRYPTO,
                title=f"Crypto concentration: {holding.symbol} is {pct:.0f}% of portfolio",
                detail=(
                    f"A single coin above {limit:.0f}% of crypto holdings amplifies volatility. "
                    f"{holding.symbol} is currently {pct:.1f}% of the crypto portfolio."
                ),
                suggestion="Consider rebalancing across several coins to reduce single-asset risk.",
                action_ref=ctx.fmt.action_refs.crypto,
            ))
    return findings


def crypto_large_loss(snap: CryptoSnapshot, ctx: RuleContext) -> list[Finding]:
    pnl_pct = snap.pnl_pct
    # No cost basis means no drawdown to measure
    if pnl_pct is None or pnl_pct >= ctx.thresholds.crypto_loss_pct:
        return []
    fmt = ctx.fmt
    return [Finding(
        id="crypto-large-loss",
        severity=Severity.RED,
        category=FindingCategory.CRYPTO,
        title=f"Crypto portfolio down {abs(pnl_pct):.1f}% from cost basis",
        detail=(
            f"Unrealized loss of {fmt.money(abs(snap.pnl))}. Current value: "
            f"{fmt.money(snap.total_value)} vs cost basis {fmt.money(snap.total_cost)}."
        ),
        suggestion="Review whether current allocation fits your risk tolerance. Consider DCA or holding strategy.",
        action_ref=fmt.action_refs.crypto,
    )]


def crypto_overweight(snap: CryptoSnapshot, ctx: RuleContext) -> list[Finding]:
    if ctx.net_worth <= 0:
        return []
    pct = snap.total_value * 100 / ctx.net_worth
    if pct <= ctx.thresholds.crypto_net_worth_pct:
        return []
    fmt = ctx.fmt
    return [Finding(
        id="crypto-overweight",
        severity=Severity.AMBER,
        category=FindingCategory.CRYPTO,
        title=f"Crypto is {pct:.1f}% of total net worth",
        detail=(
            f"With {fmt.money(snap.total_value)} in crypto against a total net worth of "
            f"{fmt.money(ctx.net_worth)}, crypto represents significant concentration risk."
        ),
        suggestion="Consider if this allocation is intentional given crypto volatility.",
        action_ref=fmt.action_refs.crypto,
    )]


# =============================================================================
# REAL ESTATE
# =============================================================================

def re_stale_valuation(snap: RealEstateSnapshot, ctx: RuleContext) -> list[Finding]:
    findings = []
    for prop in snap.properties:
        if prop.last_valuation_date is None:
            continue
        days = _age_days(ctx.as_of, prop.last_valuation_date)
        if days > ctx.thresholds.valuation_stale_days:
            findings.append(Finding(
                id=f"re-stale-valuation-{prop.id}",
                severity=Severity.AMBER,
                category=FindingCategory.REAL_ESTATE,
                title=f"{prop.name} valuation is {days // DAYS_PER_MONTH} months old",
                detail=(
                    f"Last valuation date: {prop.last_valuation_date.isoformat()}. "
                    "Accurate valuation is needed for correct net worth reporting."
                ),
                suggestion="Update current market value based on recent comparable sales or agent estimate.",
                action_ref=ctx.fmt.action_refs.real_estate,
            ))
    return findings


def re_sale_pending(snap: RealEstateSnapshot, ctx: RuleContext) -> list[Finding]:
    findings = []
    for prop in snap.properties:
        # The last valuation stands in for the date the sale was agreed
        if prop.property_type != PropertyType.SALE_PENDING or prop.last_valuation_date is None:
            continue
        days = _age_days(ctx.as_of, prop.last_valuation_date)
        if days > ctx.thresholds.sale_pending_days:
            findings.append(Finding(
                id=f"re-sale-pending-{prop.id}",
                severity=Severity.AMBER,
                category=FindingCategory.REAL_ESTATE,
                title=f"{prop.name} sale pending {days} days",
                detail=(
                    f"The property at sale price {ctx.fmt.money(prop.current_value)} has been "
                    f"pending sale for over {ctx.thresholds.sale_pending_days} days."
                ),
                suggestion="Confirm closing status with the notary. Ensure deposit and remaining balance are on schedule.",
                action_ref=ctx.fmt.action_refs.real_estate,
            ))
    return findings


def target_gap(snap: RealEstateSnapshot, ctx: RuleContext) -> list[Finding]:
    """Urgent (red) and healthy (green) funding gap; never both."""
    target = snap.target
    if target is None:
        return []
    th = ctx.thresholds
    fmt = ctx.fmt
    gap_pct = target.gap_pct
    months = target.months_to_delivery

    if gap_pct > th.target_gap_urgent_pct and months <= th.target_urgent_months:
        return [Finding(
            id=f"target-gap-urgent-{target.id}",
            severity=Severity.RED,
            category=FindingCategory.REAL_ESTATE,
            title=f"{target.name} gap {fmt.money(target.gap)} with {months} months to delivery",
            detail=(
                f"{gap_pct:.1f}% of target unfunded with less than "
                f"{th.target_urgent_months} months remaining. Financing options may be needed."
            ),
            suggestion="Evaluate mortgage pre-approval for the remaining gap amount.",
            action_ref=fmt.action_refs.real_estate,
        )]
    if gap_pct < th.target_gap_healthy_pct and months > 0:
        return [Finding(
            id=f"target-gap-healthy-{target.id}",
            severity=Severity.GREEN,
            category=FindingCategory.REAL_ESTATE,
            title=f"{target.name} {100 - gap_pct:.1f}% funded",
            detail=(
                f"Gap of {fmt.money(target.gap)} is within standard financing range "
                f"with {months} months to delivery."
            ),
            suggestion="Keep scheduled payments and lump sums on plan.",
            action_ref=fmt.action_refs.real_estate,
        )]
    return []


def target_debt_payoff(snap: RealEstateSnapshot, ctx: RuleContext) -> list[Finding]:
    target = snap.target
    if target is None or not target.freed_monthly_payment or target.freed_monthly_payment <= 0:
        return []
    fmt = ctx.fmt
    when = f" in {target.debt_payoff_period}" if target.debt_payoff_period else ""
    return [Finding(
        id=f"target-debt-payoff-{target.id}",
        severity=Severity.GREEN,
        category=FindingCategory.REAL_ESTATE,
        title=f"Linked debts paid off{when}, freeing {fmt.money(target.freed_monthly_payment)}/mo",
        detail=(
            f"Paying off the debts linked to {target.name} permanently frees "
            f"{fmt.money(target.freed_monthly_payment)} of monthly payments."
        ),
        suggestion=f"Allocate the freed cash flow toward {target.name} or voluntary retirement contributions.",
        action_ref=fmt.action_refs.real_estate,
    )]


# =============================================================================
# FIXED INCOME
# =============================================================================

def fi_maturing(snap: FixedIncomeSnapshot, ctx: RuleContext) -> list[Finding]:
    findings = []
    for inst in snap.instruments:
        if inst.maturity_date is None:
            continue
        days = (inst.maturity_date - ctx.as_of).days
        if 0 <= days <= ctx.thresholds.maturity_window_days:
            rate_pct = normalize_rate(inst.annual_rate) * 100
            findings.append(Finding(
                id=f"fi-maturing-{inst.id}",
                severity=Severity.AMBER,
                category=FindingCategory.FIXED_INCOME,
                title=f"{inst.name} matures in {days} days",
                detail=(
                    f"{ctx.fmt.money(inst.principal)} at {rate_pct:.2f}% matures on "
                    f"{inst.maturity_date.isoformat()}. Renew or redeploy?"
                ),
                suggestion="Auto-renew is enabled." if inst.auto_renew else "Log in to renew or redirect funds.",
                action_ref=ctx.fmt.action_refs.fixed_income,
            ))
    return findings


def _commission_funds(snap: FixedIncomeSnapshot):
    for inst in snap.instruments:
        if inst.instrument_type != InstrumentType.DEBT_FUND:
            continue
        commission = normalize_rate(inst.commission_rate)
        if commission > 0:
            yield inst, commission


def commission_tier_approaching(snap: FixedIncomeSnapshot, ctx: RuleContext) -> list[Finding]:
    th = ctx.thresholds
    fmt = ctx.fmt
    tier = th.commission_tier_threshold
    findings = []
    for inst, commission in _commission_funds(snap):
        balance = inst.principal
        if not (tier * th.commission_tier_proximity <= balance < tier):
            continue
        savings = round_half_up(balance * (commission - th.commission_tier_rate))
        findings.append(Finding(
            id=f"commission-tier-approaching-{inst.id}",
            severity=Severity.GREEN,
            category=FindingCategory.FIXED_INCOME,
            title=f"{inst.name} commission drops when balance reaches {fmt.money(tier)}",
            detail=(
                f"Only {fmt.money(tier - balance)} away from the next fee tier. Commission drops from "
                f"{commission * 100:.2f}% to {th.commission_tier_rate * 100:.2f}%, "
                f"saving ~{fmt.money(savings)}/yr."
            ),
            suggestion="A scheduled deposit that crosses the threshold lowers the fee on the whole balance.",
            action_ref=fmt.action_refs.fixed_income,
        ))
    return findings


def commission_tier_reached(snap: FixedIncomeSnapshot, ctx: RuleContext) -> list[Finding]:
    th = ctx.thresholds
    fmt = ctx.fmt
    tier = th.commission_tier_threshold
    findings = []
    for inst, commission in _commission_funds(snap):
        balance = inst.principal
        if balance < tier or commission <= th.commission_reached_min_rate:
            continue
        savings = round_half_up(balance * (commission - th.commission_tier_rate))
        findings.append(Finding(
            id=f"commission-tier-reached-{inst.id}",
            severity=Severity.GREEN,
            category=FindingCategory.FIXED_INCOME,
            title=(
                f"{inst.name} commission reduced to {th.commission_tier_rate * 100:.2f}% "
                f"- saving ~{fmt.money(savings)}/yr"
            ),
            detail=(
                f"Balance of {fmt.money(balance)} exceeds the {fmt.money(tier)} threshold. "
                f"Commission fell from {commission * 100:.2f}% to {th.commission_tier_rate * 100:.2f}%."
            ),
            suggestion=f"Update the {inst.name} record to reflect the new commission rate.",
            action_ref=fmt.action_refs.fixed_income,
        ))
    return findings


def tax_declaration_window(snap: FixedIncomeSnapshot, ctx: RuleContext) -> list[Finding]:
    th = ctx.thresholds
    if not th.tax_window_start_month <= ctx.as_of.month <= th.tax_window_end_month:
        return []
    if not any(i.instrument_type == InstrumentType.DEBT_FUND for i in snap.instruments):
        return []
    return [Finding(
        id="tax-declaration-window",
        severity=Severity.AMBER,
        category=FindingCategory.FIXED_INCOME,
        title="Debt fund capital gains declaration window is open",
        detail=(
            "Debt fund profits are subject to capital gains tax and must be declared "
            "in the annual tax return before the filing deadline."
        ),
        suggestion="Gather the fund's annual statement and declare with your accountant before the deadline.",
        action_ref=ctx.fmt.action_refs.fixed_income,
    )]


def fund_performance(snap: FixedIncomeSnapshot, ctx: RuleContext) -> list[Finding]:
    fund = next((i for i in snap.instruments if i.instrument_type == InstrumentType.DEBT_FUND), None)
    if fund is None:
        return []
    net = effective_net_rate(fund.annual_rate, fund.commission_rate, fund.net_annual_rate)
    return [Finding(
        id=f"fund-performance-{fund.id}",
        severity=Severity.GREEN,
        category=FindingCategory.FIXED_INCOME,
        title=f"{fund.name} growing at {net * 100:.1f}% net",
        detail=f"{ctx.fmt.money(fund.principal)} generating {net * 100:.2f}% net annual return.",
        suggestion="Continue holding.",
        action_ref=ctx.fmt.action_refs.fixed_income,
    )]


# =============================================================================
# RETIREMENT
# =============================================================================

def retirement_stale(snap: RetirementSnapshot, ctx: RuleContext) -> list[Finding]:
    th = ctx.thresholds
    findings = []
    for account in snap.accounts:
        if account.instrument_type != th.retirement_instrument_type or account.last_updated is None:
            continue
        days = _age_days(ctx.as_of, account.last_updated)
        if days > th.retirement_stale_days:
            owner = account.owner_name or account.owner
            findings.append(Finding(
                id=f"retirement-stale-{account.owner}",
                severity=Severity.AMBER,
                category=FindingCategory.RETIREMENT,
                title=f"{owner}'s retirement balance is {days} days old",
                detail=(
                    f"Last updated: {account.last_updated.isoformat()}. Retirement balances "
                    "change monthly with employer contributions and returns."
                ),
                suggestion="Check the provider's site or app for the current balance.",
                action_ref=ctx.fmt.action_refs.retirement,
            ))
    return findings


def retirement_projection_low(snap: RetirementSnapshot, ctx: RuleContext) -> list[Finding]:
    """
    Balance compounded to retirement age vs an income-replacement target.

    target = monthly income * 12 * replacement ratio * retirement years.
    Fires when the projection is below the shortfall ratio of that target.
    """
    th = ctx.thresholds
    if ctx.monthly_income <= 0:
        return []
    target = ctx.monthly_income * 12 * th.income_replacement_ratio * th.retirement_years
    fmt = ctx.fmt
    findings = []
    for account in snap.accounts:
        if account.instrument_type != th.retirement_instrument_type or account.birth_date is None:
            continue
        retires_on = _add_years(account.birth_date, th.retirement_age)
        years = max(0.0, (retires_on - ctx.as_of).days / DAYS_PER_YEAR)
        projected = account.current_balance * (1 + th.retirement_growth_rate) ** years
        if projected < target * th.retirement_shortfall_ratio:
            owner = account.owner_name or account.owner
            findings.append(Finding(
                id=f"retirement-projection-low-{account.owner}",
                severity=Severity.AMBER,
                category=FindingCategory.RETIREMENT,
                title=f"{owner}'s retirement projection may fall short",
                detail=(
                    f"Projected {fmt.money(projected)} at {th.retirement_age} "
                    f"(base {th.retirement_growth_rate * 100:.1f}%). Income replacement target "
                    f"(~{fmt.money(target)} for {th.retirement_years}yr) may require voluntary contributions."
                ),
                suggestion="Consider voluntary retirement contributions; they are usually tax-deductible.",
                action_ref=fmt.action_refs.retirement,
            ))
    return findings


# =============================================================================
# PRIVATE EQUITY
# =============================================================================

def pe_stale(snap: PrivateEquitySnapshot, ctx: RuleContext) -> list[Finding]:
    findings = []
    for holding in snap.holdings:
        if holding.updated_at is None:
            continue
        days = _age_days(ctx.as_of, holding.updated_at)
        if days > ctx.thresholds.pe_stale_days:
            findings.append(Finding(
                id=f"pe-stale-{holding.ticker}",
                severity=Severity.AMBER,
                category=FindingCategory.GENERAL,
                title=f"{holding.ticker} equity valuation is {days // DAYS_PER_MONTH} months old",
                detail=(
                    f"Last updated: {holding.updated_at.isoformat()}. Estimated price per share "
                    f"({ctx.fmt.usd(holding.current_price_usd, 2)}) may no longer reflect current company valuation."
                ),
                suggestion="Check with the company for an updated 409A valuation or estimated share price.",
                action_ref=ctx.fmt.action_refs.private_equity,
            ))
    return findings


def pe_exit_approaching(snap: PrivateEquitySnapshot, ctx: RuleContext) -> list[Finding]:
    findings = []
    for holding in snap.holdings:
        if holding.expected_exit_end is None:
            continue
        months = round_half_up((holding.expected_exit_end - ctx.as_of).days / DAYS_PER_MONTH_EXACT)
        if 0 < months <= ctx.thresholds.pe_exit_window_months:
            start = holding.expected_exit_start.isoformat() if holding.expected_exit_start else "?"
            findings.append(Finding(
                id=f"pe-exit-approaching-{holding.ticker}",
                severity=Severity.AMBER,
                category=FindingCategory.GENERAL,
                title=f"{holding.name} exit window in ~{months} months - prepare tax strategy",
                detail=(
                    f"Expected exit: {start} to {holding.expected_exit_end.isoformat()}. "
                    "Private company share sales are taxed at the marginal income rate."
                ),
                suggestion="Consult a tax advisor on exit treatment before the event.",
                action_ref=ctx.fmt.action_refs.private_equity,
            ))
    return findings


def pe_tax_advisory(snap: PrivateEquitySnapshot, ctx: RuleContext) -> list[Finding]:
    return [
        Finding(
            id=f"pe-tax-advisory-{holding.ticker}",
            severity=Severity.AMBER,
            category=FindingCategory.GENERAL,
            title=f"{holding.name} exit: taxed at marginal rate, not the listed-securities rate",
            detail=(
                f"Private company share sales are taxed at your marginal income rate. At "
                f"{ctx.fmt.usd(holding.unrealized_gain_usd)} unrealized gain, tax could be significant."
            ),
            suggestion="Engage a tax advisor 12+ months before exit to structure the transaction.",
            action_ref=ctx.fmt.action_refs.private_equity,
        )
        for holding in snap.holdings
    ]


# =============================================================================
# LIQUIDITY
# =============================================================================

def monthly_basis(snap: LiquiditySnapshot, monthly_income: float) -> float:
    """Monthly burn the emergency fund is measured in."""
    if snap.monthly_expenses is not None:
        return snap.monthly_expenses
    return monthly_income


def emergency_months(snap: Optional[LiquiditySnapshot], monthly_income: float) -> float:
    if snap is None:
        return 0.0
    basis = monthly_basis(snap, monthly_income)
    if basis <= 0:
        return 0.0
    return snap.emergency_fund_balance / basis


def emergency_fund_healthy(snap: LiquiditySnapshot, ctx: RuleContext) -> list[Finding]:
    basis = monthly_basis(snap, ctx.monthly_income)
    if basis <= 0:
        return []
    months = snap.emergency_fund_balance / basis
    if months < ctx.thresholds.emergency_healthy_months:
        return []
    target_months = math.ceil(snap.emergency_fund_target / basis)
    return [Finding(
        id="emergency-fund-healthy",
        severity=Severity.GREEN,
        category=FindingCategory.GENERAL,
        title=f"Emergency fund covers {months:.1f} months of expenses",
        detail=(
            f"{ctx.fmt.money(snap.emergency_fund_balance)} provides {months:.1f} months of coverage. "
            f"Target: {target_months} months."
        ),
        suggestion="Emergency fund is healthy. Consider redirecting surplus savings to goals or investments.",
        action_ref=ctx.fmt.action_refs.emergency_fund,
    )]


# =============================================================================
# REGISTRY
# =============================================================================

DEFAULT_RULES: tuple[Rule, ...] = (
    Rule("crypto-concentration", Domain.CRYPTO, crypto_concentration),
    Rule("crypto-large-loss", Domain.CRYPTO, crypto_large_loss),
    Rule("crypto-overweight", Domain.CRYPTO, crypto_overweight),
    Rule("re-stale-valuation", Domain.REAL_ESTATE, re_stale_valuation),
    Rule("re-sale-pending", Domain.REAL_ESTATE, re_sale_pending),
    Rule("target-gap", Domain.REAL_ESTATE, target_gap),
    Rule("target-debt-payoff", Domain.REAL_ESTATE, target_debt_payoff),
    Rule("fi-maturing", Domain.FIXED_INCOME, fi_maturing),
    Rule("commission-tier-approaching", Domain.FIXED_INCOME, commission_tier_approaching),
    Rule("commission-tier-reached", Domain.FIXED_INCOME, commission_tier_reached),
    Rule("tax-declaration-window", Domain.FIXED_INCOME, tax_declaration_window),
    Rule("fund-performance", Domain.FIXED_INCOME, fund_performance),
    Rule("retirement-stale", Domain.RETIREMENT, retirement_stale),
    Rule("retirement-projection-low", Domain.RETIREMENT, retirement_projection_low),
    Rule("pe-stale", Domain.PRIVATE_EQUITY, pe_stale),
    Rule("pe-exit-approaching", Domain.PRIVATE_EQUITY, pe_exit_approaching),
    Rule("pe-tax-advisory", Domain.PRIVATE_EQUITY, pe_tax_advisory),
    Rule("emergency-fund-healthy", Domain.LIQUIDITY, emergency_fund_healthy),
)
