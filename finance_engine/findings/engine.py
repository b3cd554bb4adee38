"""
Findings Engine

Runs every registered rule against its domain snapshot, concatenates the
findings and orders them red, amber, green.

DESIGN DECISION: Rules are independent. No rule suppresses another, an
absent domain skips its rules silently, and the sort is stable so findings
of equal severity keep rule-registration order.
"""

from typing import Optional, Sequence

from finance_engine.findings.rules import DEFAULT_RULES, Rule, RuleContext, emergency_months
from finance_engine.findings.scoring import (
    debt_to_income,
    has_multiple_assets,
    health_score,
    summarize_net_worth,
)
from finance_engine.engine.money import round_half_up, round_to
from finance_engine.formatting import FormatConfig
from finance_engine.models.findings import (
    SEVERITY_ORDER,
    AuditReport,
    Finding,
    FindingsThresholds,
    HealthInputs,
)
from finance_engine.models.snapshots import FinancialSnapshot


class FindingsEngine:
    """
    Evaluates an ordered set of rules.

    Usage:
        engine = FindingsEngine(thresholds=FindingsThresholds())
        findings = engine.evaluate(snapshot, net_worth=2_500_000)
    """

    def __init__(
        self,
        rules: Sequence[Rule] = DEFAULT_RULES,
        thresholds: Optional[FindingsThresholds] = None,
        fmt: Optional[FormatConfig] = None,
    ):
        self._rules = tuple(rules)
        self._thresholds = thresholds or FindingsThresholds()
        self._fmt = fmt or FormatConfig()

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    @property
    def thresholds(self) -> FindingsThresholds:
        return self._thresholds

    def context(self, snapshot: FinancialSnapshot, net_worth: float = 0.0) -> RuleContext:
        return RuleContext(
            as_of=snapshot.as_of,
            monthly_income=snapshot.monthly_income,
            net_worth=net_worth,
            thresholds=self._thresholds,
            fmt=self._fmt,
        )

    def evaluate(
        self,
        snapshot: FinancialSnapshot,
        net_worth: Optional[float] = None,
    ) -> list[Finding]:
        """
        Run all rules and return findings sorted by severity.

        net_worth defaults to the snapshot's own figure, then to 0 (which
        disables the rules that need it).
        """
        if net_worth is None:
            net_worth = snapshot.net_worth or 0.0
        ctx = self.context(snapshot, net_worth)

        findings: list[Finding] = []
        for rule in self._rules:
            domain_snapshot = snapshot.get(rule.domain)
            if domain_snapshot is None:
                continue
            findings.extend(rule.evaluate(domain_snapshot, ctx))

        return sorted(findings, key=lambda f: SEVERITY_ORDER[f.severity])


def audit_portfolio(
    snapshot: FinancialSnapshot,
    usd_rate: Optional[float] = None,
    engine: Optional[FindingsEngine] = None,
) -> AuditReport:
    """
    Everything the portfolio audit screen shows, in one pass.

    Net worth comes from the snapshot's override when set, otherwise from the
    domain snapshots (private equity converted with usd_rate). Retirement is
    on track unless a retirement projection finding fired.
    """
    engine = engine or FindingsEngine()
    summary = summarize_net_worth(snapshot, usd_rate)
    net_worth = snapshot.net_worth if snapshot.net_worth is not None else summary.total

    findings = engine.evaluate(snapshot, net_worth=net_worth)

    target = snapshot.real_estate.target if snapshot.real_estate else None
    ratio = debt_to_income(snapshot)
    liquid_months = emergency_months(snapshot.liquidity, snapshot.monthly_income)
    inputs = HealthInputs(
        target_gap_pct=target.gap_pct if target else None,
        debt_to_income=ratio,
        has_multiple_assets=has_multiple_assets(summary),
        liquid_months=liquid_months,
        retirement_on_track=not any(
            f.id.startswith("retirement-projection-low-") for f in findings
        ),
    )

    return AuditReport(
        score=health_score(inputs),
        findings=findings,
        net_worth=summary,
        monthly_income=round_half_up(snapshot.monthly_income),
        debt_to_income_pct=round_half_up(ratio * 100),
        emergency_months=round_to(liquid_months, 1),
        total_debt=round_half_up(snapshot.debt.total_balance) if snapshot.debt else 0,
    )
