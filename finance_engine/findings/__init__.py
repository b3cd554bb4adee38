"""Findings engine, rules and scoring."""

from finance_engine.findings.engine import FindingsEngine, audit_portfolio
from finance_engine.findings.rules import DEFAULT_RULES, Rule, RuleContext
from finance_engine.findings.scoring import (
    grade_from_score,
    health_score,
    score_label,
    score_spending,
    summarize_net_worth,
)

__all__ = [
    "FindingsEngine",
    "audit_portfolio",
    "DEFAULT_RULES",
    "Rule",
    "RuleContext",
    "grade_from_score",
    "health_score",
    "score_label",
    "score_spending",
    "summarize_net_worth",
]
