"""
Two-Stage Input Validation

DESIGN DECISION: The simulators trust their inputs so the loop stays simple.
Everything they assume is checked here, before a run starts.

STAGE 1 - SCHEMA VALIDATION:
- Non-negative balances, rates and minimums
- Positive targets
- Unique ids

STAGE 2 - SEMANTIC VALIDATION:
- Events and contributions naming unknown sources
- Events outside the projection horizon
- Debts whose minimum never covers interest
- Implausible rates

Stage 2 only runs when stage 1 passes.

IMPORTANT: Validation NEVER silently fixes issues. It reports them.
"""

from typing import Sequence

from finance_engine.engine.growth import months_between
from finance_engine.engine.rates import monthly_simple_rate, normalize_rate
from finance_engine.models.debt import Debt
from finance_engine.models.projection import GrowthPlan
from finance_engine.models.validation import ValidationIssue, ValidationResult


MAX_PLAUSIBLE_RATE = 1.0


class InputValidationError(Exception):
    """Input rejected at the boundary. Carries the full validation result."""

    def __init__(self, result: ValidationResult):
        self.result = result
        errors = [i.message for i in result.issues if i.severity == "error"]
        super().__init__(f"Invalid {result.subject}: " + "; ".join(errors))


def _duplicate_ids(ids: Sequence[str]) -> list[str]:
    seen: set[str] = set()
    dupes = []
    for item in ids:
        if item in seen and item not in dupes:
            dupes.append(item)
        seen.add(item)
    return dupes


def _result(
    subject: str,
    schema_valid: bool,
    semantic_valid: bool,
    issues: list[ValidationIssue],
) -> ValidationResult:
    return ValidationResult(
        subject=subject,
        schema_valid=schema_valid,
        semantic_valid=semantic_valid,
        is_valid=schema_valid and semantic_valid,
        issues=issues,
        warnings=[i.message for i in issues if i.severity == "warning"],
    )


class InputValidator:
    """
    Validates debt lists and growth plans before simulation.

    Usage:
        result = InputValidator().validate_debts(debts)
        if not result.is_valid:
            raise InputValidationError(result)
    """

    # =========================================================================
    # DEBTS
    # =========================================================================

    def _validate_debts_schema(
        self,
        debts: Sequence[Debt],
        extra_payment: float,
    ) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        for index, debt in enumerate(debts):
            where = f"debts[{index}]"
            if debt.balance < 0:
                issues.append(ValidationIssue(
                    field=f"{where}.balance",
                    issue_type="negative_value",
                    message=f"Debt {debt.id} has a negative balance ({debt.balance})",
                    severity="error",
                    suggested_fix="Record overpayments as a zero balance",
                ))
            if debt.annual_rate is not None and debt.annual_rate < 0:
                issues.append(ValidationIssue(
                    field=f"{where}.annual_rate",
                    issue_type="negative_value",
                    message=f"Debt {debt.id} has a negative interest rate",
                    severity="error",
                ))
            if debt.minimum_payment < 0:
                issues.append(ValidationIssue(
                    field=f"{where}.minimum_payment",
                    issue_type="negative_value",
                    message=f"Debt {debt.id} has a negative minimum payment",
                    severity="error",
                ))

        for dupe in _duplicate_ids([d.id for d in debts]):
            issues.append(ValidationIssue(
                field="debts",
                issue_type="duplicate_id",
                message=f"Debt id {dupe} appears more than once",
                severity="error",
            ))

        if extra_payment < 0:
            issues.append(ValidationIssue(
                field="extra_payment",
                issue_type="negative_value",
                message="Extra payment cannot be negative",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_debts_semantic(
        self,
        debts: Sequence[Debt],
    ) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        for index, debt in enumerate(debts):
            where = f"debts[{index}]"
            if normalize_rate(debt.annual_rate) > MAX_PLAUSIBLE_RATE:
                issues.append(ValidationIssue(
                    field=f"{where}.annual_rate",
                    issue_type="suspicious_value",
                    message=f"Debt {debt.id} rate {debt.annual_rate} is above 100% a year",
                    severity="warning",
                    suggested_fix="Check whether the rate was entered twice as a percentage",
                ))
            interest = debt.balance * monthly_simple_rate(debt.annual_rate)
            if debt.balance > 0 and debt.minimum_payment <= interest:
                issues.append(ValidationIssue(
                    field=f"{where}.minimum_payment",
                    issue_type="never_resolves",
                    message=(
                        f"Debt {debt.id} minimum ({debt.minimum_payment:,.2f}) does not cover "
                        f"monthly interest ({interest:,.2f})"
                    ),
                    severity="warning",
                    suggested_fix="Without extra payments this debt will not be paid off",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate_debts(
        self,
        debts: Sequence[Debt],
        extra_payment: float = 0.0,
    ) -> ValidationResult:
        """Validate a debt list and the extra payment applied to it."""
        issues = []

        schema_valid, schema_issues = self._validate_debts_schema(debts, extra_payment)
        issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_debts_semantic(debts)
            issues.extend(semantic_issues)

        return _result("debts", schema_valid, semantic_valid, issues)

    # =========================================================================
    # GROWTH PLANS
    # =========================================================================

    def _validate_plan_schema(self, plan: GrowthPlan) -> tuple[bool, list[ValidationIssue]]:
        issues = []

        if plan.target <= 0:
            issues.append(ValidationIssue(
                field="target",
                issue_type="invalid_value",
                message="Target must be greater than zero",
                severity="error",
            ))

        for index, source in enumerate(plan.sources):
            if source.balance < 0:
                issues.append(ValidationIssue(
                    field=f"sources[{index}].balance",
                    issue_type="negative_value",
                    message=f"Source {source.id} has a negative balance",
                    severity="error",
                ))
            if source.annual_rate is not None and source.annual_rate < 0:
                issues.append(ValidationIssue(
                    field=f"sources[{index}].annual_rate",
                    issue_type="negative_value",
                    message=f"Source {source.id} has a negative rate",
                    severity="error",
                ))

        for dupe in _duplicate_ids([s.id for s in plan.sources]):
            issues.append(ValidationIssue(
                field="sources",
                issue_type="duplicate_id",
                message=f"Source id {dupe} appears more than once",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_plan_semantic(self, plan: GrowthPlan) -> tuple[bool, list[ValidationIssue]]:
        issues = []
        known = {s.id for s in plan.sources}

        for index, event in enumerate(plan.events):
            if event.source_id not in known:
                issues.append(ValidationIssue(
                    field=f"events[{index}].source_id",
                    issue_type="unknown_reference",
                    message=f"Event at {event.period_key} targets unknown source {event.source_id}",
                    severity="error",
                ))
            offset = months_between(plan.start_period, event.period_key)
            if event.period_key <= plan.start_period or offset > plan.horizon:
                issues.append(ValidationIssue(
                    field=f"events[{index}].period_key",
                    issue_type="out_of_range",
                    message=f"Event at {event.period_key} falls outside the projection and is ignored",
                    severity="warning",
                ))

        for index, contribution in enumerate(plan.contributions):
            if contribution.source_id not in known:
                issues.append(ValidationIssue(
                    field=f"contributions[{index}].source_id",
                    issue_type="unknown_reference",
                    message=f"Contribution targets unknown source {contribution.source_id}",
                    severity="error",
                ))

        if plan.reference is not None and plan.reference.value < 0:
            issues.append(ValidationIssue(
                field="reference.value",
                issue_type="negative_value",
                message="Reference asset value cannot be negative",
                severity="error",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate_growth_plan(self, plan: GrowthPlan) -> ValidationResult:
        """Validate a growth plan before projection."""
        issues = []

        schema_valid, schema_issues = self._validate_plan_schema(plan)
        issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_plan_semantic(plan)
            issues.extend(semantic_issues)

        return _result(f"growth_plan:{plan.id}", schema_valid, semantic_valid, issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Short plain-text summary for display next to the form."""
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []
        errors = [i for i in result.issues if i.severity == "error"]
        if errors:
            lines.append("Please fix the following:")
            for issue in errors:
                lines.append(f"  - {issue.message}")
                if issue.suggested_fix:
                    lines.append(f"    {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"  - {warning}")

        return "\n".join(lines)
