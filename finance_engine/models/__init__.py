"""
Data Models Package

This package contains all Pydantic models used by the finance engine.
All data flowing in and out of the engine must conform to these schemas.
"""

from finance_engine.models.debt import (
    AmortizationStep,
    Debt,
    DebtKind,
    DebtSummary,
    PayoffResult,
    PayoffStrategy,
    PayoffTimelineEntry,
    StrategyComparison,
)
from finance_engine.models.projection import (
    FundingSource,
    FundingSourceKind,
    GrowthPlan,
    GrowthProjection,
    GrowthRates,
    Milestone,
    MilestoneStatus,
    ProjectionEntry,
    RecurringContribution,
    ReferenceAsset,
    ScenarioOutcome,
    ScheduledEvent,
)
from finance_engine.models.snapshots import (
    CategorySpend,
    CryptoHolding,
    CryptoSnapshot,
    DebtSnapshot,
    Domain,
    FinancialSnapshot,
    FixedIncomeInstrument,
    FixedIncomeSnapshot,
    FundingTargetStatus,
    InstrumentType,
    LiquiditySnapshot,
    PrivateEquityHolding,
    PrivateEquitySnapshot,
    PropertyType,
    RealEstateProperty,
    RealEstateSnapshot,
    RetirementAccount,
    RetirementSnapshot,
    SpendingSnapshot,
)
from finance_engine.models.findings import (
    SEVERITY_ORDER,
    AuditReport,
    CategoryScore,
    Finding,
    FindingCategory,
    FindingsThresholds,
    HealthInputs,
    HealthScore,
    HealthScoreBreakdown,
    NetWorthSummary,
    Severity,
    SpendingScorecard,
)
from finance_engine.models.goals import (
    EmergencyFundPlan,
    GoalMilestone,
    GoalPlan,
    SavingsGoal,
)
from finance_engine.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from finance_engine.models.audit import (
    RunEvent,
    RunEventBuilder,
    RunEventType,
    RunSeverity,
)

__all__ = [
    # Debt models
    "AmortizationStep",
    "Debt",
    "DebtKind",
    "DebtSummary",
    "PayoffResult",
    "PayoffStrategy",
    "PayoffTimelineEntry",
    "StrategyComparison",
    # Projection models
    "FundingSource",
    "FundingSourceKind",
    "GrowthPlan",
    "GrowthProjection",
    "GrowthRates",
    "Milestone",
    "MilestoneStatus",
    "ProjectionEntry",
    "RecurringContribution",
    "ReferenceAsset",
    "ScenarioOutcome",
    "ScheduledEvent",
    # Snapshot models
    "CategorySpend",
    "CryptoHolding",
    "CryptoSnapshot",
    "DebtSnapshot",
    "Domain",
    "FinancialSnapshot",
    "FixedIncomeInstrument",
    "FixedIncomeSnapshot",
    "FundingTargetStatus",
    "InstrumentType",
    "LiquiditySnapshot",
    "PrivateEquityHolding",
    "PrivateEquitySnapshot",
    "PropertyType",
    "RealEstateProperty",
    "RealEstateSnapshot",
    "RetirementAccount",
    "RetirementSnapshot",
    "SpendingSnapshot",
    # Findings models
    "SEVERITY_ORDER",
    "AuditReport",
    "CategoryScore",
    "Finding",
    "FindingCategory",
    "FindingsThresholds",
    "HealthInputs",
    "HealthScore",
    "HealthScoreBreakdown",
    "NetWorthSummary",
    "Severity",
    "SpendingScorecard",
    # Goal models
    "EmergencyFundPlan",
    "GoalMilestone",
    "GoalPlan",
    "SavingsGoal",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "RunEvent",
    "RunEventBuilder",
    "RunEventType",
    "RunSeverity",
]
