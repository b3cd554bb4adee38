"""
Snapshot Models

Current-state records handed to the findings engine, one explicit schema per
domain. Each domain snapshot carries a `domain` tag so a FinancialSnapshot can
hold any mix of them and rules can select their domain by tag instead of
probing for fields.

DESIGN DECISION: Required vs optional fields are explicit. A rule that needs
a date or a cost basis checks for None and skips; it never substitutes a
default value to force a finding.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from finance_engine.models.debt import Debt


class Domain(str, Enum):
    """Snapshot domains, one per rule family."""
    CRYPTO = "crypto"
    REAL_ESTATE = "real_estate"
    FIXED_INCOME = "fixed_income"
    RETIREMENT = "retirement"
    PRIVATE_EQUITY = "private_equity"
    LIQUIDITY = "liquidity"
    DEBT = "debt"
    SPENDING = "spending"


# =============================================================================
# CRYPTO
# =============================================================================

class CryptoHolding(BaseModel):
    """A coin position already priced in the base currency by the caller."""

    symbol: str = Field(..., min_length=1)
    quantity: float = 0.0
    value: float = Field(
        default=0.0,
        description="Market value in base currency"
    )
    cost: float = Field(
        default=0.0,
        description="Cost basis in base currency"
    )


class CryptoSnapshot(BaseModel):
    domain: Literal["crypto"] = "crypto"
    holdings: list[CryptoHolding] = Field(default_factory=list)

    @property
    def total_value(self) -> float:
        return sum(h.value for h in self.holdings)

    @property
    def total_cost(self) -> float:
        return sum(h.cost for h in self.holdings)

    @property
    def pnl(self) -> float:
        return self.total_value - self.total_cost

    @property
    def pnl_pct(self) -> Optional[float]:
        """Unrealized P&L percentage, None when no cost basis is known."""
        cost = self.total_cost
        if cost <= 0:
            return None
        return (self.total_value - cost) * 100 / cost

    def allocation_pct(self, holding: CryptoHolding) -> float:
        total = self.total_value
        if total <= 0:
            return 0.0
        return holding.value * 100 / total


# =============================================================================
# REAL ESTATE
# =============================================================================

class PropertyType(str, Enum):
    OWNED = "owned"
    PRE_SALE = "pre_sale"
    SALE_PENDING = "sale_pending"
    RENTAL = "rental"


class RealEstateProperty(BaseModel):
    id: str
    name: str
    property_type: PropertyType = PropertyType.OWNED
    current_value: float = 0.0
    mortgage_balance: float = 0.0
    last_valuation_date: Optional[date] = None

    @property
    def equity(self) -> float:
        return self.current_value - self.mortgage_balance


class FundingTargetStatus(BaseModel):
    """
    Where a funded purchase stands, usually taken from a growth projection.

    gap is target minus projected total at delivery.
    """

    id: str
    name: str
    target: float = Field(..., gt=0)
    gap: float
    months_to_delivery: int
    freed_monthly_payment: Optional[float] = Field(
        default=None,
        description="Monthly payment released when linked debts are paid off"
    )
    debt_payoff_period: Optional[str] = Field(
        default=None,
        description="YYYY-MM when the linked debts are paid off"
    )

    @property
    def gap_pct(self) -> float:
        return self.gap / self.target * 100


class RealEstateSnapshot(BaseModel):
    domain: Literal["real_estate"] = "real_estate"
    properties: list[RealEstateProperty] = Field(default_factory=list)
    target: Optional[FundingTargetStatus] = None

    @property
    def total_equity(self) -> float:
        return sum(p.equity for p in self.properties)


# =============================================================================
# FIXED INCOME
# =============================================================================

class InstrumentType(str, Enum):
    DEBT_FUND = "debt_fund"
    GOVERNMENT_BOND = "government_bond"
    TERM_DEPOSIT = "term_deposit"
    OTHER = "other"


class FixedIncomeInstrument(BaseModel):
    """
    A fixed-income position.

    Rates may be stored as fractions or whole percentages. net_annual_rate is
    a stored figure that may be stale; it is only trusted when there is no
    commission_rate to compute the net from.
    """

    id: str
    name: str
    institution: Optional[str] = None
    instrument_type: InstrumentType = InstrumentType.OTHER
    principal: float = 0.0
    annual_rate: Optional[float] = None
    commission_rate: Optional[float] = None
    net_annual_rate: Optional[float] = None
    maturity_date: Optional[date] = None
    auto_renew: bool = False


class FixedIncomeSnapshot(BaseModel):
    domain: Literal["fixed_income"] = "fixed_income"
    instruments: list[FixedIncomeInstrument] = Field(default_factory=list)

    @property
    def total_principal(self) -> float:
        return sum(i.principal for i in self.instruments)


# =============================================================================
# RETIREMENT
# =============================================================================

class RetirementAccount(BaseModel):
    """
    A retirement account.

    Owner display name and birth date travel with the record; the engine keeps
    no owner lookup tables of its own.
    """

    id: str
    owner: str = Field(..., min_length=1)
    owner_name: Optional[str] = None
    instrument_type: str = "afore"
    current_balance: float = 0.0
    last_updated: Optional[date] = None
    birth_date: Optional[date] = None


class RetirementSnapshot(BaseModel):
    domain: Literal["retirement"] = "retirement"
    accounts: list[RetirementAccount] = Field(default_factory=list)

    @property
    def total_balance(self) -> float:
        return sum(a.current_balance for a in self.accounts)


# =============================================================================
# PRIVATE EQUITY
# =============================================================================

class PrivateEquityHolding(BaseModel):
    ticker: str = Field(..., min_length=1)
    name: str
    shares: float = 0.0
    current_price_usd: float = 0.0
    avg_cost_basis_usd: float = 0.0
    updated_at: Optional[date] = None
    expected_exit_start: Optional[date] = None
    expected_exit_end: Optional[date] = None

    @property
    def value_usd(self) -> float:
        return self.shares * self.current_price_usd

    @property
    def unrealized_gain_usd(self) -> float:
        return self.shares * (self.current_price_usd - self.avg_cost_basis_usd)


class PrivateEquitySnapshot(BaseModel):
    domain: Literal["private_equity"] = "private_equity"
    holdings: list[PrivateEquityHolding] = Field(default_factory=list)

    @property
    def total_value_usd(self) -> float:
        return sum(h.value_usd for h in self.holdings)


# =============================================================================
# LIQUIDITY / DEBT / SPENDING
# =============================================================================

class LiquiditySnapshot(BaseModel):
    """Emergency fund state."""
    domain: Literal["liquidity"] = "liquidity"
    emergency_fund_balance: float = 0.0
    emergency_fund_target: float = 0.0
    monthly_expenses: Optional[float] = Field(
        default=None,
        description="Monthly burn; the snapshot's monthly income is used when absent"
    )


class DebtSnapshot(BaseModel):
    domain: Literal["debt"] = "debt"
    debts: list[Debt] = Field(default_factory=list)

    @property
    def total_balance(self) -> float:
        return sum(d.balance for d in self.debts if d.balance > 0)

    @property
    def total_minimum(self) -> float:
        return sum(d.minimum_payment for d in self.debts if d.balance > 0)


class CategorySpend(BaseModel):
    """One expense category for the month under review."""

    category_id: str
    name: Optional[str] = None
    spent: float = 0.0
    previous_spent: float = 0.0
    budget: float = 0.0
    transaction_count: int = Field(default=0, ge=0)


class SpendingSnapshot(BaseModel):
    domain: Literal["spending"] = "spending"
    month: Optional[str] = None
    categories: list[CategorySpend] = Field(default_factory=list)

    @property
    def total_spent(self) -> float:
        return sum(c.spent for c in self.categories)


DomainSnapshot = Annotated[
    Union[
        CryptoSnapshot,
        RealEstateSnapshot,
        FixedIncomeSnapshot,
        RetirementSnapshot,
        PrivateEquitySnapshot,
        LiquiditySnapshot,
        DebtSnapshot,
        SpendingSnapshot,
    ],
    Field(discriminator="domain"),
]


class FinancialSnapshot(BaseModel):
    """
    Everything the findings engine looks at for one evaluation.

    as_of replaces "now": staleness, maturity and seasonal rules all measure
    against it, which keeps evaluation reproducible.
    """
    model_config = ConfigDict(frozen=True)

    as_of: date
    monthly_income: float = Field(
        default=0.0,
        description="Sum of active monthly income sources"
    )
    net_worth: Optional[float] = Field(
        default=None,
        description="Pre-computed net worth; derived from the domains when absent"
    )
    domains: list[DomainSnapshot] = Field(default_factory=list)

    def get(self, domain: Union[Domain, str]) -> Optional[BaseModel]:
        """First snapshot of the given domain, or None."""
        key = domain.value if isinstance(domain, Domain) else domain
        for snap in self.domains:
            if snap.domain == key:
                return snap
        return None

    @property
    def crypto(self) -> Optional[CryptoSnapshot]:
        return self.get(Domain.CRYPTO)

    @property
    def real_estate(self) -> Optional[RealEstateSnapshot]:
        return self.get(Domain.REAL_ESTATE)

    @property
    def fixed_income(self) -> Optional[FixedIncomeSnapshot]:
        return self.get(Domain.FIXED_INCOME)

    @property
    def retirement(self) -> Optional[RetirementSnapshot]:
        return self.get(Domain.RETIREMENT)

    @property
    def private_equity(self) -> Optional[PrivateEquitySnapshot]:
        return self.get(Domain.PRIVATE_EQUITY)

    @property
    def liquidity(self) -> Optional[LiquiditySnapshot]:
        return self.get(Domain.LIQUIDITY)

    @property
    def debt(self) -> Optional[DebtSnapshot]:
        return self.get(Domain.DEBT)

    @property
    def spending(self) -> Optional[SpendingSnapshot]:
        return self.get(Domain.SPENDING)
