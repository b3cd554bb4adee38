"""
Message Formatting

Immutable presentation settings for finding messages: the currency shown in
amounts and the dashboard location each finding links to.

DESIGN DECISION: These are passed into the findings engine, never read from
module globals. Changing the currency or a route is a configuration change;
the rules themselves stay untouched.
"""

from pydantic import BaseModel, ConfigDict, Field


class ActionRefs(BaseModel):
    """Dashboard locations where the user can act on a finding."""
    model_config = ConfigDict(frozen=True)

    crypto: str = "/finance/investments?tab=Crypto"
    real_estate: str = "/finance/investments?tab=Real Estate"
    fixed_income: str = "/finance/investments?tab=Fixed Income"
    retirement: str = "/finance/investments?tab=Retirement"
    private_equity: str = "/finance/investments?tab=Stocks"
    emergency_fund: str = "/finance/emergency-fund"


class FormatConfig(BaseModel):
    """How amounts and percentages read in finding text."""
    model_config = ConfigDict(frozen=True)

    currency_code: str = Field(default="MXN", min_length=3, max_length=3)
    currency_symbol: str = "$"
    action_refs: ActionRefs = Field(default_factory=ActionRefs)

    def money(self, amount: float, decimals: int = 0) -> str:
        """e.g. money(-1234.5) -> '-$1,235 MXN'"""
        sign = "-" if amount < 0 else ""
        return f"{sign}{self.currency_symbol}{abs(amount):,.{decimals}f} {self.currency_code}"

    def usd(self, amount: float, decimals: int = 0) -> str:
        sign = "-" if amount < 0 else ""
        return f"{sign}${abs(amount):,.{decimals}f} USD"

    @staticmethod
    def pct(value: float, decimals: int = 1) -> str:
        return f"{value:.{decimals}f}%"
