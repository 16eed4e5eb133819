"""Supply data models shared by every layer.

Models for:
- MonthlyRecord: Supply at the latest known point of one calendar month
- YearlyRecord: Year-end (or latest known) supply of one calendar year
- ChainRecord: One row of the per-chain distribution
- SupplyMetrics: Headline growth figures derived from the monthly series
- Snapshot: Everything the dashboard renders for one coin

All models use:
- Pydantic for strict validation
- snake_case attributes with the wire names used by the CSV history and the
  dashboard JSON document as aliases ("month", "change", "chain", "percentage")
- Supply amounts in millions of currency units
"""

from datetime import datetime

from pydantic import BaseModel, Field


class MonthlyRecord(BaseModel):
    """Supply for one calendar month.

    Stored in: <coin>_monthly_supply.csv (month, supply, change)
    """

    period_key: str = Field(
        ...,
        alias="month",
        pattern=r"^\d{4}-(0[1-9]|1[0-2])$",
        description="Calendar month (YYYY-MM), unique sort key",
    )
    supply: float = Field(..., ge=0, description="Supply in millions")
    change_pct: float = Field(
        0.0, alias="change", description="Change vs previous month (%)"
    )
    estimated: bool = Field(
        False,
        description="True for interpolated placeholder months (never persisted to CSV)",
    )

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class YearlyRecord(BaseModel):
    """Supply roll-up for one calendar year.

    Stored in: <coin>_yearly_supply.csv (year, supply, change)
    """

    year: int = Field(..., ge=1970, le=9999)
    supply: float = Field(..., ge=0, description="Supply at latest known month")
    change_pct: float = Field(
        0.0, alias="change", description="Change vs previous year (%)"
    )

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class ChainRecord(BaseModel):
    """Circulating amount of a coin on one chain (or the Others bucket)."""

    chain_name: str = Field(..., alias="chain", min_length=1)
    amount: float = Field(..., ge=0, description="Circulating amount in millions")
    share_pct: float = Field(
        ..., alias="percentage", ge=0, le=100, description="Share of total (%)"
    )

    class Config:
        """Pydantic configuration."""

        populate_by_name = True


class SupplyMetrics(BaseModel):
    """Headline growth figures shown above the charts."""

    latest_supply: float | None = None
    quarterly_change: float | None = Field(
        None, description="Latest supply minus supply three records earlier"
    )
    avg_growth_3m: float | None = Field(
        None, description="Mean month-over-month growth over 3 months (%)"
    )
    avg_growth_12m: float | None = Field(
        None, description="Mean month-over-month growth over 12 months (%)"
    )


class Snapshot(BaseModel):
    """Complete dashboard bundle for one coin.

    Stored in: data.json, keyed by coin.
    Replaced wholesale on every update cycle.
    """

    monthly: list[MonthlyRecord] = Field(default_factory=list)
    yearly: list[YearlyRecord] = Field(default_factory=list)
    chains: list[ChainRecord] = Field(default_factory=list)
    last_updated: datetime
    metrics: SupplyMetrics = Field(default_factory=SupplyMetrics)

    class Config:
        """Pydantic configuration."""

        populate_by_name = True

    def to_document(self) -> dict:
        """Serialize with wire names, as written to the JSON document."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def has_estimates(self) -> bool:
        """True if any monthly record is an interpolated placeholder."""
        return any(record.estimated for record in self.monthly)
