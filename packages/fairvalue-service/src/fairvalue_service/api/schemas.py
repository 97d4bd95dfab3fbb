from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fairvalue_engine import ValuationSnapshot


class ReportRequest(BaseModel):
    """Request body for the per-company report endpoint."""

    ticker: str = Field(..., min_length=1, description="Ticker symbol (e.g., AAPL)")
    exchange: str = Field(..., min_length=1, description="Exchange code (e.g., NASDAQ)")
    target_multiple: Optional[float] = Field(
        None,
        alias="targetMultiple",
        allow_inf_nan=False,
        description="Target P/E for per-year fair values; defaults to TARGET_PE",
    )

    @field_validator("ticker", "exchange")
    @classmethod
    def upper_case(cls, v: str) -> str:
        return v.upper()

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "ticker": "AAPL",
                "exchange": "NASDAQ",
                "targetMultiple": 25,
            }
        },
    )


class SnapshotInput(BaseModel):
    """A pre-resolved valuation snapshot, as returned by the live endpoint."""

    price: float = Field(0.0, allow_inf_nan=False)
    fair_ev: float = Field(0.0, alias="fairEV", allow_inf_nan=False, description="EV-derived fair value per share")
    fair_pe: float = Field(0.0, alias="fairPE", allow_inf_nan=False, description="P/E-derived fair value per share")
    fair_ps: float = Field(0.0, alias="fairPS", allow_inf_nan=False, description="P/S-derived fair value per share")
    book_value: float = Field(0.0, alias="bookValue", allow_inf_nan=False, description="Book value per share")
    currency: str = "USD"

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_snapshot(self) -> ValuationSnapshot:
        return ValuationSnapshot(
            price=self.price,
            fair_ev=self.fair_ev,
            fair_pe=self.fair_pe,
            fair_ps=self.fair_ps,
            book_value=self.book_value,
            currency=self.currency,
        )


class AIFairValueRequest(BaseModel):
    """Request body for the AI fair-value estimate."""

    ticker: str = Field(..., min_length=1, description="Ticker symbol (e.g., AAPL)")
    source: str = Field("twelvedata", description="Market data connector used when no snapshot is given")
    currency: str = Field("USD", description="Quote currency")
    snapshot: Optional[SnapshotInput] = Field(None, description="Skip the live fetch and use these inputs")

    @field_validator("ticker")
    @classmethod
    def upper_case(cls, v: str) -> str:
        return v.upper()

    model_config = ConfigDict(str_strip_whitespace=True)
