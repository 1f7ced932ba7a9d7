from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# amounts are taken as Decimal or raw strings so that unparseable input
# reaches the service and fails as INVALID_AMOUNT instead of a schema error
AmountInput = Decimal | str


class OpeningBalanceRequest(BaseModel):
    model_config = {"json_schema_extra": {"example": {"amount": "1000.00"}}}

    amount: AmountInput


class CashCutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {"cut_time": "14:00", "reported_balance": "1650.00", "notes": "Sin novedades"}
        }
    }

    cut_time: str
    reported_balance: AmountInput
    notes: str | None = Field(default=None, max_length=1000)


class ManualCashCutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "cut_time": "16:30",
                "reported_balance": "1200.00",
                "notes": "Cambio de turno",
                "admin_password": "********",
            }
        }
    }

    cut_time: str | None = None
    reported_balance: AmountInput
    notes: str | None = Field(default=None, max_length=1000)
    admin_password: str = Field(min_length=1)


class AdminConfirmationRequest(BaseModel):
    password: str = Field(min_length=1)


class AdminConfirmationResponse(BaseModel):
    confirmed: bool
    admin_username: str
    trace_id: str


class WindowTotalsResponse(BaseModel):
    cash: Decimal
    card: Decimal
    transfer: Decimal
    total: Decimal
    count: int


class SaleResponse(BaseModel):
    id: str
    folio: str | None
    total: Decimal
    payment_method: str
    created_at: datetime


class CashCutRecordResponse(BaseModel):
    id: str
    business_date: date
    ledger_seq: int
    cut_time: str | None
    is_opening: bool
    is_manual: bool
    opening_balance: Decimal
    cash_sales: Decimal
    card_sales: Decimal
    transfer_sales: Decimal
    total_sales: Decimal
    sales_count: int
    closing_balance_reported: Decimal
    discrepancy: Decimal
    window_start: datetime | None
    notes: str | None
    recorded_by_user_id: str | None
    created_at: datetime


class CashCutListResponse(BaseModel):
    business_date: date
    rows: list[CashCutRecordResponse]
    total: int


class SessionStateResponse(BaseModel):
    state: str
    due_label: str | None
    redirect_to: str | None
    business_date: date
    now: datetime
    scheduled_labels: list[str]


class OpeningBalancePromptResponse(BaseModel):
    business_date: date
    needs_opening_balance: bool
    opening: CashCutRecordResponse | None


class CutPreviewResponse(BaseModel):
    label: str
    business_date: date
    is_manual: bool
    already_recorded: bool
    since: datetime
    opening_balance: Decimal
    totals: WindowTotalsResponse
    expected_cash_balance: Decimal
    sales: list[SaleResponse]


class SessionSummaryResponse(BaseModel):
    business_date: date
    state: str
    due_label: str | None
    since: datetime | None
    opening_balance: Decimal | None
    totals: WindowTotalsResponse
    expected_cash_balance: Decimal | None
