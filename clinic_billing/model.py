from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional, Dict
from datetime import datetime
from enum import Enum

from clinic_billing.services.discount import resolve_line_discount


class DiscountType(str, Enum):
    percentage = "percentage"
    nominal = "nominal"


class PaymentStatus(str, Enum):
    lunas = "lunas"
    dp = "dp"


class BillableLine(BaseModel):
    id: str = Field(..., description="Catalog reference of the treatment/service/lab item")
    name: str
    unit_price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    discount_value: float = Field(0, ge=0)
    discount_type: DiscountType = DiscountType.percentage
    category: Optional[str] = Field(None, description="Catalog category; looked up by name when empty")

    @field_validator("discount_type", mode="before")
    def normalize_discount_type(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v

    @field_validator("name")
    def normalize_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == DiscountType.percentage and self.discount_value > 100:
            raise ValueError("discount cannot exceed 100%")
        return self

    def priced(self):
        return resolve_line_discount(self.unit_price, self.quantity,
                                     self.discount_value, self.discount_type.value)

    @property
    def subtotal(self):
        return self.priced()["subtotal"]

    @property
    def discount_amount(self):
        return self.priced()["discount_amount"]

    @property
    def final_price(self):
        return self.priced()["final_price"]


class FeeRule(BaseModel):
    id: str
    doctor_ids: Optional[List[str]] = None
    doctor_names: Optional[List[str]] = None
    treatment_types: Optional[List[str]] = None
    category: Optional[str] = None
    fee_percentage: float = Field(..., ge=0, le=100)
    is_default: bool = False
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PaymentState(BaseModel):
    status: PaymentStatus = PaymentStatus.lunas
    dp_amount: float = Field(0, ge=0)

    @field_validator("status", mode="before")
    def normalize_status(cls, v):
        if isinstance(v, str):
            return v.lower().strip()
        return v


class TreatmentFeeDetail(BaseModel):
    line_id: str
    line_name: str
    unit_price: float
    final_price: float
    resolved_fee_percentage: float
    fee_base: float
    calculated_fee: float
    rule_id: Optional[str] = None
    match_score: int = 0
    rule_description: str
    is_manual_override: bool


class VisitTotals(BaseModel):
    total_final_price: float = 0.0
    total_fee: float = 0.0
    average_fee_percentage: float = 0.0
    outstanding_amount: Optional[float] = None


class MultiFeeResult(BaseModel):
    details: List[TreatmentFeeDetail]
    totals: VisitTotals
    has_conflicts: bool = False
    has_manual_overrides: bool = False


class MedicationLine(BaseModel):
    id: str
    name: str
    quantity: int = Field(1, ge=1)
    unit_price: float = Field(..., ge=0)


class VisitBillingInput(BaseModel):
    patient_id: str
    doctor_id: Optional[str] = None
    lines: List[BillableLine] = Field(default_factory=list)
    medications: List[MedicationLine] = Field(default_factory=list)
    medication_cost: Optional[float] = Field(None, ge=0, description="Overrides the sum of medication lines")
    admin_fee_override: Optional[float] = Field(None, ge=0)
    payment: PaymentState = Field(default_factory=PaymentState)
    manual_overrides: Dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="Raw operator input per line id; empty or null clears the override")

    @field_validator("manual_overrides", mode="before")
    def stringify_overrides(cls, v):
        if isinstance(v, dict):
            return {str(k): (None if val is None else str(val)) for k, val in v.items()}
        return v


class VisitSummary(BaseModel):
    subtotal: float
    total_discount: float
    total_nominal: float
    admin_fee: float
    medication_cost: float
    total_tindakan: float
    payment_status: PaymentStatus
    dp_amount: float
    outstanding_amount: float


class VisitBilling(BaseModel):
    summary: VisitSummary
    fees: MultiFeeResult


class FeeSettingInput(BaseModel):
    doctor_ids: List[str] = Field(default_factory=list)
    doctor_names: List[str] = Field(default_factory=list)
    treatment_types: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    fee_percentage: float = Field(..., ge=0, le=100)
    is_default: bool = False
    description: Optional[str] = None

    @field_validator("category", "description")
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class FeeSettingUpdate(BaseModel):
    doctor_ids: Optional[List[str]] = None
    doctor_names: Optional[List[str]] = None
    treatment_types: Optional[List[str]] = None
    category: Optional[str] = None
    fee_percentage: Optional[float] = Field(None, ge=0, le=100)
    is_default: Optional[bool] = None
    description: Optional[str] = None

    @field_validator("fee_percentage", "is_default", mode="before")
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("category", "description")
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v
