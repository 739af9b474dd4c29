"""
Pricing table data models.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PricingFeature(BaseModel):
    """One line of a pricing table's feature checklist."""
    name: str = Field(..., min_length=1, description="Feature label")
    included: bool = Field(..., description="Whether the plan includes it")


class PricingTable(BaseModel):
    """Pricing table row as stored remotely."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Pricing table ID")
    supplier_id: str = Field(..., description="Owning supplier ID")
    service_name: str = Field(..., description="Display name")
    price_amount: Decimal = Field(..., ge=0, description="Monetary amount")
    price_unit: str = Field(..., description="Unit label, e.g. per month")
    features: List[PricingFeature] = Field(default_factory=list)
    duration: Optional[str] = None
    includes: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PricingTableCreate(BaseModel):
    """Payload for creating a pricing table; the owner is passed separately."""

    model_config = ConfigDict(extra="forbid")

    service_name: str = Field(..., min_length=1)
    price_amount: Decimal = Field(..., ge=0)
    price_unit: str = Field(..., min_length=1)
    features: List[PricingFeature] = Field(default_factory=list)
    duration: Optional[str] = None
    includes: Optional[str] = None
    description: Optional[str] = None

    def to_record(self, supplier_id: str) -> Dict[str, Any]:
        record = self.model_dump(mode="json")
        record["supplier_id"] = supplier_id
        return record


class PricingTableUpdate(BaseModel):
    """Partial update; only fields explicitly set are sent."""

    model_config = ConfigDict(extra="forbid")

    service_name: Optional[str] = Field(None, min_length=1)
    price_amount: Optional[Decimal] = Field(None, ge=0)
    price_unit: Optional[str] = Field(None, min_length=1)
    features: Optional[List[PricingFeature]] = None
    duration: Optional[str] = None
    includes: Optional[str] = None
    description: Optional[str] = None

    def to_patch(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
