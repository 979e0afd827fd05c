"""
Database Schemas for Siraq Studio

Each Pydantic model that is persisted represents a collection in MongoDB. The
collection name is the lowercase class name (e.g., CatalogProduct -> "catalogproduct").

Collections:
- SiteBrandingConfig: single branding record (_id "config")
- CatalogProduct: products managed from the admin dashboard
- Upload: stored blobs (logos, product images)

The order wizard models (ProductConfig, FieldSpec, PricingDetails, OrderDraft)
are never persisted.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ProductKind = Literal["wedding-card", "id-card", "poster", "invitation", "custom-print", "graphic-work"]
PaperKind = Literal["standard", "premium", "luxury"]
FieldKind = Literal["text", "date", "number", "file", "select", "textarea"]

LOGO_HISTORY_LIMIT = 3


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python and in MongoDB documents."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------
# Order wizard
# ---------------------------
class FieldSpec(ApiModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Key under which the value is collected")
    label: str
    type: FieldKind = Field(..., description="text | date | number | file | select | textarea")
    required: bool = False
    options: Optional[List[str]] = Field(None, description="Choices, only for select fields")
    placeholder: Optional[str] = None


class ProductConfig(ApiModel):
    """A product kind the order wizard can configure."""
    model_config = ConfigDict(frozen=True)

    id: ProductKind
    name: str
    icon: str
    base_price: int = Field(..., ge=0, description="Base price per unit in INR")
    fields: List[FieldSpec] = Field(default_factory=list)


class PaperOption(ApiModel):
    model_config = ConfigDict(frozen=True)

    name: str
    upcharge: int = Field(..., ge=0, description="Per-unit surcharge in INR")


class PricingDetails(ApiModel):
    model_config = ConfigDict(frozen=True)

    base_price: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    paper_type: PaperKind
    paper_upcharge: int = Field(..., ge=0)
    unit_price: int = Field(..., ge=0, description="base_price + paper_upcharge")
    total_price: int = Field(..., ge=0, description="unit_price * quantity")
    estimated_delivery: str


class OrderDraft(ApiModel):
    """In-progress order. Lives only in memory and in the hand-off message."""
    product_type: ProductKind
    values: Dict[str, Any] = Field(default_factory=dict)
    files: List[str] = Field(default_factory=list, description="Names of attached files")
    pricing: Optional[PricingDetails] = None
    order_id: Optional[str] = None


# ---------------------------
# Site branding
# ---------------------------
class LogoHistoryEntry(ApiModel):
    url: str
    uploaded_by: str = ""
    uploaded_at: Optional[datetime] = None


class SiteBrandingConfig(ApiModel):
    """
    Branding record
    Collection: "sitebrandingconfig" (single document, _id "config")
    """
    whatsapp: str = Field(..., description="Contact number used for hand-off links")
    logo_url: str = Field("", description="Active logo, empty means the default logo")
    logo_uploaded_by: str = ""
    logo_uploaded_at: Optional[datetime] = None
    logo_history: List[LogoHistoryEntry] = Field(default_factory=list, max_length=LOGO_HISTORY_LIMIT,
                                                 description="Previous logos, most recent first")


# ---------------------------
# Catalog & uploads
# ---------------------------
class CatalogProduct(ApiModel):
    """
    Products shown on the site and managed by the admin
    Collection: "catalogproduct"
    """
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, description="Price in INR")
    description: str = ""
    image_url: str = ""


class Upload(ApiModel):
    """
    Stored blob addressed by its generated path
    Collection: "upload"
    """
    path: str
    filename: str
    content_type: str
    size: int
    data_b64: str = Field(..., description="Base64-encoded file contents")
