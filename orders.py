"""
Order configuration engine

Static product catalog for the order wizard, pricing, order ids, and the
per-product WhatsApp order summary.
"""
import math
import random
import re
import string
import time
from typing import Any, Callable, Dict, List, Mapping, Union
from urllib.parse import quote

from errors import InvalidArgument, NotFound
from schemas import FieldSpec, OrderDraft, PaperOption, PricingDetails, ProductConfig

CONTACT_WHATSAPP = "+918217469646"
CONTACT_EMAIL = "niyasjahangeer772@gmail.com"

ORDER_ID_PREFIX = "SIRQ-2025-"
DESIGN_SERVICES_KIND = "graphic-work"

_BASE36 = string.digits + string.ascii_lowercase
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _field(name, label, kind, required, placeholder="", options=None):
    return FieldSpec(name=name, label=label, type=kind, required=required, placeholder=placeholder, options=options)


PRODUCT_CONFIGS: List[ProductConfig] = [
    ProductConfig(
        id="wedding-card",
        name="Wedding Card",
        icon="💌",
        base_price=20,
        fields=[
            _field("brideName", "Bride Name", "text", True, "Enter bride name"),
            _field("groomName", "Groom Name", "text", True, "Enter groom name"),
            _field("weddingDate", "Wedding Date", "date", True),
            _field("venue", "Venue", "text", True, "Enter venue"),
            _field("photo", "Upload Photo (Optional)", "file", False),
        ],
    ),
    ProductConfig(
        id="id-card",
        name="ID Card",
        icon="💼",
        base_price=150,
        fields=[
            _field("fullName", "Full Name", "text", True, "Enter full name"),
            _field("idNumber", "ID / Roll Number", "text", True, "Enter ID number"),
            _field("department", "Department", "text", True, "Enter department"),
            _field("photo", "Upload Photo (Required)", "file", True),
        ],
    ),
    ProductConfig(
        id="poster",
        name="Poster",
        icon="🖼️",
        base_price=150,
        fields=[
            _field("size", "Size", "select", True, options=["A4", "A3", "A2", "A1", "Custom"]),
            _field("orientation", "Orientation", "select", True, options=["Portrait", "Landscape"]),
            _field("designChoice", "Design Choice", "select", True, options=["Upload My Design", "Request Design"]),
            _field("design", "Upload Design File", "file", False),
        ],
    ),
    ProductConfig(
        id="invitation",
        name="Event Invitation",
        icon="🎉",
        base_price=15,
        fields=[
            _field("eventName", "Event Name", "text", True, "e.g., Birthday Party"),
            _field("eventDate", "Event Date", "date", True),
            _field("venue", "Venue", "text", True, "Enter venue"),
            _field("message", "Special Message", "textarea", False, "Any special message"),
            _field("design", "Upload Design (Optional)", "file", False),
        ],
    ),
    ProductConfig(
        id="custom-print",
        name="Custom Print",
        icon="🎨",
        base_price=100,
        fields=[
            _field("printType", "Print Type", "text", True, "e.g., Flyer, Brochure"),
            _field("size", "Size", "select", True, options=["A4", "A3", "A2", "Custom"]),
            _field("description", "Description", "textarea", True, "Describe your requirements"),
            _field("design", "Upload Design", "file", False),
        ],
    ),
    ProductConfig(
        id="graphic-work",
        name="Graphic Design Work",
        icon="✨",
        base_price=500,
        fields=[
            _field("projectType", "Project Type", "select", True,
                   options=["Logo Design", "Brand Identity", "Social Media Graphics", "Custom Design"]),
            _field("description", "Project Description", "textarea", True, "Describe your design needs"),
            _field("reference", "Upload Reference (Optional)", "file", False),
        ],
    ),
]

_CONFIGS_BY_KIND: Dict[str, ProductConfig] = {c.id: c for c in PRODUCT_CONFIGS}

PAPER_PRICING: Dict[str, PaperOption] = {
    "standard": PaperOption(name="Standard", upcharge=0),
    "premium": PaperOption(name="Premium (Glossy)", upcharge=5),
    "luxury": PaperOption(name="Luxury (Textured)", upcharge=10),
}


# ---------- Catalog & validation ----------

def get_product_config(product_kind: str) -> ProductConfig:
    try:
        return _CONFIGS_BY_KIND[product_kind]
    except KeyError:
        raise NotFound(f"Unknown product type: {product_kind}")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def validate_fields(config: ProductConfig, values: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check that every required field has a non-empty value.

    Only presence is checked, not type or format. Returns {"valid": True} or
    {"valid": False, "errors": {field_name: message}}.
    """
    errors = {}
    for spec in config.fields:
        if spec.required and _is_empty(values.get(spec.name)):
            errors[spec.name] = f"{spec.label} is required"
    if errors:
        return {"valid": False, "errors": errors}
    return {"valid": True}


# ---------- Pricing ----------

def coerce_quantity(value: Any) -> int:
    """
    Read a quantity the way the order form does: the leading integer of the
    input, truncated toward zero. Inputs that do not yield a positive
    integer become 1.
    """
    if value is None or isinstance(value, bool):
        return 1
    if isinstance(value, float):
        if not math.isfinite(value):
            return 1
        value = int(value)
    if isinstance(value, int):
        return max(1, value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return 1
    return max(1, int(match.group(1)))


def estimate_delivery(product_kind: str, quantity: int) -> str:
    if product_kind == DESIGN_SERVICES_KIND:
        return "3-5 business days"
    if quantity <= 50:
        return "24-48 hours"
    elif quantity <= 200:
        return "2-3 business days"
    return "4-7 business days"


def compute_pricing(config: ProductConfig, quantity: Any, paper_kind: str) -> PricingDetails:
    paper = PAPER_PRICING.get(paper_kind)
    if paper is None:
        raise InvalidArgument(
            f"Invalid paper type: {paper_kind}",
            {"paperType": f"Must be one of: {', '.join(PAPER_PRICING)}"},
        )
    qty = coerce_quantity(quantity)
    unit_price = config.base_price + paper.upcharge
    return PricingDetails(
        base_price=config.base_price,
        quantity=qty,
        paper_type=paper_kind,
        paper_upcharge=paper.upcharge,
        unit_price=unit_price,
        total_price=unit_price * qty,
        estimated_delivery=estimate_delivery(config.id, qty),
    )


# ---------- Order id ----------

def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_order_id() -> str:
    """Millisecond timestamp plus five random characters, base 36, upper-cased."""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=5))
    return f"{ORDER_ID_PREFIX}{timestamp}{suffix}".upper()


# ---------- Order summary ----------

def _wedding_card(v, pricing, order_id):
    return [
        "SIRAQ Order — WEDDING CARD",
        f"Bride: {v.get('brideName', '')}",
        f"Groom: {v.get('groomName', '')}",
        f"Date: {v.get('weddingDate', '')}",
        f"Venue: {v.get('venue', '')}",
        f"Quantity: {pricing.quantity}",
        f"Total Price: ₹{pricing.total_price}",
        f"Order ID: {order_id}",
        f"My Email: {CONTACT_EMAIL}",
    ]


def _id_card(v, pricing, order_id):
    return [
        "SIRAQ Order — ID CARD",
        f"Name: {v.get('fullName', '')}",
        f"ID No: {v.get('idNumber', '')}",
        f"Department: {v.get('department', '')}",
        f"Quantity: {pricing.quantity}",
        f"Total Price: ₹{pricing.total_price}",
        f"Order ID: {order_id}",
    ]


def _poster(v, pricing, order_id):
    requested = v.get("designChoice") == "Request Design"
    return [
        "SIRAQ Order — POSTER DESIGN" if requested else "SIRAQ Order — POSTER",
        f"Size: {v.get('size', '')}",
        f"Orientation: {v.get('orientation', '')}",
        "Request: Custom Design Needed" if requested else "Design: Uploaded",
        f"Quantity: {pricing.quantity}",
        f"Total Price: ₹{pricing.total_price}",
        f"Order ID: {order_id}",
    ]


def _invitation(v, pricing, order_id):
    return [
        "SIRAQ Order — EVENT INVITATION",
        f"Event: {v.get('eventName', '')}",
        f"Date: {v.get('eventDate', '')}",
        f"Venue: {v.get('venue', '')}",
        f"Quantity: {pricing.quantity}",
        f"Total Price: ₹{pricing.total_price}",
        f"Order ID: {order_id}",
    ]


def _custom_print(v, pricing, order_id):
    return [
        "SIRAQ Order — CUSTOM PRINT",
        f"Type: {v.get('printType', '')}",
        f"Size: {v.get('size', '')}",
        f"Description: {v.get('description', '')}",
        f"Quantity: {pricing.quantity}",
        f"Total Price: ₹{pricing.total_price}",
        f"Order ID: {order_id}",
    ]


def _graphic_work(v, pricing, order_id):
    # quoted per project, quantity is not part of the message
    return [
        "SIRAQ Order — GRAPHIC DESIGN WORK",
        f"Project Type: {v.get('projectType', '')}",
        f"Description: {v.get('description', '')}",
        f"Total Price: ₹{pricing.total_price}",
        f"Order ID: {order_id}",
    ]


SUMMARY_TEMPLATES: Dict[str, Callable[[Mapping[str, Any], PricingDetails, str], List[str]]] = {
    "wedding-card": _wedding_card,
    "id-card": _id_card,
    "poster": _poster,
    "invitation": _invitation,
    "custom-print": _custom_print,
    "graphic-work": _graphic_work,
}


def render_order_summary(draft: OrderDraft) -> str:
    if draft.pricing is None:
        raise InvalidArgument("Order has no pricing yet", {"pricing": "Pricing step not completed"})
    template = SUMMARY_TEMPLATES.get(draft.product_type)
    if template is None:
        raise NotFound(f"Unknown product type: {draft.product_type}")
    return "\n".join(template(draft.values, draft.pricing, draft.order_id or ""))


# ---------- Hand-off ----------

def sanitize_number(contact_number: str) -> str:
    return "".join(ch for ch in contact_number if ch.isdigit() and ch.isascii())


def build_handoff_link(message: str, contact_number: str = CONTACT_WHATSAPP) -> str:
    encoded = quote(message, safe="!~*'()")
    return f"https://wa.me/{sanitize_number(contact_number)}?text={encoded}"


def _format_price(price: Union[int, float]) -> str:
    if float(price).is_integer():
        return str(int(price))
    return f"{price:.2f}"


def catalog_order_message(product_name: str, price: Union[int, float]) -> str:
    """Quick-order message for a catalog product on the public site."""
    return f"Hi, I want to order: {product_name} (₹{_format_price(price)}). Please confirm."
