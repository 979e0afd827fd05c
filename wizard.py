"""
Order wizard state machine

product -> details -> pricing -> preview -> submitted

Back-transitions to any earlier step are allowed until the order is submitted.
A failed submission leaves the wizard on the preview step with every entered
value intact so the customer can simply try again.
"""
import logging
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional

from errors import HandoffError, ValidationError
from orders import (
    CONTACT_WHATSAPP,
    build_handoff_link,
    compute_pricing,
    generate_order_id,
    get_product_config,
    render_order_summary,
    validate_fields,
)
from schemas import OrderDraft, ProductConfig

logger = logging.getLogger(__name__)


class WizardStep(str, Enum):
    PRODUCT_SELECTION = "product"
    DETAILS_ENTRY = "details"
    PRICING_ENTRY = "pricing"
    PREVIEW = "preview"
    SUBMITTED = "submitted"


_ORDER = [
    WizardStep.PRODUCT_SELECTION,
    WizardStep.DETAILS_ENTRY,
    WizardStep.PRICING_ENTRY,
    WizardStep.PREVIEW,
    WizardStep.SUBMITTED,
]

# submit(draft, attachments) delivers the order to the intake endpoint
Submitter = Callable[[OrderDraft, List[Any]], Any]


class OrderWizard:
    def __init__(self, contact_number: str = CONTACT_WHATSAPP):
        self.contact_number = contact_number
        self.step = WizardStep.PRODUCT_SELECTION
        self.draft: Optional[OrderDraft] = None
        self.attachments: List[Any] = []
        self.last_error: Optional[str] = None

    @property
    def product(self) -> Optional[ProductConfig]:
        if self.draft is None:
            return None
        return get_product_config(self.draft.product_type)

    def _require(self, step: WizardStep):
        if self.step != step:
            raise RuntimeError(f"Wizard is at '{self.step.value}', expected '{step.value}'")

    def select_product(self, product_kind: str) -> ProductConfig:
        if self.step == WizardStep.SUBMITTED:
            raise RuntimeError("Order already submitted")
        config = get_product_config(product_kind)
        self.draft = OrderDraft(product_type=config.id)
        self.attachments = []
        self.step = WizardStep.DETAILS_ENTRY
        return config

    def submit_details(self, values: Mapping[str, Any], attachments: Optional[List[Any]] = None):
        self._require(WizardStep.DETAILS_ENTRY)
        result = validate_fields(self.product, values)
        if not result["valid"]:
            raise ValidationError("Missing required fields", result["errors"])
        self.draft.values = dict(values)
        self.attachments = list(attachments or [])
        self.draft.files = [getattr(a, "filename", None) or getattr(a, "name", None) or str(a)
                            for a in self.attachments]
        self.step = WizardStep.PRICING_ENTRY

    def submit_pricing(self, quantity: Any, paper_kind: str = "standard"):
        self._require(WizardStep.PRICING_ENTRY)
        self.draft.pricing = compute_pricing(self.product, quantity, paper_kind)
        self.step = WizardStep.PREVIEW
        return self.draft.pricing

    def preview(self) -> str:
        self._require(WizardStep.PREVIEW)
        return render_order_summary(self.draft)

    def back(self) -> WizardStep:
        """Go one step back. No-op on the first step."""
        index = _ORDER.index(self.step)
        if index > 0:
            self.go_to(_ORDER[index - 1])
        return self.step

    def go_to(self, step: WizardStep):
        if self.step == WizardStep.SUBMITTED:
            raise RuntimeError("Order already submitted")
        if _ORDER.index(step) >= _ORDER.index(self.step):
            raise RuntimeError(f"Cannot move forward to '{step.value}' without completing the current step")
        self.step = step

    def confirm(self, submit: Submitter) -> str:
        """
        Assign an order id, hand the order to `submit` and return the WhatsApp link.

        Any exception from `submit` is wrapped in HandoffError; the wizard stays
        on the preview step.
        """
        self._require(WizardStep.PREVIEW)
        if self.draft.order_id is None:
            self.draft.order_id = generate_order_id()
        try:
            submit(self.draft, self.attachments)
        except Exception as e:
            logger.warning("Order %s submission failed: %s", self.draft.order_id, e)
            self.last_error = "Order submission failed. Please try again."
            raise HandoffError(self.last_error) from e
        self.last_error = None
        link = build_handoff_link(render_order_summary(self.draft), self.contact_number)
        self.step = WizardStep.SUBMITTED
        return link
