import pytest

from errors import HandoffError, NotFound, ValidationError
from wizard import OrderWizard, WizardStep


@pytest.fixture
def previewed(wedding_values):
    wizard = OrderWizard()
    wizard.select_product("wedding-card")
    wizard.submit_details(wedding_values)
    wizard.submit_pricing(10, "premium")
    return wizard


def test_happy_path(previewed):
    assert previewed.step == WizardStep.PREVIEW
    assert "Total Price: ₹250" in previewed.preview()

    submitted = []
    link = previewed.confirm(lambda draft, files: submitted.append(draft.order_id))

    assert previewed.step == WizardStep.SUBMITTED
    assert submitted == [previewed.draft.order_id]
    assert link.startswith("https://wa.me/918217469646?text=")


def test_unknown_product():
    with pytest.raises(NotFound):
        OrderWizard().select_product("banner")


def test_missing_details_keep_wizard_on_details_step():
    wizard = OrderWizard()
    wizard.select_product("id-card")
    with pytest.raises(ValidationError) as exc:
        wizard.submit_details({"fullName": "Meera"})
    assert set(exc.value.errors) == {"idNumber", "department", "photo"}
    assert wizard.step == WizardStep.DETAILS_ENTRY


def test_back_transitions(previewed):
    assert previewed.back() == WizardStep.PRICING_ENTRY
    previewed.go_to(WizardStep.PRODUCT_SELECTION)
    assert previewed.back() == WizardStep.PRODUCT_SELECTION
    with pytest.raises(RuntimeError):
        previewed.go_to(WizardStep.PREVIEW)


def test_failed_handoff_keeps_draft_for_retry(previewed, wedding_values):
    def broken(draft, files):
        raise ConnectionError("offline")

    with pytest.raises(HandoffError):
        previewed.confirm(broken)

    assert previewed.step == WizardStep.PREVIEW
    assert previewed.last_error
    assert previewed.draft.values == wedding_values
    order_id = previewed.draft.order_id

    previewed.confirm(lambda draft, files: None)
    assert previewed.step == WizardStep.SUBMITTED
    assert previewed.draft.order_id == order_id


def test_submitted_is_terminal(previewed):
    previewed.confirm(lambda draft, files: None)
    with pytest.raises(RuntimeError):
        previewed.back()
    with pytest.raises(RuntimeError):
        previewed.select_product("poster")


def test_attachments_are_forwarded(wedding_values):
    class FakeFile:
        name = "couple.jpg"

    wizard = OrderWizard(contact_number="+1 (555) 010-0000")
    wizard.select_product("wedding-card")
    wizard.submit_details({**wedding_values, "photo": "couple.jpg"}, [FakeFile()])
    wizard.submit_pricing("0")
    assert wizard.draft.pricing.quantity == 1
    assert wizard.draft.files == ["couple.jpg"]

    seen = []
    link = wizard.confirm(lambda draft, files: seen.extend(files))
    assert len(seen) == 1
    assert link.startswith("https://wa.me/15550100000?")


def test_resubmitted_details_replace_earlier_values(wedding_values):
    wizard = OrderWizard()
    wizard.select_product("wedding-card")
    wizard.submit_details({**wedding_values, "photo": "couple.jpg"})
    wizard.back()
    assert wizard.step == WizardStep.DETAILS_ENTRY

    wizard.submit_details(wedding_values)
    assert "photo" not in wizard.draft.values
    assert wizard.draft.values == wedding_values
