from decimal import Decimal

from societybills.models.actor import SYSTEM_ACTOR, Actor
from societybills.models.bill import AdHocCharge


class TestMaintenanceBill:
    def test_totals(self, sample_bill):
        bill = sample_bill(
            discount_amount=Decimal("50"),
            waiver_amount=Decimal("25"),
            penalty_amount=Decimal("100"),
            interest_amount=Decimal("12.34"),
            ad_hoc_charges=[AdHocCharge(label="Parking", amount=Decimal("300"))],
        )

        assert bill.base_total == Decimal("1200")
        assert bill.ad_hoc_total == Decimal("300")
        assert bill.interest_principal == Decimal("1125")
        assert bill.adjustments_total() == Decimal("337.34")
        assert bill.computed_amount() == Decimal("1537.34")

    def test_interest_principal_never_negative(self, sample_bill):
        assert sample_bill(waiver_amount=Decimal("5000")).interest_principal == Decimal("0")

    def test_manual_bill_has_no_base(self, sample_bill):
        bill = sample_bill(breakdown={}, amount=Decimal("750"))
        assert bill.base_total == Decimal("0")
        assert bill.adjustments_total() == Decimal("0")

    def test_document_aliases(self, sample_bill):
        document = sample_bill().to_document()
        assert document["societyId"] == "soc-1"
        assert document["dueDate"] == "2024-03-15"
        assert document["approvalStatus"] == "draft"
        assert "paidAt" not in document


class TestActor:
    def test_capabilities(self):
        assert Actor(id="a", role="society_admin").can_approve
        assert Actor(id="a", role="society_admin").can_edit
        assert Actor(id="a", role="admin").can_edit
        assert not Actor(id="a", role="admin").can_approve
        assert not Actor(id="a", role="renter").can_edit
        assert not Actor(id="a").can_edit

    def test_system_actor(self):
        assert SYSTEM_ACTOR.id == "system"
        assert SYSTEM_ACTOR.can_edit
        assert not SYSTEM_ACTOR.can_approve
