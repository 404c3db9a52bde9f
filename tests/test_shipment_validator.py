"""
Tests for submission validation and lifecycle state derivation.
"""
import pytest

from shipsplit.models.shipment import (
    DraftCollection,
    DraftStatus,
    LineAllocation,
    PackageSpec,
    ShipmentDraft,
    ShippingMode,
)
from shipsplit.services.allocation_ledger import AllocationLedger
from shipsplit.services.shipment_validator import ShipmentValidator, is_configured, submittable


def ready_draft(draft_id="d1", name="Shipment 1", qty=10, **overrides):
    values = dict(
        id=draft_id,
        display_name=name,
        lines=(LineAllocation("item-x", qty),),
        carrier_id="se-ups",
        service_code="ups_ground",
        packages=(PackageSpec(id=f"{draft_id}-p1", package_type_code="package", weight=1.25),),
    )
    values.update(overrides)
    return ShipmentDraft(**values)


@pytest.fixture
def validator(item_x):
    return ShipmentValidator(AllocationLedger([item_x]))


class TestValidate:
    """Test validate()."""

    def test_complete_single_draft_is_valid(self, validator):
        drafts = DraftCollection(drafts=(ready_draft(),))
        assert validator.validate(drafts, ShippingMode.SINGLE) == []

    def test_missing_carrier_and_service(self, validator):
        drafts = DraftCollection(drafts=(ready_draft(carrier_id="", service_code=""),))
        assert validator.validate(drafts, ShippingMode.SINGLE) == [
            "Shipment 1 needs carrier and service selected"
        ]

    def test_missing_service_only(self, validator):
        drafts = DraftCollection(drafts=(ready_draft(service_code=""),))
        assert "Shipment 1 needs carrier and service selected" in validator.validate(drafts, ShippingMode.SINGLE)

    def test_no_packages(self, validator):
        drafts = DraftCollection(drafts=(ready_draft(packages=()),))
        assert validator.validate(drafts, ShippingMode.SINGLE) == ["Shipment 1 must have at least one package"]

    def test_incomplete_packages_reported_by_position(self, validator):
        packages = (
            PackageSpec(id="p1", package_type_code="package", weight=1.0),
            PackageSpec(id="p2", package_type_code="", weight=0.0),
        )
        errors = validator.validate(DraftCollection(drafts=(ready_draft(packages=packages),)), ShippingMode.SINGLE)
        assert errors == [
            "Shipment 1 package 2 needs a package type",
            "Shipment 1 package 2 needs a valid weight",
        ]

    def test_empty_drafts_are_pruned(self, validator):
        empty = ShipmentDraft(id="d2", display_name="Shipment 2")
        drafts = DraftCollection(drafts=(ready_draft(), empty))
        assert validator.validate(drafts, ShippingMode.SINGLE) == []

    def test_single_mode_ignores_unallocated(self, validator):
        drafts = DraftCollection(drafts=(ready_draft(qty=4),))
        assert validator.validate(drafts, ShippingMode.SINGLE) == []

    def test_split_mode_requires_full_allocation(self, validator):
        drafts = DraftCollection(drafts=(ready_draft(qty=4),))
        assert validator.validate(drafts, ShippingMode.SPLIT) == ["Unallocated items: SKU-X (6)"]

    def test_split_mode_fully_allocated(self, validator):
        drafts = DraftCollection(drafts=(
            ready_draft("d1", "Shipment 1", qty=6),
            ready_draft("d2", "Shipment 2", qty=4),
        ))
        assert validator.validate(drafts, ShippingMode.SPLIT) == []

    def test_submitted_drafts_still_count_as_allocated(self, validator):
        drafts = DraftCollection(drafts=(
            ready_draft("d1", "Shipment 1", qty=6, status=DraftStatus.SUBMITTED, carrier_id=""),
            ready_draft("d2", "Shipment 2", qty=4),
        ))
        assert validator.validate(drafts, ShippingMode.SPLIT) == []

    def test_split_mode_over_allocation(self, validator):
        drafts = DraftCollection(drafts=(
            ready_draft("d1", "Shipment 1", qty=10),
            ready_draft("d2", "Shipment 2", qty=10),
        ))
        assert validator.validate(drafts, ShippingMode.SPLIT) == ["Over-allocated items: SKU-X (10)"]

    def test_single_mode_over_allocation(self, validator):
        drafts = DraftCollection(drafts=(ready_draft(qty=12),))
        assert validator.validate(drafts, ShippingMode.SINGLE) == ["Over-allocated items: SKU-X (2)"]

    def test_over_allocation_counts_submitted_drafts(self, validator):
        drafts = DraftCollection(drafts=(
            ready_draft("d1", "Shipment 1", qty=8, status=DraftStatus.SUBMITTED),
            ready_draft("d2", "Shipment 2", qty=4),
        ))
        assert validator.validate(drafts, ShippingMode.SINGLE) == ["Over-allocated items: SKU-X (2)"]

    def test_unknown_item(self, validator):
        lines = (LineAllocation("item-x", 10), LineAllocation("item-gone", 1))
        drafts = DraftCollection(drafts=(ready_draft(lines=lines),))
        assert validator.validate(drafts, ShippingMode.SPLIT) == ["Shipment 1 contains unknown item item-gone"]

    def test_duplicate_line(self, validator):
        lines = (LineAllocation("item-x", 6), LineAllocation("item-x", 6))
        drafts = DraftCollection(drafts=(ready_draft(lines=lines),))
        assert validator.validate(drafts, ShippingMode.SINGLE) == [
            "Shipment 1 lists SKU-X more than once",
            "Over-allocated items: SKU-X (2)",
        ]

    def test_duplicate_lines_within_ordered_quantity(self, validator):
        lines = (LineAllocation("item-x", 4), LineAllocation("item-x", 6))
        drafts = DraftCollection(drafts=(ready_draft(lines=lines),))
        assert validator.validate(drafts, ShippingMode.SPLIT) == ["Shipment 1 lists SKU-X more than once"]

    def test_non_positive_quantity(self, validator):
        drafts = DraftCollection(drafts=(
            ready_draft("d1", "Shipment 1", lines=(LineAllocation("item-x", 0),)),
            ready_draft("d2", "Shipment 2", qty=10),
        ))
        assert validator.validate(drafts, ShippingMode.SPLIT) == ["Shipment 1 has an invalid quantity for SKU-X"]


class TestStatus:
    """Lifecycle is derived from draft data."""

    def test_progression(self, validator):
        def status_of(draft, mode=ShippingMode.SINGLE):
            return validator.status(DraftCollection(drafts=(draft,)), draft.id, mode)

        assert status_of(ShipmentDraft(id="d1", display_name="Shipment 1")) == DraftStatus.EMPTY
        assert status_of(ready_draft(carrier_id="")) == DraftStatus.PARTIAL
        assert status_of(ready_draft(qty=4), ShippingMode.SPLIT) == DraftStatus.CONFIGURED
        assert status_of(ready_draft()) == DraftStatus.VALID

    def test_configured_with_one_incomplete_package(self, validator):
        packages = (
            PackageSpec(id="p1", package_type_code="package", weight=1.0),
            PackageSpec(id="p2"),
        )
        draft = ready_draft(packages=packages)
        assert is_configured(draft)
        assert validator.status(DraftCollection(drafts=(draft,)), "d1", ShippingMode.SINGLE) == DraftStatus.CONFIGURED

    def test_terminal_status_is_kept(self, validator):
        draft = ready_draft(status=DraftStatus.FAILED)
        assert validator.status(DraftCollection(drafts=(draft,)), "d1", ShippingMode.SINGLE) == DraftStatus.FAILED

    def test_over_allocated_draft_is_not_valid(self, validator):
        drafts = DraftCollection(drafts=(
            ready_draft("d1", "Shipment 1", qty=10),
            ready_draft("d2", "Shipment 2", qty=10),
        ))
        assert validator.status(drafts, "d1", ShippingMode.SINGLE) == DraftStatus.CONFIGURED


class TestSubmittable:

    def test_keeps_order_and_skips_empty_and_terminal(self):
        drafts = [
            ready_draft("a", "Shipment 1"),
            ShipmentDraft(id="b", display_name="Shipment 2"),
            ready_draft("c", "Shipment 3", status=DraftStatus.SUBMITTED),
            ready_draft("d", "Shipment 4"),
        ]
        assert [d.id for d in submittable(drafts)] == ["a", "d"]
