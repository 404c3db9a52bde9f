"""
Tests for the allocation ledger: derived quantities, clamping and conservation.
"""
import pytest

from shipsplit.core.exceptions import DraftLockedError, DraftNotFoundError, UnknownOrderItemError
from shipsplit.models.shipment import DraftCollection, DraftStatus, LineAllocation, ShipmentDraft
from shipsplit.services import shipment_drafts
from shipsplit.services.allocation_ledger import AllocationLedger


@pytest.fixture
def ledger(item_x, item_y):
    return AllocationLedger([item_x, item_y])


@pytest.fixture
def drafts():
    return DraftCollection(drafts=(
        ShipmentDraft(id="d1", display_name="Shipment 1"),
        ShipmentDraft(id="d2", display_name="Shipment 2"),
    ))


class TestDerivedQuantities:
    """allocated/remaining are computed from the drafts on every call."""

    def test_nothing_allocated(self, ledger, drafts):
        assert ledger.allocated(drafts, "item-x") == 0
        assert ledger.remaining(drafts, "item-x") == 10

    def test_sums_across_drafts(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 6)
        drafts = ledger.allocate(drafts, "d2", "item-x", 4)

        assert ledger.allocated(drafts, "item-x") == 10
        assert ledger.remaining(drafts, "item-x") == 0
        assert ledger.is_fully_allocated(drafts) is False  # item-y untouched

    def test_summary_rows(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-y", 2)
        rows = {row["sku"]: row for row in ledger.summary(drafts)}

        assert rows["SKU-Y"]["allocated"] == 2
        assert rows["SKU-Y"]["remaining"] == 1
        assert rows["SKU-X"]["remaining"] == 10

    def test_unknown_item(self, ledger, drafts):
        with pytest.raises(UnknownOrderItemError):
            ledger.remaining(drafts, "nope")
        with pytest.raises(UnknownOrderItemError):
            ledger.allocate(drafts, "d1", "nope", 1)

    def test_duplicate_lines_are_summed(self, ledger):
        drafts = DraftCollection(drafts=(ShipmentDraft(
            id="d1",
            display_name="Shipment 1",
            lines=(LineAllocation("item-x", 4), LineAllocation("item-x", 5)),
        ),))

        assert ledger.allocated(drafts, "item-x") == 9
        assert ledger.remaining(drafts, "item-x") == 1

    def test_lines_for_unknown_items_are_ignored(self, ledger):
        drafts = DraftCollection(drafts=(ShipmentDraft(
            id="d1",
            display_name="Shipment 1",
            lines=(LineAllocation("item-gone", 2), LineAllocation("item-y", 1)),
        ),))

        rows = {row["item_id"]: row for row in ledger.summary(drafts)}
        assert set(rows) == {"item-x", "item-y"}
        assert rows["item-y"]["allocated"] == 1
        assert ledger.find_item("item-gone") is None


class TestAllocate:
    """Test allocate()."""

    def test_clamps_to_remaining(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 7)
        drafts = ledger.allocate(drafts, "d2", "item-x", 50)

        assert drafts.get("d2").quantity_of("item-x") == 3
        assert ledger.remaining(drafts, "item-x") == 0

    def test_adds_to_existing_line(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 2)
        drafts = ledger.allocate(drafts, "d1", "item-x", 3)

        draft = drafts.get("d1")
        assert len(draft.lines) == 1
        assert draft.quantity_of("item-x") == 5

    def test_nothing_remaining_is_noop(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-y", 3)
        after = ledger.allocate(drafts, "d2", "item-y", 1)

        assert after is drafts
        assert after.get("d2").is_empty

    def test_non_positive_request_is_noop(self, ledger, drafts):
        assert ledger.allocate(drafts, "d1", "item-x", 0) is drafts
        assert ledger.allocate(drafts, "d1", "item-x", -4) is drafts

    def test_returns_new_version(self, ledger, drafts):
        after = ledger.allocate(drafts, "d1", "item-x", 1)
        assert after.version == drafts.version + 1
        assert drafts.get("d1").is_empty

    def test_unknown_draft(self, ledger, drafts):
        with pytest.raises(DraftNotFoundError):
            ledger.allocate(drafts, "missing", "item-x", 1)

    def test_terminal_draft_rejected(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 1)
        drafts = shipment_drafts.mark_status(drafts, "d1", DraftStatus.SUBMITTED)

        with pytest.raises(DraftLockedError) as exc_info:
            ledger.allocate(drafts, "d1", "item-x", 1)
        assert "Shipment 1 is submitted" in exc_info.value.message


class TestSetQuantity:
    """Test set_quantity()."""

    def test_sets_exact_quantity(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 2)
        drafts = ledger.set_quantity(drafts, "d1", "item-x", 8)
        assert drafts.get("d1").quantity_of("item-x") == 8

    def test_clamps_to_remaining_plus_current(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 4)
        drafts = ledger.allocate(drafts, "d2", "item-x", 3)
        drafts = ledger.set_quantity(drafts, "d2", "item-x", 100)

        assert drafts.get("d2").quantity_of("item-x") == 6
        assert ledger.remaining(drafts, "item-x") == 0

    def test_zero_removes_line(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 4)
        drafts = ledger.set_quantity(drafts, "d1", "item-x", 0)

        assert drafts.get("d1").lines == ()
        assert ledger.remaining(drafts, "item-x") == 10

    def test_negative_removes_line(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 4)
        drafts = ledger.set_quantity(drafts, "d1", "item-x", -3)
        assert drafts.get("d1").is_empty

    def test_creates_line_when_absent(self, ledger, drafts):
        drafts = ledger.set_quantity(drafts, "d2", "item-y", 2)
        assert drafts.get("d2").quantity_of("item-y") == 2

    def test_unchanged_returns_same_collection(self, ledger, drafts):
        drafts = ledger.allocate(drafts, "d1", "item-x", 4)
        assert ledger.set_quantity(drafts, "d1", "item-x", 4) is drafts


class TestConservation:
    """allocated + remaining == ordered after any sequence of mutations."""

    def test_mixed_sequence(self, ledger, drafts):
        operations = [
            ("allocate", "d1", "item-x", 6),
            ("allocate", "d2", "item-x", 9),
            ("set", "d1", "item-x", 12),
            ("set", "d2", "item-x", -1),
            ("allocate", "d2", "item-y", 5),
            ("set", "d1", "item-y", 2),
            ("allocate", "d1", "item-x", 1),
        ]
        for op, draft_id, item_id, qty in operations:
            if op == "allocate":
                drafts = ledger.allocate(drafts, draft_id, item_id, qty)
            else:
                drafts = ledger.set_quantity(drafts, draft_id, item_id, qty)

            for item in ledger.items:
                allocated = ledger.allocated(drafts, item.id)
                assert allocated + ledger.remaining(drafts, item.id) == item.quantity_ordered
                assert 0 <= allocated <= item.quantity_ordered
                for draft in drafts:
                    assert all(line.quantity > 0 for line in draft.lines)
