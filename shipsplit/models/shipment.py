"""
Shipment draft models

A draft groups order-item quantities destined for one physical shipment.
Drafts and the collection holding them are immutable values: every change
produces a new value, so callers never observe a half-applied edit.
"""
import enum
from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Tuple, Union

from shipsplit.core.config import settings
from shipsplit.core.exceptions import DraftLockedError, DraftNotFoundError, IssuanceError


class ShippingMode(str, enum.Enum):
    """SINGLE ships the order as one draft; SPLIT requires every unit allocated."""
    SINGLE = "single"
    SPLIT = "split"


class DraftStatus(str, enum.Enum):
    """
    Draft lifecycle.

    EMPTY, PARTIAL, CONFIGURED and VALID are derived from the draft's data.
    SUBMITTED and FAILED are terminal and stored on the draft.
    """
    EMPTY = "EMPTY"
    PARTIAL = "PARTIAL"
    CONFIGURED = "CONFIGURED"
    VALID = "VALID"
    SUBMITTED = "SUBMITTED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (DraftStatus.SUBMITTED, DraftStatus.FAILED)


@dataclass(frozen=True)
class Dimensions:
    """Package dimensions in inches."""
    length: float
    width: float
    height: float


def default_dimensions() -> Dimensions:
    return Dimensions(
        length=settings.DEFAULT_PACKAGE_LENGTH,
        width=settings.DEFAULT_PACKAGE_WIDTH,
        height=settings.DEFAULT_PACKAGE_HEIGHT,
    )


@dataclass(frozen=True)
class PackageSpec:
    """One physical package of a draft. Weight is in pounds."""
    id: str
    package_type_code: str = ""
    weight: float = 0.0
    dimensions: Dimensions = field(default_factory=default_dimensions)

    @property
    def is_complete(self) -> bool:
        return bool(self.package_type_code) and self.weight > 0


@dataclass(frozen=True)
class LineAllocation:
    item_id: str
    quantity: int


@dataclass(frozen=True)
class ShipmentDraft:
    id: str
    display_name: str
    lines: Tuple[LineAllocation, ...] = field(default_factory=tuple)
    carrier_id: str = ""
    service_code: str = ""
    packages: Tuple[PackageSpec, ...] = field(default_factory=tuple)
    notes: str = ""
    status: Optional[DraftStatus] = None  # only terminal states are stored

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def is_terminal(self) -> bool:
        return self.status is not None and self.status.is_terminal

    def quantity_of(self, item_id: str) -> int:
        return sum(line.quantity for line in self.lines if line.item_id == item_id)

    def get_package(self, package_id: str) -> Optional[PackageSpec]:
        for package in self.packages:
            if package.id == package_id:
                return package
        return None


@dataclass(frozen=True)
class DraftCollection:
    """
    Ordered, versioned set of live drafts for one order.

    Each operation returns a new collection with the version bumped.
    """
    drafts: Tuple[ShipmentDraft, ...] = field(default_factory=tuple)
    version: int = 0

    def __iter__(self) -> Iterator[ShipmentDraft]:
        return iter(self.drafts)

    def __len__(self) -> int:
        return len(self.drafts)

    def find(self, draft_id: str) -> Optional[ShipmentDraft]:
        for draft in self.drafts:
            if draft.id == draft_id:
                return draft
        return None

    def get(self, draft_id: str) -> ShipmentDraft:
        draft = self.find(draft_id)
        if draft is None:
            raise DraftNotFoundError(draft_id)
        return draft

    def get_mutable(self, draft_id: str) -> ShipmentDraft:
        """Like get(), but raises DraftLockedError for a submitted or failed draft."""
        draft = self.get(draft_id)
        if draft.is_terminal:
            raise DraftLockedError(draft.id, draft.display_name, draft.status.value)
        return draft

    def replace_draft(self, draft: ShipmentDraft) -> "DraftCollection":
        self.get(draft.id)
        drafts = tuple(draft if d.id == draft.id else d for d in self.drafts)
        return replace(self, drafts=drafts, version=self.version + 1)

    def append(self, draft: ShipmentDraft) -> "DraftCollection":
        return replace(self, drafts=self.drafts + (draft,), version=self.version + 1)

    def without(self, draft_id: str) -> "DraftCollection":
        self.get(draft_id)
        drafts = tuple(d for d in self.drafts if d.id != draft_id)
        return replace(self, drafts=drafts, version=self.version + 1)

    def with_drafts(self, drafts: Tuple[ShipmentDraft, ...]) -> "DraftCollection":
        return replace(self, drafts=tuple(drafts), version=self.version + 1)


@dataclass(frozen=True)
class AllocatedItem:
    """Snapshot of an allocated line at the time the label was issued."""
    item_id: str
    sku: str
    product_name: str
    quantity: int
    unit_price: float


@dataclass(frozen=True)
class LabelResult:
    draft_id: str
    draft_name: str
    tracking_number: str
    label_url: str
    cost: float
    carrier_name: str
    carrier_code: str = ""
    service_code: str = ""
    items: Tuple[AllocatedItem, ...] = field(default_factory=tuple)
    package_tracking_numbers: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DraftAttempt:
    """Outcome for one draft of a batch: a label or the error that stopped the batch."""
    draft_id: str
    draft_name: str
    result: Union[LabelResult, IssuanceError]

    @property
    def ok(self) -> bool:
        return isinstance(self.result, LabelResult)


@dataclass(frozen=True)
class BatchOutcome:
    """
    Result of one submission.

    attempts runs up to and including the first failure. Drafts after the
    failure are listed in untried_draft_ids and were never sent.
    """
    attempts: Tuple[DraftAttempt, ...] = field(default_factory=tuple)
    untried_draft_ids: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def labels(self) -> List[LabelResult]:
        return [a.result for a in self.attempts if isinstance(a.result, LabelResult)]

    @property
    def failure(self) -> Optional[IssuanceError]:
        for attempt in self.attempts:
            if isinstance(attempt.result, IssuanceError):
                return attempt.result
        return None

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    def raise_for_failure(self) -> None:
        failure = self.failure
        if failure is not None:
            raise failure
