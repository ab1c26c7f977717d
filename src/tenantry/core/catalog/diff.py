"""Pure catalog diff.

Computes what one vendor's catalog rows must become, given the models the
vendor reports now and the rows already stored. Nothing here touches the
database; the resulting plan is applied as one batch by a CatalogRepository.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from uuid import UUID

from tenantry.core.catalog.types import CatalogEntry, ModelDescriptor, ModelSource


@dataclass(frozen=True)
class EntryUpdate:
    """In-place refresh of an existing auto entry."""

    entry_id: UUID
    model_id: str
    display_name: str
    category: str
    revive: bool = False  # re-enable an entry that was retired earlier


@dataclass(frozen=True)
class EntryRetirement:
    """Soft retirement of an auto entry the vendor no longer reports."""

    entry_id: UUID
    model_id: str


@dataclass(frozen=True)
class ReconciliationPlan:
    """Write instructions for one vendor's rows in one tenant."""

    vendor: str
    inserts: tuple[ModelDescriptor, ...] = field(default_factory=tuple)
    updates: tuple[EntryUpdate, ...] = field(default_factory=tuple)
    retirements: tuple[EntryRetirement, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        """True when applying the plan would change nothing."""
        return not (self.inserts or self.updates or self.retirements)


def dedupe_descriptors(models: Iterable[ModelDescriptor]) -> list[ModelDescriptor]:
    """Drop repeated model ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique = []
    for model in models:
        if not model.id or model.id in seen:
            continue
        seen.add(model.id)
        unique.append(model)
    return unique


def plan_reconciliation(
    vendor: str,
    fetched: Sequence[ModelDescriptor],
    existing: Sequence[CatalogEntry],
    allow_retire: bool = True,
) -> ReconciliationPlan:
    """Diff a vendor's live model list against its stored catalog rows.

    Rules:
    - custom entries are never touched; a fetched id that collides with one
      is skipped.
    - fetched and stored as auto: refresh display name/category when they
      differ; revive the entry if it had been retired. A user-disabled entry
      that was never retired keeps its enabled flag.
    - fetched only: insert as auto, enabled.
    - stored as auto only, not yet retired: retire (disable, keep the row).

    Args:
        vendor: Vendor the rows belong to.
        fetched: Models the vendor reports now.
        existing: Stored rows. Rows of other vendors are ignored.
        allow_retire: When False no entry is retired; used when the listing is
            a static fallback rather than live data.

    Returns:
        The plan; empty when the catalog already matches.
    """
    rows = [e for e in existing if e.vendor == vendor]
    custom_ids = {e.model_id for e in rows if e.source == ModelSource.CUSTOM}
    auto_rows = {e.model_id: e for e in rows if e.source == ModelSource.AUTO}

    inserts: list[ModelDescriptor] = []
    updates: list[EntryUpdate] = []
    reported: set[str] = set()

    for model in dedupe_descriptors(fetched):
        if model.id in custom_ids:
            continue
        reported.add(model.id)

        current = auto_rows.get(model.id)
        if current is None:
            inserts.append(model)
            continue

        changed = (
            current.display_name != model.display_name or current.category != model.category
        )
        if changed or current.retired:
            updates.append(
                EntryUpdate(
                    entry_id=current.id,
                    model_id=model.id,
                    display_name=model.display_name,
                    category=model.category.value,
                    revive=current.retired,
                )
            )

    retirements: list[EntryRetirement] = []
    if allow_retire:
        for model_id, entry in auto_rows.items():
            if model_id not in reported and not entry.retired:
                retirements.append(EntryRetirement(entry_id=entry.id, model_id=model_id))

    return ReconciliationPlan(
        vendor=vendor,
        inserts=tuple(inserts),
        updates=tuple(updates),
        retirements=tuple(retirements),
    )
