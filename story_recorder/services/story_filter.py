"""Admin filter engine - pure functions over the full story list.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services (no I/O, no state).
#
# The admin dialog filters on three dimensions, ANDed together:
#
#   for_whom   - one category, or "all"
#   by_whom    - any of the selected authors (OR), empty = every author
#   only_liked - liked stories only
#
# Facet counts apply every active filter EXCEPT the dimension being
# counted.  E.g. the per-category counters respect the selected authors
# and the liked toggle, but not the currently selected category, so the
# admin sees how many stories each choice would yield.
#
# Output order is always newest first, whatever order the store returned.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from story_recorder.models.filters import (
    ALL_CATEGORIES,
    FacetCounts,
    FilteredView,
    FilterSpec,
)
from story_recorder.models.story import StoryRecord


def _match_for(record: StoryRecord, spec: FilterSpec) -> bool:
    return spec.for_whom == ALL_CATEGORIES or record.recorded_by == spec.for_whom


def _match_by(record: StoryRecord, spec: FilterSpec) -> bool:
    return not spec.by_whom or record.author in spec.by_whom


def _match_liked(record: StoryRecord, spec: FilterSpec) -> bool:
    return not spec.only_liked or record.liked


def matches(record: StoryRecord, spec: FilterSpec) -> bool:
    """Return True if ``record`` passes all three filters."""
    return _match_for(record, spec) and _match_by(record, spec) and _match_liked(record, spec)


def sort_newest_first(records: Iterable[StoryRecord]) -> list[StoryRecord]:
    """Sort by timestamp descending; ties keep a stable id order."""
    return sorted(records, key=lambda r: (r.timestamp, r.id), reverse=True)


def apply_filters(records: Iterable[StoryRecord], spec: FilterSpec) -> list[StoryRecord]:
    """Return the records matching ``spec``, newest first."""
    return sort_newest_first(r for r in records if matches(r, spec))


def facet_counts(
    records: Sequence[StoryRecord],
    spec: FilterSpec,
    categories: Sequence[str],
) -> FacetCounts:
    """Compute the live counters for the filter dialog."""
    per_category: dict[str, int] = {category: 0 for category in categories}
    per_author: Counter[str] = Counter()
    liked = 0
    total = 0

    for record in records:
        m_for = _match_for(record, spec)
        m_by = _match_by(record, spec)
        m_liked = _match_liked(record, spec)

        if m_by and m_liked and record.recorded_by in per_category:
            per_category[record.recorded_by] += 1
        if m_for and m_liked:
            per_author[record.author] += 1
        if m_for and m_by and record.liked:
            liked += 1
        if m_for and m_by and m_liked:
            total += 1

    return FacetCounts(
        for_whom=per_category,
        by_whom=dict(sorted(per_author.items())),
        liked=liked,
        total=total,
    )


def selected_authors(records: Iterable[StoryRecord], spec: FilterSpec) -> list[str]:
    """Selected authors that still have stories under the category and liked filters.

    A selection can go stale when the admin narrows the category afterwards;
    the dialog label ("2 selected") counts only the authors returned here.
    """
    present = {
        r.author for r in records
        if r.author in spec.by_whom and _match_for(r, spec) and _match_liked(r, spec)
    }
    return sorted(present)


def build_view(
    records: Sequence[StoryRecord],
    spec: FilterSpec,
    categories: Sequence[str],
) -> FilteredView:
    """Filter, sort and count in one pass for the admin view endpoint."""
    stories = apply_filters(records, spec)
    return FilteredView(
        stories=stories,
        count=len(stories),
        facets=facet_counts(records, spec, categories),
        selected_authors=selected_authors(records, spec),
    )
