"""Admin filter models - the filter selection and the computed view.

A ``FilterSpec`` is the admin's current selection (for whom / by whom /
only liked).  ``FilteredView`` is what the filter engine hands back: the
matching stories, newest first, plus the facet counts that drive the live
counters in the filter dialog.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from story_recorder.models.story import StoryRecord

# Value of ``for_whom`` that disables the category filter.
ALL_CATEGORIES = "all"


class FilterSpec(BaseModel):
    """Admin filter selection.  The default instance matches every story."""

    model_config = ConfigDict(frozen=True)

    for_whom: str = Field(default=ALL_CATEGORIES, description="Category, or 'all'.")
    by_whom: frozenset[str] = Field(
        default_factory=frozenset,
        description="Selected authors; empty means every author.",
    )
    only_liked: bool = Field(default=False, description="Restrict to liked stories.")


class FacetCounts(BaseModel):
    """Live counts for each filter dimension.

    Every count applies all active filters *except* the one being counted,
    so the numbers tell the admin what they would get by changing that
    single selection.
    """

    model_config = ConfigDict(frozen=True)

    for_whom: dict[str, int] = Field(default_factory=dict)
    by_whom: dict[str, int] = Field(default_factory=dict)
    liked: int = 0
    total: int = 0


class FilteredView(BaseModel):
    """Result of applying a ``FilterSpec`` to the full record set."""

    model_config = ConfigDict(frozen=True)

    stories: list[StoryRecord] = Field(default_factory=list)
    count: int = 0
    facets: FacetCounts = Field(default_factory=FacetCounts)
    selected_authors: list[str] = Field(
        default_factory=list,
        description="Selected authors that still have stories under the other filters.",
    )
