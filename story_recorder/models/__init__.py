"""Story Recorder domain models.

    - story.py    - the persisted ``StoryRecord`` and its document wrapper
    - filters.py  - admin filter selection, facet counts and filtered view
"""

from __future__ import annotations

from story_recorder.models.filters import (
    ALL_CATEGORIES,
    FacetCounts,
    FilteredView,
    FilterSpec,
)
from story_recorder.models.story import (
    SCHEMA_VERSION,
    StoryDocument,
    StoryRecord,
    build_audio_path,
    format_story_id,
)

__all__ = [
    "ALL_CATEGORIES",
    "FacetCounts",
    "FilteredView",
    "FilterSpec",
    "SCHEMA_VERSION",
    "StoryDocument",
    "StoryRecord",
    "build_audio_path",
    "format_story_id",
]
