"""Abstract interfaces for the swappable storage and transcoding backends."""

from story_recorder.interfaces.counter_store import ICounterStore
from story_recorder.interfaces.metadata_store import IMetadataStore, StoryMutator
from story_recorder.interfaces.transcoder import ITranscoder

__all__ = ["ICounterStore", "IMetadataStore", "ITranscoder", "StoryMutator"]
