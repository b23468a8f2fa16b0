"""Command-line tools for the Story Recorder.

- ``python -m story_recorder.cli migrate`` - import per-story JSON files
  from the older ``metadata/`` layout into ``stories.json``.
"""
