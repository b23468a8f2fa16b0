"""Allow ``python -m story_recorder.cli`` execution."""

from story_recorder.cli.migrate import main

main()
