# =============================================================================
# story_recorder/cli/migrate.py - Legacy Metadata Import
# =============================================================================
#
# Earlier deployments wrote one JSON file per story:
#
#     <data_dir>/metadata/001_dani.json
#     {"id": "001", "author": "Mira", "timestamp": "...", "category": "dani",
#      "originalFilename": "...", "userAgent": "..."}
#
# This tool imports those files into the single stories.json document once.
# It runs outside the server and is safe to repeat: ids already present in
# stories.json are skipped, so a second run imports nothing.
#
# Files whose category is not in the configured catalog (config/config.yaml,
# or --config) are skipped; the admin filters could never show them.
#
# After importing, the counter is raised past the highest imported id so
# new uploads never collide with migrated ones.
#
# Usage:
#     python -m story_recorder.cli migrate
#     python -m story_recorder.cli migrate --data-dir /srv/stories --dry-run
#     python -m story_recorder.cli migrate --config /etc/stories/config.yaml
# =============================================================================

"""Import legacy per-story metadata files into the metadata document."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from pydantic import ValidationError

from story_recorder.config.loader import load_config
from story_recorder.config.settings import Settings
from story_recorder.models.story import AUDIO_SUBDIR, StoryRecord
from story_recorder.providers.counter.json_counter_store import JsonCounterStore
from story_recorder.providers.metadata.json_metadata_store import JsonMetadataStore
from story_recorder.utils.logging import configure_logging

logger = structlog.get_logger(logger_name=__name__)

LEGACY_SUBDIR = "metadata"


@dataclass
class MigrationResult:
    """Outcome of one migration run."""

    imported: list[str] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    next_id: int | None = None


def _find_audio(audio_dir: Path, story_id: str, category: str) -> Path | None:
    matches = sorted(audio_dir.glob(f"{story_id}_{category}.*"))
    return matches[0] if matches else None


def _legacy_to_record(raw: dict, audio_file: Path) -> StoryRecord:
    return StoryRecord(
        id=str(raw["id"]),
        recorded_by=raw["category"],
        author=str(raw.get("author", "")).strip(),
        timestamp=raw["timestamp"],
        duration=float(raw.get("duration") or 0.0),
        liked=bool(raw.get("liked", False)),
        audio_path=f"{AUDIO_SUBDIR}/{audio_file.name}",
    )


async def migrate_legacy(
    data_dir: str | Path,
    *,
    categories: Iterable[str] | None = None,
    dry_run: bool = False,
) -> MigrationResult:
    """Import every ``metadata/*.json`` file under ``data_dir``.

    ``categories`` defaults to the configured catalog.  A file is skipped,
    and the reason reported in the result, when it can't be parsed, names
    a category outside the catalog, has no matching audio file, or its id
    already exists.
    """
    allowed = frozenset(categories if categories is not None else load_config()["stories"]["categories"])
    data_path = Path(data_dir)
    legacy_dir = data_path / LEGACY_SUBDIR
    audio_dir = data_path / AUDIO_SUBDIR
    result = MigrationResult()

    metadata_store = JsonMetadataStore(data_path / "stories.json")
    counter_store = JsonCounterStore(data_path / "counter.json")

    existing = {record.id for record in await metadata_store.load_all()}
    highest = 0

    for legacy_file in sorted(legacy_dir.glob("*.json")):
        name = legacy_file.name
        try:
            raw = json.loads(legacy_file.read_text(encoding="utf-8"))
            story_id = str(raw["id"])
            category = raw["category"]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("legacy_file_unreadable", file=name, error=str(exc))
            result.skipped[name] = "unreadable"
            continue

        if not isinstance(category, str) or category not in allowed:
            logger.warning("legacy_category_invalid", file=name, category=category)
            result.skipped[name] = "invalid category"
            continue

        if story_id in existing:
            result.skipped[name] = "already imported"
            continue

        audio_file = _find_audio(audio_dir, story_id, category)
        if audio_file is None:
            logger.warning("legacy_audio_missing", file=name, story_id=story_id)
            result.skipped[name] = "audio file missing"
            continue

        try:
            record = _legacy_to_record(raw, audio_file)
        except (ValidationError, ValueError) as exc:
            logger.warning("legacy_file_invalid", file=name, error=str(exc))
            result.skipped[name] = "invalid fields"
            continue

        if not dry_run:
            await metadata_store.append_one(record)
        existing.add(story_id)
        result.imported.append(story_id)
        if story_id.isdigit():
            highest = max(highest, int(story_id))

    if highest and not dry_run:
        await counter_store.initialize()
        result.next_id = await counter_store.ensure_at_least(highest + 1)

    logger.info(
        "legacy_migration_finished",
        imported=len(result.imported),
        skipped=len(result.skipped),
        dry_run=dry_run,
    )
    return result


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m story_recorder.cli",
        description="Story Recorder maintenance commands.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    migrate_parser = subparsers.add_parser(
        "migrate", help="Import legacy metadata/*.json files into stories.json"
    )
    migrate_parser.add_argument(
        "--data-dir",
        dest="data_dir",
        default=None,
        help="Data directory (default: DATA_DIR setting)",
    )
    migrate_parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Report what would be imported without writing anything",
    )
    migrate_parser.add_argument(
        "--config",
        dest="config_path",
        default="config/config.yaml",
        help="YAML catalog holding the allowed categories",
    )
    return parser


def _print_summary(result: MigrationResult, dry_run: bool) -> None:
    label = "Would import" if dry_run else "Imported"
    print(f"{label}: {len(result.imported)}")
    for story_id in result.imported:
        print(f"  {story_id}")
    print(f"Skipped:  {len(result.skipped)}")
    for name, reason in sorted(result.skipped.items()):
        print(f"  {name:<24} {reason}")
    if result.next_id is not None:
        print(f"Counter next id: {result.next_id}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command != "migrate":
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level)
    data_dir = Path(args.data_dir) if args.data_dir else app_settings.data_path

    if not (data_dir / LEGACY_SUBDIR).is_dir():
        print(f"Error: no {LEGACY_SUBDIR}/ directory under {data_dir}", file=sys.stderr)
        sys.exit(1)

    categories = load_config(args.config_path)["stories"]["categories"]
    result = asyncio.run(migrate_legacy(data_dir, categories=categories, dry_run=args.dry_run))
    _print_summary(result, args.dry_run)
    sys.exit(0)


if __name__ == "__main__":
    main()
