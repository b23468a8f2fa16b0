"""YAML loader for the static story catalog.

# ─── CONFIGURATION SPLIT ──────────────────────────────────────────────
#
# Two sources, each owning its own keys:
#
#   config/config.yaml  - catalog data checked into the repo: categories,
#                         id width, allowed and default upload extensions.
#                         Merged over the built-in ``_DEFAULTS`` below.
#   Settings            - deploy-time values (data dir, upload limit,
#                         transcoding, admin password) read from the
#                         environment / .env by pydantic-settings.
#
# Nothing is copied from one into the other; callers read deploy values
# from ``Settings`` and catalog values from the dict returned here.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from story_recorder.utils.errors import ConfigurationError

_DEFAULTS: dict = {
    "stories": {
        "categories": ["nina", "dani", "beide"],
        "id_width": 3,
    },
    "upload": {
        "allowed_extensions": [".webm", ".ogg", ".mp4", ".m4a", ".wav", ".mp3"],
        "default_extension": ".webm",
    },
}


def load_config(path: str = "config/config.yaml") -> dict:
    """Load the YAML catalog over the built-in defaults.

    Args:
        path: Path to the YAML configuration file.  A missing file means
            the defaults are used as-is.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the category list or id width is unusable.
    """
    config: dict = {}
    _deep_merge(config, _DEFAULTS)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{path} must contain a mapping", component="config")
        _deep_merge(config, yaml_config)

    _validate(config)
    return config


def _validate(config: dict) -> None:
    stories = config["stories"]
    categories = stories.get("categories")
    if not categories or not all(isinstance(c, str) and c.strip() for c in categories):
        raise ConfigurationError("stories.categories must be a non-empty list of names", component="config")
    if "all" in categories:
        raise ConfigurationError("'all' is reserved and can't be a category", component="config")
    width = stories.get("id_width")
    if not isinstance(width, int) or width < 1:
        raise ConfigurationError("stories.id_width must be a positive integer", component="config")
    extensions = config["upload"].get("allowed_extensions") or []
    if config["upload"].get("default_extension") not in extensions:
        raise ConfigurationError("upload.default_extension must be one of upload.allowed_extensions", component="config")


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
