"""YAML configuration loader with environment variable overrides.

Configuration is layered, later layers winning:

  1. ``config/config.yaml`` -- static defaults checked into the repo
     (pagination knobs, per-provider page budgets),
  2. ``.env`` file and environment variables, read through
     :class:`~gigtrail.config.settings.Settings`.

``_deep_merge`` merges nested dicts key by key, so an override for
``cache.ttl_seconds`` leaves ``cache.cleanup_interval_seconds`` alone.
"""

from pathlib import Path

import yaml

from gigtrail.config.settings import Settings
from gigtrail.utils.pagination import PageBudget, PaginationOptions

_DEFAULT_BUDGETS: dict[str, PageBudget] = {
    "setlistfm": PageBudget(country=3, worldwide=10),
    "songkick": PageBudget(country=2, worldwide=5),
    "ticketmaster": PageBudget(country=2, worldwide=5),
    "musicbrainz": PageBudget(country=1, worldwide=3),
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings to merge; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "cache": {
            "ttl_seconds": settings.cache_ttl_seconds,
            "cleanup_interval_seconds": settings.cache_cleanup_interval_seconds,
        },
        "aggregation": {
            "max_source_links": settings.max_source_links,
        },
        "images": {
            "provider": settings.image_provider,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def pagination_options(config: dict) -> PaginationOptions:
    """Build fetcher options from the ``pagination`` section."""
    section = config.get("pagination", {}) or {}
    defaults = PaginationOptions()
    return PaginationOptions(
        batch_size=int(section.get("batch_size", defaults.batch_size)),
        batch_delay=float(section.get("batch_delay_seconds", defaults.batch_delay)),
        retries=int(section.get("retries", defaults.retries)),
        retry_delay=float(section.get("retry_delay_seconds", defaults.retry_delay)),
    )


def page_budget(config: dict, provider: str) -> PageBudget:
    """Build the page budget for *provider* from ``providers.<name>``."""
    default = _DEFAULT_BUDGETS.get(provider, PageBudget())
    section = (config.get("providers", {}) or {}).get(provider, {}) or {}
    return PageBudget(
        country=int(section.get("pages_country", default.country)),
        worldwide=int(section.get("pages_worldwide", default.worldwide)),
    )


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
