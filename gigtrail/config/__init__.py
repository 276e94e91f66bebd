"""Configuration module -- exports Settings, load_config and the page-budget helpers."""

from gigtrail.config.loader import load_config, page_budget, pagination_options
from gigtrail.config.settings import Settings

__all__ = ["Settings", "load_config", "page_budget", "pagination_options"]
