"""Configuration module for Beamer Toolkit."""

from .schema import (
    ProjectConfig,
    CustomTheme,
    SUPPORTED_ENGINES,
    ASPECT_RATIOS,
    normalize_aspect_ratio,
)
from .loader import (
    load_project_config,
    save_project_config,
    parse_config,
    find_project_config,
    ThemeStore,
    DEFAULT_THEME_DIR,
)

__all__ = [
    'ProjectConfig',
    'CustomTheme',
    'SUPPORTED_ENGINES',
    'ASPECT_RATIOS',
    'normalize_aspect_ratio',
    'load_project_config',
    'save_project_config',
    'parse_config',
    'find_project_config',
    'ThemeStore',
    'DEFAULT_THEME_DIR',
]
