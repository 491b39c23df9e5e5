"""
Configuration Loader for Beamer Toolkit

Loads project settings from slides.yaml (or JSON) and manages the store of
custom themes under ~/.config/beamer-toolkit/themes/.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import ValidationError

from ..errors import ThemeNotFoundError
from .schema import CustomTheme, ProjectConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAMES = ['slides.yaml', 'slides.yml', 'slides.json']

DEFAULT_THEME_DIR = Path.home() / '.config' / 'beamer-toolkit' / 'themes'


def _read_data(path: Path) -> dict:
    suffix = path.suffix.lower()

    with open(path, 'r', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    return data or {}


def load_project_config(config_path: Union[str, Path]) -> ProjectConfig:
    """Load project settings from a YAML or JSON file.

    Args:
        config_path: Path to configuration file (.yaml, .yml, or .json)

    Returns:
        ProjectConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config format is unsupported or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    return parse_config(_read_data(config_path))


def parse_config(data: dict) -> ProjectConfig:
    """Parse configuration data into a ProjectConfig.

    Both the snake_case keys and the frontmatter spellings
    (colorTheme, aspectRatio) are accepted.
    """
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping")
    return ProjectConfig(**data)


def save_project_config(config: ProjectConfig, output_path: Union[str, Path]) -> None:
    """Save project settings to a YAML or JSON file."""
    output_path = Path(output_path)
    suffix = output_path.suffix.lower()

    data = config.model_dump(exclude_none=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        if suffix in ['.yaml', '.yml']:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
        elif suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")


def find_project_config(start_dir: Optional[Union[str, Path]] = None) -> ProjectConfig:
    """Load slides.yaml from ``start_dir`` (default: cwd), or return defaults."""
    directory = Path(start_dir or Path.cwd())
    for name in PROJECT_CONFIG_NAMES:
        candidate = directory / name
        if candidate.exists():
            logger.debug("Using project config %s", candidate)
            return load_project_config(candidate)
    return ProjectConfig()


class ThemeStore:
    """Custom themes, one YAML file per theme."""

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self.directory = Path(directory) if directory else DEFAULT_THEME_DIR

    def path_for(self, name: str) -> Path:
        return self.directory / f'{name}.yaml'

    def save(self, theme: CustomTheme) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(theme.name)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(theme.model_dump(), f, default_flow_style=False, sort_keys=False)
        return path

    def load(self, name: str) -> CustomTheme:
        """Load a theme by name.

        Raises:
            ThemeNotFoundError: If no readable theme with that name exists
        """
        path = self.path_for(name)
        if not path.exists():
            raise ThemeNotFoundError(f"Custom theme '{name}' not found")
        try:
            return CustomTheme(**_read_data(path))
        except (yaml.YAMLError, ValidationError, TypeError) as e:
            raise ThemeNotFoundError(f"Custom theme '{name}' is invalid: {e}") from e

    def list(self) -> List[CustomTheme]:
        """All readable themes, sorted by file name. Unreadable files are skipped."""
        if not self.directory.exists():
            return []

        themes = []
        for path in sorted(self.directory.glob('*.yaml')):
            try:
                themes.append(CustomTheme(**_read_data(path)))
            except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
                logger.debug("Skipping theme file %s: %s", path, e)
        return themes
