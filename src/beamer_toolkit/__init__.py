"""
Beamer Toolkit

Write slides in Markdown, compile them with LaTeX Beamer, lint the .tex
before building, and export the deck to a reveal.js web page.
"""

__version__ = "0.1.0"

from .config import (
    ProjectConfig,
    CustomTheme,
    ThemeStore,
    load_project_config,
    find_project_config,
)

from .from_md import (
    markdown_to_beamer,
    convert_markdown_file,
    parse_markdown,
    ConversionOptions,
)

from .export import (
    export_presentation,
    parse_latex,
    latex_to_html,
)

from .lint import (
    lint_source,
    lint_file,
    LintIssue,
)

from .errors import SlidesError

__all__ = [
    # Config
    'ProjectConfig',
    'CustomTheme',
    'ThemeStore',
    'load_project_config',
    'find_project_config',
    # Markdown conversion
    'markdown_to_beamer',
    'convert_markdown_file',
    'parse_markdown',
    'ConversionOptions',
    # HTML export
    'export_presentation',
    'parse_latex',
    'latex_to_html',
    # Linting
    'lint_source',
    'lint_file',
    'LintIssue',
    # Errors
    'SlidesError',
]
