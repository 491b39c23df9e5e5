"""Exception types raised by the toolkit's commands."""


class SlidesError(Exception):
    """Base class for errors reported to the user by the CLI."""


class SourceNotFoundError(SlidesError):
    """No usable source file could be located."""


class EngineNotFoundError(SlidesError):
    """The requested LaTeX engine (or a helper binary) is not installed."""


class BuildError(SlidesError):
    """The typesetting engine exited with a non-zero status."""


class PreviewError(SlidesError):
    """A PDF page could not be rasterized or displayed."""


class ThemeNotFoundError(SlidesError):
    """A custom theme is not present in the theme store."""
