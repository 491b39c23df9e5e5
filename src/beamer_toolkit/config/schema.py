"""
Configuration Schema for Beamer Toolkit

Pydantic models for the per-project settings file (slides.yaml) and for
custom themes saved in the user's theme store.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator


SUPPORTED_ENGINES = ['tectonic', 'pdflatex', 'xelatex', 'lualatex']

# Beamer aspectratio option values
ASPECT_RATIOS = ['1610', '169', '149', '141', '54', '43', '32']


def normalize_aspect_ratio(value) -> str:
    """Accept '16:9', '16/9', 169 and return Beamer's '169' form."""
    normalized = str(value).replace(':', '').replace('/', '').strip()
    if normalized not in ASPECT_RATIOS:
        raise ValueError(f"Unsupported aspect ratio: {value}. Use one of {', '.join(ASPECT_RATIOS)}")
    return normalized


class ProjectConfig(BaseModel):
    """Per-project settings read from slides.yaml."""

    name: Optional[str] = Field(None, description="Presentation name")
    theme: str = Field("Madrid", description="Beamer presentation theme")
    color_theme: str = Field("dolphin", alias="colorTheme", description="Beamer color theme")
    aspect_ratio: str = Field("169", alias="aspectRatio", description="Beamer aspect ratio option")
    engine: str = Field("tectonic", description="LaTeX engine used by build and watch")

    model_config = {'populate_by_name': True}

    @field_validator('aspect_ratio', mode='before')
    @classmethod
    def normalize_ratio(cls, v):
        return normalize_aspect_ratio(v)

    @field_validator('engine')
    @classmethod
    def check_engine(cls, v):
        if v not in SUPPORTED_ENGINES:
            raise ValueError(f"Unknown engine: {v}. Supported: {', '.join(SUPPORTED_ENGINES)}")
        return v


class CustomTheme(BaseModel):
    """A named combination of base theme, color theme and aspect ratio."""

    name: str = Field(description="Theme name")
    base_theme: str = Field(description="Beamer presentation theme")
    color_theme: str = Field(description="Beamer color theme")
    aspect_ratio: str = Field("169", description="Beamer aspect ratio option")

    @field_validator('aspect_ratio', mode='before')
    @classmethod
    def normalize_ratio(cls, v):
        return normalize_aspect_ratio(v)
