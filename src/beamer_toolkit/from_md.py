"""
Markdown to Beamer Conversion

Turns a Markdown outline into a complete Beamer document:
- YAML-style frontmatter (title, author, date, theme, colorTheme, aspectRatio)
- ``## Heading`` or ``---`` starts a new slide, ``# Heading`` sets the title
- ``Note:`` / ``Notes:`` lines start speaker notes for the current slide
- bullet and numbered lists, ``###`` / ``####`` subheadings
- fenced code blocks (``mermaid`` fences become TikZ diagrams)
- pipe tables
"""

import re
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from .config.schema import normalize_aspect_ratio
from .diagram import mermaid_to_tikz
from .formatting import escape_latex, format_text, render_table, split_table_row

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = '---'
SLIDE_BREAK = '---'
CODE_FENCE = '```'
NOTE_MARKERS = ('Note:', 'Notes:')

FRONTMATTER_LINE = re.compile(r'^(\w+):\s*(.+)$')
TABLE_SEPARATOR = re.compile(r'^\|[\s\-:|]*-[\s\-:|]*$')
BULLET_ITEM = re.compile(r'^\s*[-*]\s')
NUMBERED_ITEM = re.compile(r'^\s*\d+\.\s')


@dataclass
class Slide:
    """A slide parsed from Markdown."""
    title: str = ''
    content: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    def has_notes(self) -> bool:
        return any(n.strip() for n in self.notes)

    def is_blank(self) -> bool:
        return not any(line.strip() for line in self.content) and not self.has_notes()


@dataclass
class ConversionOptions:
    """Defaults used when the frontmatter does not say otherwise."""
    theme: str = 'Madrid'
    color_theme: str = 'dolphin'
    aspect_ratio: str = '169'


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in '"\'':
        return value[1:-1]
    return value


# ============================================================
# PARSING
# ============================================================

def parse_markdown(md: str) -> Tuple[Dict[str, str], List[Slide]]:
    """Split Markdown into document metadata and slides.

    Args:
        md: Markdown source

    Returns:
        Tuple of (metadata dict, list of Slide)
    """
    meta: Dict[str, str] = {}
    slides: List[Slide] = []

    current: Optional[Slide] = None
    # Slides opened by a bare '---' are only kept if they collect something
    current_is_explicit = False
    in_frontmatter = False
    in_code_block = False
    in_notes = False

    def close_slide():
        if current is None:
            return
        if current_is_explicit or not current.is_blank():
            slides.append(current)

    for i, line in enumerate(md.splitlines()):
        if i == 0 and line.strip() == FRONTMATTER_DELIMITER:
            in_frontmatter = True
            continue

        if in_frontmatter:
            if line.strip() == FRONTMATTER_DELIMITER:
                in_frontmatter = False
                continue
            match = FRONTMATTER_LINE.match(line)
            if match:
                meta[match.group(1)] = _unquote(match.group(2))
            elif line.strip():
                logger.debug("Ignoring frontmatter line %d: %r", i + 1, line)
            continue

        if line.startswith(CODE_FENCE):
            in_code_block = not in_code_block

        if not in_code_block:
            if line.strip() == SLIDE_BREAK:
                close_slide()
                current = Slide()
                current_is_explicit = False
                in_notes = False
                continue

            if line.startswith(NOTE_MARKERS):
                in_notes = True
                # Text after the marker on the same line is the first note
                remainder = line.split(':', 1)[1].strip()
                if remainder and current is not None:
                    current.notes.append(remainder)
                continue

            if line.startswith('## '):
                close_slide()
                current = Slide(title=line[3:].strip())
                current_is_explicit = True
                in_notes = False
                continue

            if line.startswith('# '):
                meta.setdefault('title', line[2:].strip())
                continue

        if current is not None:
            if in_notes:
                current.notes.append(line)
            else:
                current.content.append(line)

    close_slide()

    if in_frontmatter:
        logger.warning("Frontmatter block was never closed")

    return meta, slides


# ============================================================
# SLIDE BODY CONVERSION
# ============================================================

def _render_code_block(language: str, code_lines: List[str]) -> List[str]:
    start, end = 0, len(code_lines)
    while start < end and not code_lines[start].strip():
        start += 1
    while end > start and not code_lines[end - 1].strip():
        end -= 1
    if start == end:
        return []
    code = '\n'.join(code_lines[start:end])
    if language == 'mermaid':
        return [r'\centering', mermaid_to_tikz(code)]
    return [
        f'\\begin{{lstlisting}}[language={language}]',
        code,
        r'\end{lstlisting}',
    ]


def md_to_latex(lines: List[str]) -> str:
    """Convert the Markdown body of one slide to LaTeX.

    Args:
        lines: Raw content lines of a slide

    Returns:
        LaTeX source for the frame body
    """
    result: List[str] = []
    list_kind: Optional[str] = None  # 'itemize' | 'enumerate'
    in_code_block = False
    code_language = ''
    code_lines: List[str] = []
    in_table = False
    table_rows: List[List[str]] = []

    def close_list():
        nonlocal list_kind
        if list_kind:
            result.append(f'\\end{{{list_kind}}}')
            list_kind = None

    def open_list(kind: str):
        nonlocal list_kind
        if list_kind != kind:
            close_list()
            result.append(f'\\begin{{{kind}}}')
            list_kind = kind

    for line in lines:
        # Code blocks
        if in_code_block:
            if line.startswith(CODE_FENCE):
                in_code_block = False
                result.extend(_render_code_block(code_language, code_lines))
            else:
                code_lines.append(line)
            continue

        # Tables
        if '|' in line and line.strip().startswith('|'):
            if TABLE_SEPARATOR.match(line.strip()):
                continue
            if not in_table:
                close_list()
                in_table = True
                table_rows = []
            table_rows.append(split_table_row(line))
            continue
        elif in_table:
            in_table = False
            result.append(render_table(table_rows))
            table_rows = []

        if line.startswith(CODE_FENCE):
            close_list()
            in_code_block = True
            code_language = line[3:].strip() or 'text'
            code_lines = []
            continue

        if line.strip() == '':
            close_list()
            result.append('')
            continue

        if BULLET_ITEM.match(line):
            open_list('itemize')
            text = BULLET_ITEM.sub('', line, count=1).strip()
            result.append(f'  \\item {format_text(text)}')
            continue

        if NUMBERED_ITEM.match(line):
            open_list('enumerate')
            text = NUMBERED_ITEM.sub('', line, count=1).strip()
            result.append(f'  \\item {format_text(text)}')
            continue

        close_list()

        if line.startswith('#### '):
            result.append(f'\\textbf{{{escape_latex(line[5:].strip())}}}')
            result.append('')
            continue
        if line.startswith('### '):
            result.append(f'\\textbf{{\\large {escape_latex(line[4:].strip())}}}')
            result.append('')
            continue

        result.append(format_text(line))

    close_list()

    if in_table and table_rows:
        result.append(render_table(table_rows))

    if in_code_block:
        logger.warning("Unterminated code block; flushing %d line(s)", len(code_lines))
        result.extend(_render_code_block(code_language, code_lines))

    return '\n'.join(result)


# ============================================================
# DOCUMENT ASSEMBLY
# ============================================================

PREAMBLE = r"""\usepackage{listings}
\usepackage{tikz}
\usepackage{booktabs}
\usetikzlibrary{shapes,arrows,positioning}

\lstset{
  basicstyle=\ttfamily\small,
  breaklines=true,
  frame=single,
  backgroundcolor=\color{gray!10}
}
"""

CLOSING_FRAME = r"""\begin{frame}
  \centering
  \Huge Questions?
\end{frame}
"""


def generate_latex(
    meta: Dict[str, str],
    slides: List[Slide],
    options: Optional[ConversionOptions] = None
) -> str:
    """Assemble a full Beamer document.

    Args:
        meta: Document metadata; wins over options
        slides: Parsed slides
        options: Default theme settings

    Returns:
        LaTeX source of the complete document
    """
    options = options or ConversionOptions()

    title = meta.get('title', 'Presentation')
    author = meta.get('author', '')
    date = meta.get('date', r'\today')
    theme = meta.get('theme', options.theme)
    color_theme = meta.get('colorTheme', options.color_theme)
    aspect_ratio = options.aspect_ratio
    if 'aspectRatio' in meta:
        try:
            aspect_ratio = normalize_aspect_ratio(meta['aspectRatio'])
        except ValueError:
            logger.warning("Ignoring aspectRatio %r; using %s", meta['aspectRatio'], options.aspect_ratio)

    has_notes = any(s.has_notes() for s in slides)

    parts = [
        f'\\documentclass[aspectratio={aspect_ratio}]{{beamer}}',
        f'\\usetheme{{{theme}}}',
        f'\\usecolortheme{{{color_theme}}}',
    ]
    if has_notes:
        parts.append(r'\usepackage{pgfpages}')
        parts.append(r'\setbeameroption{show notes on second screen=right}')
    parts.append('')
    parts.append(PREAMBLE)
    parts.extend([
        f'\\title{{{escape_latex(title)}}}',
        f'\\author{{{escape_latex(author)}}}',
        f'\\date{{{date}}}',
        '',
        r'\begin{document}',
        '',
        r'\begin{frame}',
        r'  \titlepage',
        r'\end{frame}',
        '',
    ])

    for slide in slides:
        content = md_to_latex(slide.content)
        frame_opt = '[fragile]' if r'\begin{lstlisting}' in content else ''

        parts.append(f'\\begin{{frame}}{frame_opt}{{{escape_latex(slide.title)}}}')
        parts.append(content)
        parts.append(r'\end{frame}')

        if slide.has_notes():
            notes = '\n'.join(format_text(n) for n in slide.notes if n.strip())
            parts.append(f'\\note{{{notes}}}')
        parts.append('')

    parts.append(CLOSING_FRAME)
    parts.append(r'\end{document}')
    return '\n'.join(parts) + '\n'


def markdown_to_beamer(md: str, options: Optional[ConversionOptions] = None) -> Tuple[str, int]:
    """Convert Markdown source to Beamer source.

    Returns:
        Tuple of (LaTeX source, number of slides)
    """
    meta, slides = parse_markdown(md)
    return generate_latex(meta, slides, options), len(slides)


def convert_markdown_file(
    md_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    options: Optional[ConversionOptions] = None
) -> Tuple[Path, int]:
    """Convert a Markdown file and write the .tex next to it.

    Args:
        md_path: Markdown input
        output_path: Output .tex path (default: input with .tex suffix)
        options: Default theme settings

    Returns:
        Tuple of (output path, number of slides)
    """
    md_path = Path(md_path)
    output_path = Path(output_path) if output_path else md_path.with_suffix('.tex')

    with open(md_path, 'r', encoding='utf-8') as f:
        md = f.read()

    latex, slide_count = markdown_to_beamer(md, options)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(latex)

    logger.info("Wrote %s (%d slides)", output_path, slide_count)
    return output_path, slide_count
