"""
Beamer to HTML Export

Extracts frames from a Beamer document and renders them as a single-page
reveal.js presentation.

Frame bodies are converted by a fixed, ordered sequence of regex
substitutions. This is an approximation, not a LaTeX parser: nested or
unusual markup (a command inside another command's argument, a literal
``\\end{frame}`` inside a listing) may be mis-rendered.
"""

import re
import html
import logging
from pathlib import Path
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple, Union

from .errors import SlidesError
from .from_md import markdown_to_beamer

logger = logging.getLogger(__name__)

TITLE_PATTERN = re.compile(r'\\title\{([^}]+)\}')
AUTHOR_PATTERN = re.compile(r'\\author\{([^}]+)\}')
FRAME_START = re.compile(r'\\begin\{frame\}(?:\[.*?\])?\{')
FRAME_END = '\\end{frame}'
NOTE_START = re.compile(r'^\s*\\note\{')
BOLD_PATTERN = re.compile(r'\\textbf\{([^}]+)\}')

REVEAL_CDN = 'https://cdn.jsdelivr.net/npm/reveal.js@4'
DIAGRAM_PLACEHOLDER = '<p><em>[Diagram - see PDF version]</em></p>'


@dataclass
class HtmlSlide:
    """A frame extracted from LaTeX, with its body already in HTML."""
    title: str
    content: str
    notes: Optional[str] = None


class BodyConverter(Protocol):
    """Converts the body of one frame to an HTML fragment."""

    def convert(self, body: str) -> str:
        ...


# ============================================================
# BODY CONVERSION
# ============================================================

def _listing_to_html(match) -> str:
    return f'<pre><code>{html.escape(match.group(1), quote=False)}</code></pre>'


# Applied in order to the whole frame body.
SUBSTITUTIONS = [
    # Frame options
    (re.compile(r'\[fragile\]'), ''),
    # Lists
    (re.compile(r'\\begin\{itemize\}'), '<ul>'),
    (re.compile(r'\\end\{itemize\}'), '</ul>'),
    (re.compile(r'\\begin\{enumerate\}'), '<ol>'),
    (re.compile(r'\\end\{enumerate\}'), '</ol>'),
    (re.compile(r'\\item(?:\[.*?\])?\s*'), '<li>'),
    # Close li tags (rough heuristic)
    (re.compile(r'<li>([^<]*?)(?=<li>|</ul>|</ol>|\Z)'), r'<li>\1</li>'),
    # Text formatting
    (re.compile(r'\\textbf\{([^}]+)\}'), r'<strong>\1</strong>'),
    (re.compile(r'\\textit\{([^}]+)\}'), r'<em>\1</em>'),
    (re.compile(r'\\texttt\{([^}]+)\}'), r'<code>\1</code>'),
    (re.compile(r'\\emph\{([^}]+)\}'), r'<em>\1</em>'),
    # Code listings
    (re.compile(r'\\begin\{lstlisting\}(?:\[.*?\])?([\s\S]*?)\\end\{lstlisting\}'), _listing_to_html),
    # Layout and size commands
    (re.compile(r'\\centering'), ''),
    (re.compile(r'\\Huge\s*'), ''),
    (re.compile(r'\\Large\s*'), ''),
    # TikZ can't be converted
    (re.compile(r'\\begin\{tikzpicture\}[\s\S]*?\\end\{tikzpicture\}'), DIAGRAM_PLACEHOLDER),
    # Remaining commands: with one argument, then bare
    (re.compile(r'\\[a-zA-Z]+\{[^}]*\}'), ''),
    (re.compile(r'\\[a-zA-Z]+'), ''),
    # Whitespace
    (re.compile(r'\n\s*\n'), '\n'),
    # Escaped special characters
    (re.compile(r'\\([_&%$#{}])'), r'\1'),
]


def latex_to_html(latex: str) -> str:
    """Convert a frame body to HTML with the fixed substitution pipeline."""
    result = latex
    for pattern, replacement in SUBSTITUTIONS:
        result = pattern.sub(replacement, result)
    return result.strip()


class RegexBodyConverter:
    """BodyConverter backed by latex_to_html()."""

    def convert(self, body: str) -> str:
        return latex_to_html(body)


# ============================================================
# EXTRACTION
# ============================================================

def read_braced(text: str, start: int) -> Optional[Tuple[str, int]]:
    """Read a brace-delimited group whose opening brace is at ``start``.

    Escaped braces (``\\{``, ``\\}``) do not count toward nesting.

    Returns:
        Tuple of (inner text, index after the closing brace), or None if
        the group is never closed
    """
    depth = 0
    i = start
    while i < len(text):
        char = text[i]
        if char == '\\':
            i += 2
            continue
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[start + 1:i], i + 1
        i += 1
    return None


def _extract_notes(content: str, pos: int) -> Optional[str]:
    match = NOTE_START.match(content[pos:])
    if not match:
        return None
    group = read_braced(content, pos + match.end() - 1)
    if group is None:
        logger.warning("Unterminated \\note after frame ending at offset %d", pos)
        return None
    return BOLD_PATTERN.sub(r'<strong>\1</strong>', group[0])


def parse_latex(
    content: str,
    converter: Optional[BodyConverter] = None
) -> Tuple[Dict[str, str], List[HtmlSlide]]:
    """Extract metadata and titled frames from a Beamer document.

    Args:
        content: LaTeX source
        converter: Frame body converter (default: RegexBodyConverter)

    Returns:
        Tuple of (metadata dict, list of HtmlSlide)
    """
    converter = converter or RegexBodyConverter()
    meta: Dict[str, str] = {}
    slides: List[HtmlSlide] = []

    title_match = TITLE_PATTERN.search(content)
    if title_match:
        meta['title'] = title_match.group(1)

    author_match = AUTHOR_PATTERN.search(content)
    if author_match:
        meta['author'] = author_match.group(1)

    pos = 0
    while True:
        match = FRAME_START.search(content, pos)
        if not match:
            break

        # Titles may contain escaped or nested braces
        group = read_braced(content, match.end() - 1)
        if group is None:
            logger.warning("Unterminated frame title at offset %d", match.start())
            break
        title, body_start = group

        body_end = content.find(FRAME_END, body_start)
        if body_end == -1:
            logger.warning("Frame at offset %d is never closed", match.start())
            break
        pos = body_end + len(FRAME_END)

        body = converter.convert(content[body_start:body_end])
        notes = _extract_notes(content, pos)
        slides.append(HtmlSlide(title=title, content=body, notes=notes))

    return meta, slides


# ============================================================
# RENDERING
# ============================================================

def plain_text(latex: str) -> str:
    """Render a short LaTeX string (title, author) as escaped HTML text."""
    text = re.sub(r'\\textbackslash\{\}', '\\\\', latex)
    text = re.sub(r'\\([_&%$#{}])', r'\1', text)
    text = re.sub(r'\\[a-zA-Z]+\s*', '', text)
    return html.escape(text.strip(), quote=False)


def generate_reveal_html(meta: Dict[str, str], slides: List[HtmlSlide], theme: str = 'black') -> str:
    """Render slides as a standalone reveal.js page."""
    title = plain_text(meta.get('title') or 'Presentation')
    author = plain_text(meta.get('author') or '')

    sections = []
    for slide in slides:
        notes_html = f'<aside class="notes">{slide.notes}</aside>' if slide.notes else ''
        sections.append(f"""
        <section>
          <h2>{plain_text(slide.title)}</h2>
          {slide.content}
          {notes_html}
        </section>""")
    slides_html = '\n'.join(sections)

    author_html = f'<p>{author}</p>' if author else ''

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <link rel="stylesheet" href="{REVEAL_CDN}/dist/reveal.css">
  <link rel="stylesheet" href="{REVEAL_CDN}/dist/theme/{theme}.css">
  <style>
    .reveal pre {{ font-size: 0.7em; }}
    .reveal code {{ background: rgba(0,0,0,0.1); padding: 0.2em 0.4em; border-radius: 4px; }}
    .reveal pre code {{ background: none; padding: 0; }}
  </style>
</head>
<body>
  <div class="reveal">
    <div class="slides">
      <!-- Title slide -->
      <section>
        <h1>{title}</h1>
        {author_html}
      </section>
{slides_html}
      <!-- End slide -->
      <section>
        <h1>Questions?</h1>
      </section>
    </div>
  </div>
  <script src="{REVEAL_CDN}/dist/reveal.js"></script>
  <script src="{REVEAL_CDN}/plugin/notes/notes.js"></script>
  <script>
    Reveal.initialize({{
      hash: true,
      plugins: [RevealNotes]
    }});
  </script>
</body>
</html>
"""


def export_presentation(
    source_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    theme: str = 'black'
) -> Tuple[Path, int]:
    """Export a .tex (or .md) presentation to reveal.js HTML.

    Markdown sources are converted to Beamer first.

    Args:
        source_path: Input .tex or .md file
        output_path: Output .html path (default: input with .html suffix)
        theme: reveal.js theme name

    Returns:
        Tuple of (output path, number of slides)

    Raises:
        SlidesError: If no titled frames are found
    """
    source_path = Path(source_path)
    output_path = Path(output_path) if output_path else source_path.with_suffix('.html')

    with open(source_path, 'r', encoding='utf-8') as f:
        content = f.read()

    if source_path.suffix.lower() == '.md':
        content, _ = markdown_to_beamer(content)

    meta, slides = parse_latex(content)
    if not slides:
        raise SlidesError(f"No slides found in {source_path}")

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(generate_reveal_html(meta, slides, theme))

    logger.info("Wrote %s (%d slides)", output_path, len(slides))
    return output_path, len(slides)
