"""
LaTeX Text Formatting Utilities

Low-level helpers shared by the Markdown converter:
- emoji replacement and stripping
- escaping of LaTeX control characters
- inline Markdown spans (bold, italic, code) to LaTeX commands
- Markdown table rows to a booktabs tabular block
"""

import re
import logging
from typing import List

logger = logging.getLogger(__name__)

# Emoji with a sensible plain-text stand-in. Applied before stripping.
EMOJI_MAP = {
    '✅': '[OK]',
    '❌': '[X]',
    '⭐': '*',
    '🔥': '[!]',
    '💡': '[i]',
    '⚠️': '[!]',
    '📍': '[>]',
    '🎉': '',
    '🐙': '',
    '✨': '',
    '🚀': '[>]',
    '💰': '[$]',
    '📧': '[email]',
    '📅': '[cal]',
    '🏆': '[#1]',
    '👍': '[+]',
    '👎': '[-]',
    '❤️': '[<3]',
    '🌤️': '',
    '☀️': '',
    '⛅': '',
    '🔴': '[!]',
    '🟡': '[~]',
    '🟢': '[OK]',
    '🔧': '',
    '📋': '',
    '🛒': '',
    '🚗': '',
    '🥾': '',
    '🌲': '',
    '🏠': '',
    '👨‍👩‍👧‍👧': '',
    '🇺🇸': 'US',
    '🇮🇳': 'IN',
}

EMOJI_PATTERN = re.compile(
    '['
    '\U0001F300-\U0001F9FF'   # symbols & pictographs, supplemental
    '\u2600-\u26FF'           # misc symbols
    '\u2700-\u27BF'           # dingbats
    '\U0001F600-\U0001F64F'   # emoticons
    '\U0001F680-\U0001F6FF'   # transport & map
    '\U0001F1E0-\U0001F1FF'   # regional indicators
    '\uFE0F\u200D'            # variation selector, zero-width joiner
    ']'
)

# Order matters: backslash first, then the single-character escapes.
LATEX_ESCAPES = {
    '\\': r'\textbackslash{}',
    '_': r'\_',
    '&': r'\&',
    '%': r'\%',
    '$': r'\$',
    '#': r'\#',
    '{': r'\{',
    '}': r'\}',
    '~': r'\textasciitilde{}',
    '^': r'\textasciicircum{}',
}

_ESCAPE_PATTERN = re.compile('|'.join(re.escape(c) for c in LATEX_ESCAPES))

_BOLD = re.compile(r'\*\*(.+?)\*\*')
_ITALIC = re.compile(r'\*(.+?)\*')
_CODE = re.compile(r'`(.+?)`')


def handle_emojis(text: str) -> str:
    """Replace known emoji with text equivalents and strip the rest."""
    for emoji, replacement in EMOJI_MAP.items():
        text = text.replace(emoji, replacement)
    return EMOJI_PATTERN.sub('', text)


def escape_latex(text: str) -> str:
    """Escape LaTeX control characters in plain text.

    All substitutions happen in a single pass, so the braces introduced by
    ``\\textbackslash{}`` are never escaped a second time.

    Args:
        text: Plain text, possibly containing emoji

    Returns:
        Text safe to embed in a LaTeX document
    """
    text = handle_emojis(text)
    return _ESCAPE_PATTERN.sub(lambda m: LATEX_ESCAPES[m.group(0)], text)


def format_inline_markdown(text: str) -> str:
    """Convert **bold**, *italic* and `code` spans to LaTeX commands.

    Expects text that has already been through escape_latex(); the commands
    it injects are left untouched.
    """
    text = _BOLD.sub(r'\\textbf{\1}', text)
    text = _ITALIC.sub(r'\\textit{\1}', text)
    return _CODE.sub(r'\\texttt{\1}', text)


def format_text(text: str) -> str:
    """Escape then apply inline formatting."""
    return format_inline_markdown(escape_latex(text))


def split_table_row(line: str) -> List[str]:
    """Split a pipe-delimited Markdown row into trimmed cells.

    The empty cells produced by the leading and trailing pipes are dropped.
    """
    row = line.strip()
    if row.startswith('|'):
        row = row[1:]
    if row.endswith('|'):
        row = row[:-1]
    return [cell.strip() for cell in row.split('|')]


def render_table(rows: List[List[str]]) -> str:
    """Render table rows as a centered booktabs tabular block.

    The first row is the header and is set in bold. Every row is padded or
    truncated to the header's column count.

    Args:
        rows: List of rows, each a list of cell strings

    Returns:
        LaTeX source, or an empty string when there are no rows
    """
    rows = [row for row in rows if row]
    if not rows:
        return ''

    num_cols = len(rows[0])
    col_spec = 'l' * num_cols

    lines = [
        r'\begin{center}',
        f'\\begin{{tabular}}{{{col_spec}}}',
        r'\toprule',
    ]

    header = ' & '.join(f'\\textbf{{{format_text(c)}}}' for c in rows[0])
    lines.append(f'{header} \\\\')
    lines.append(r'\midrule')

    for row in rows[1:]:
        if len(row) > num_cols:
            logger.warning("Table row has %d cells, expected %d; extra cells dropped", len(row), num_cols)
            row = row[:num_cols]
        elif len(row) < num_cols:
            row = row + [''] * (num_cols - len(row))
        lines.append(' & '.join(format_text(c) for c in row) + ' \\\\')

    lines.extend([
        r'\bottomrule',
        r'\end{tabular}',
        r'\end{center}',
    ])
    return '\n'.join(lines)
