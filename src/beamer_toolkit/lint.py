"""
Beamer Structural Linter

Static checks that catch the mistakes which make a LaTeX build fail (or
produce a subtly broken deck) before the engine is ever invoked:

- missing \\documentclass, \\begin{document}, \\end{document}
- unbalanced braces
- unbalanced or mismatched environments
- frames without a title (warning)
- unescaped underscores in text (warning)

Every rule is independent; results are merged and sorted by line number.
Only error-severity issues fail a lint run.
"""

import re
from pathlib import Path
from dataclasses import dataclass, asdict
from typing import Any, Callable, Dict, List, Union

ERROR = 'error'
WARNING = 'warning'

SEVERITY_ICONS = {
    ERROR: '✗',
    WARNING: '⚠',
}

ENVIRONMENT_PATTERN = re.compile(r'\\(begin|end)\{([\w*]+)\}')
FRAME_BEGIN_PATTERN = re.compile(r'\\begin\{frame\}(?:\[([^\]]*)\])?(.*)$')
EXEMPT_FRAME_OPTIONS = {'fragile', 'plain', 'standout'}
VERBATIM_BEGIN = (r'\begin{lstlisting}', r'\begin{verbatim}')
VERBATIM_END = (r'\end{lstlisting}', r'\end{verbatim}')

# Spans whose underscores are legitimate, removed in this order
UNDERSCORE_SAFE_SPANS = [
    re.compile(r'\$\$[^$]+\$\$'),
    re.compile(r'\$[^$]+\$'),
    re.compile(r'\\texttt\{[^}]+\}'),
    re.compile(r'\\(?:url|href|label|ref|cite|includegraphics|input|include)(?:\[[^\]]*\])?\{[^}]*\}'),
    re.compile(r'\\_'),
    re.compile(r'\\[a-zA-Z]+'),
]


@dataclass(frozen=True)
class LintIssue:
    line: int
    severity: str     # "error" | "warning"
    message: str
    rule: str


def strip_comment(line: str) -> str:
    """Drop everything from the first unescaped % to the end of the line."""
    i = 0
    while i < len(line):
        if line[i] == '\\':
            i += 2
            continue
        if line[i] == '%':
            return line[:i]
        i += 1
    return line


# ============================================================
# RULES
# ============================================================

def check_document_class(content: str, lines: List[str]) -> List[LintIssue]:
    if '\\documentclass' not in content:
        return [LintIssue(1, ERROR, 'Missing \\documentclass', 'document-class')]
    return []


def check_begin_document(content: str, lines: List[str]) -> List[LintIssue]:
    if '\\begin{document}' not in content:
        return [LintIssue(1, ERROR, 'Missing \\begin{document}', 'begin-document')]
    return []


def check_end_document(content: str, lines: List[str]) -> List[LintIssue]:
    if '\\end{document}' not in content:
        return [LintIssue(1, ERROR, 'Missing \\end{document}', 'end-document')]
    return []


def check_brace_balance(content: str, lines: List[str]) -> List[LintIssue]:
    """Count { and } outside comments, ignoring escaped braces.

    A stray } is reported on its line and the count resets to zero, so one
    mistake does not cascade through the rest of the file.
    """
    issues = []
    depth = 0

    for idx, line in enumerate(lines):
        active = strip_comment(line)
        i = 0
        while i < len(active):
            char = active[i]
            if char == '\\':
                i += 2
                continue
            if char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth < 0:
                    issues.append(LintIssue(idx + 1, ERROR, 'Unmatched closing brace }', 'brace-balance'))
                    depth = 0
            i += 1

    if depth > 0:
        issues.append(LintIssue(len(lines), ERROR, f'{depth} unclosed brace(s) {{', 'brace-balance'))

    return issues


def check_environment_balance(content: str, lines: List[str]) -> List[LintIssue]:
    issues = []
    stack = []  # (name, line)

    for idx, line in enumerate(lines):
        for match in ENVIRONMENT_PATTERN.finditer(strip_comment(line)):
            kind, name = match.groups()
            if kind == 'begin':
                stack.append((name, idx + 1))
                continue

            if not stack:
                issues.append(LintIssue(
                    idx + 1, ERROR,
                    f'\\end{{{name}}} without matching \\begin',
                    'env-balance',
                ))
                continue

            open_name, open_line = stack.pop()
            if open_name != name:
                issues.append(LintIssue(
                    idx + 1, ERROR,
                    f"\\end{{{name}}} doesn't match \\begin{{{open_name}}} from line {open_line}",
                    'env-balance',
                ))

    for name, line_num in stack:
        issues.append(LintIssue(line_num, ERROR, f'\\begin{{{name}}} never closed', 'env-balance'))

    return issues


def check_frame_titles(content: str, lines: List[str]) -> List[LintIssue]:
    """Warn about frames with no title.

    Only the line right after \\begin{frame} is inspected for \\frametitle
    or \\titlepage.
    """
    issues = []

    for idx, line in enumerate(lines):
        match = FRAME_BEGIN_PATTERN.search(strip_comment(line))
        if not match:
            continue

        options, rest = match.groups()
        if rest.lstrip().startswith('{'):
            continue

        next_line = lines[idx + 1] if idx + 1 < len(lines) else ''
        if '\\frametitle' in next_line or '\\titlepage' in next_line:
            continue

        option_names = {opt.strip() for opt in (options or '').split(',')}
        if option_names & EXEMPT_FRAME_OPTIONS:
            continue

        issues.append(LintIssue(idx + 1, WARNING, 'Frame without title', 'frame-title'))

    return issues


def check_underscores(content: str, lines: List[str]) -> List[LintIssue]:
    """Heuristic check for _ outside math, \\texttt and verbatim blocks."""
    issues = []
    in_verbatim = False

    for idx, line in enumerate(lines):
        if any(marker in line for marker in VERBATIM_BEGIN):
            in_verbatim = True
        if any(marker in line for marker in VERBATIM_END):
            in_verbatim = False
        if in_verbatim:
            continue

        stripped = strip_comment(line)
        for pattern in UNDERSCORE_SAFE_SPANS:
            stripped = pattern.sub('', stripped)

        if '_' in stripped:
            issues.append(LintIssue(
                idx + 1, WARNING,
                'Unescaped underscore (use \\_ or $var_x$)',
                'underscore',
            ))

    return issues


RULES: List[Callable[[str, List[str]], List[LintIssue]]] = [
    check_document_class,
    check_begin_document,
    check_end_document,
    check_brace_balance,
    check_environment_balance,
    check_frame_titles,
    check_underscores,
]


# ============================================================
# RUNNING AND REPORTING
# ============================================================

def lint_source(content: str) -> List[LintIssue]:
    """Run every rule over LaTeX source.

    Args:
        content: LaTeX source

    Returns:
        Issues sorted by line (ties keep rule order)
    """
    lines = content.split('\n')
    issues: List[LintIssue] = []
    for rule in RULES:
        issues.extend(rule(content, lines))
    return sorted(issues, key=lambda issue: issue.line)


def lint_file(tex_path: Union[str, Path]) -> List[LintIssue]:
    """Lint a .tex file."""
    with open(tex_path, 'r', encoding='utf-8') as f:
        return lint_source(f.read())


def has_errors(issues: List[LintIssue]) -> bool:
    return any(issue.severity == ERROR for issue in issues)


def format_issue(issue: LintIssue, filename: str) -> str:
    """Format an issue as '<icon> <file>:<line> <message> (<rule>)'."""
    icon = SEVERITY_ICONS[issue.severity]
    return f'{icon} {filename}:{issue.line} {issue.message} ({issue.rule})'


def format_summary(issues: List[LintIssue]) -> str:
    errors = sum(1 for i in issues if i.severity == ERROR)
    warnings = sum(1 for i in issues if i.severity == WARNING)
    return f'{errors} error(s), {warnings} warning(s)'


def get_lint_json(issues: List[LintIssue], filename: str) -> Dict[str, Any]:
    """Convert lint results to a JSON-serializable dict."""
    return {
        'file': filename,
        'errors': sum(1 for i in issues if i.severity == ERROR),
        'warnings': sum(1 for i in issues if i.severity == WARNING),
        'passed': not has_errors(issues),
        'issues': [asdict(issue) for issue in issues],
    }
