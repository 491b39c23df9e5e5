"""Locate the source file a command should operate on."""

from pathlib import Path
from typing import List, Optional, Sequence, Union

from .errors import SourceNotFoundError


def _require(path: Union[str, Path]) -> Path:
    path = Path(path)
    if not path.exists():
        raise SourceNotFoundError(f"File '{path}' not found")
    return path


def _preferred(directory: Path, suffix: str) -> List[Path]:
    return [directory / f'{directory.name}{suffix}', directory / f'main{suffix}']


def find_tex_file(file: Optional[Union[str, Path]] = None, directory: Optional[Path] = None) -> Path:
    """Resolve the .tex file for build/lint/watch.

    Without an explicit file: the only .tex in the directory, else
    ``<dirname>.tex`` or ``main.tex``.

    Raises:
        SourceNotFoundError: If nothing (or nothing unambiguous) is found
    """
    if file:
        return _require(file)

    directory = Path(directory or Path.cwd())
    tex_files = sorted(directory.glob('*.tex'))

    if not tex_files:
        raise SourceNotFoundError(f'No .tex files found in {directory}')
    if len(tex_files) == 1:
        return tex_files[0]

    for candidate in _preferred(directory, '.tex'):
        if candidate in tex_files:
            return candidate

    names = ', '.join(p.name for p in tex_files)
    raise SourceNotFoundError(f'Multiple .tex files found: {names}. Specify one explicitly.')


def find_first_existing(
    file: Optional[Union[str, Path]],
    candidates: Sequence[Path],
    description: str
) -> Path:
    """Return ``file`` if given, else the first candidate that exists."""
    if file:
        return _require(file)
    for candidate in candidates:
        if candidate.exists():
            return candidate
    raise SourceNotFoundError(f'No {description} file found')


def find_export_source(file: Optional[Union[str, Path]] = None, directory: Optional[Path] = None) -> Path:
    """Resolve the source for export: ``<dirname>.tex``, ``main.tex``, ``<dirname>.md``."""
    directory = Path(directory or Path.cwd())
    candidates = _preferred(directory, '.tex') + [directory / f'{directory.name}.md']
    return find_first_existing(file, candidates, '.tex or .md')


def find_pdf_file(file: Optional[Union[str, Path]] = None, directory: Optional[Path] = None) -> Path:
    """Resolve the PDF for preview: ``<dirname>.pdf``, ``main.pdf``, else the only PDF."""
    if file:
        return _require(file)

    directory = Path(directory or Path.cwd())
    for candidate in _preferred(directory, '.pdf'):
        if candidate.exists():
            return candidate

    pdfs = sorted(directory.glob('*.pdf'))
    if not pdfs:
        raise SourceNotFoundError('No PDF files found. Run `slides build` first.')
    if len(pdfs) > 1:
        names = ', '.join(p.name for p in pdfs)
        raise SourceNotFoundError(f'Multiple PDFs found: {names}. Specify one explicitly.')
    return pdfs[0]
