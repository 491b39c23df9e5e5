"""
LaTeX Engine Invocation

Compiles a .tex file with tectonic, pdflatex, xelatex or lualatex. The only
contract with the engine: exit status 0 means success, and the PDF lands
next to the source with the .pdf suffix.
"""

import time
import shutil
import logging
import subprocess
from pathlib import Path
from dataclasses import dataclass
from typing import List, Optional, Union

from .config import SUPPORTED_ENGINES
from .errors import BuildError, EngineNotFoundError

logger = logging.getLogger(__name__)

INSTALL_HINTS = {
    'tectonic': 'curl --proto "=https" --tlsv1.2 -fsSL https://drop-sh.fullyjustified.net | sh',
    'pdflatex': 'apt install texlive-latex-base texlive-fonts-recommended',
    'xelatex': 'apt install texlive-xetex',
    'lualatex': 'apt install texlive-luatex',
}


@dataclass
class BuildResult:
    pdf_path: Path
    elapsed: float


def engine_command(engine: str, tex_file: Path) -> List[str]:
    """Build the argv for compiling ``tex_file`` with ``engine``."""
    if engine == 'tectonic':
        return ['tectonic', tex_file.name]
    if engine in SUPPORTED_ENGINES:
        return [engine, '-interaction=nonstopmode', tex_file.name]
    raise BuildError(f'Unknown engine: {engine}. Supported: {", ".join(SUPPORTED_ENGINES)}')


def check_engine(engine: str) -> None:
    """Raise EngineNotFoundError (with an install hint) if ``engine`` is not on PATH."""
    if shutil.which(engine) is None:
        hint = INSTALL_HINTS.get(engine, '')
        message = f"'{engine}' not found"
        if hint:
            message += f'. Install with:\n  {hint}'
        raise EngineNotFoundError(message)


def build_document(
    tex_file: Union[str, Path],
    engine: str = 'tectonic',
    output: Optional[Union[str, Path]] = None
) -> BuildResult:
    """Compile a .tex file to PDF.

    Args:
        tex_file: Source file
        engine: One of SUPPORTED_ENGINES
        output: Optional destination for the PDF

    Returns:
        BuildResult with the PDF path and elapsed seconds

    Raises:
        EngineNotFoundError: If the engine is not installed
        BuildError: If the engine fails
    """
    tex_file = Path(tex_file)
    cmd = engine_command(engine, tex_file)
    check_engine(engine)

    logger.debug("Running %s in %s", ' '.join(cmd), tex_file.parent)
    start = time.monotonic()
    result = subprocess.run(cmd, cwd=tex_file.parent, check=False)
    elapsed = time.monotonic() - start

    if result.returncode != 0:
        raise BuildError(f'{engine} exited with status {result.returncode}')

    pdf_path = tex_file.with_suffix('.pdf')
    if output:
        output = Path(output)
        shutil.move(str(pdf_path), str(output))
        pdf_path = output

    return BuildResult(pdf_path=pdf_path, elapsed=elapsed)
