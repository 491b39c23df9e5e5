"""
Terminal PDF Preview

Rasterizes PDF pages with pdftoppm and shows them with whichever terminal
image viewer is installed (timg, chafa, kitty icat, viu).
"""

import re
import shutil
import logging
import tempfile
import subprocess
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import EngineNotFoundError, PreviewError

logger = logging.getLogger(__name__)


@dataclass
class Viewer:
    cmd: str
    check: List[str]
    args: List[str] = field(default_factory=list)


# In order of preference
VIEWERS = [
    Viewer('timg', ['timg', '--version']),
    Viewer('chafa', ['chafa', '--version'], ['--size', '80']),
    Viewer('kitty', ['kitty', '+kitten', 'icat', '--help'], ['+kitten', 'icat']),
    Viewer('viu', ['viu', '--version']),
]

THUMBNAIL_WIDTH = 400


def find_image_viewer() -> Optional[Viewer]:
    """Return the first terminal image viewer that runs, or None."""
    for viewer in VIEWERS:
        if shutil.which(viewer.cmd) is None:
            continue
        result = subprocess.run(viewer.check, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL, check=False)
        if result.returncode == 0:
            return viewer
    return None


def candidate_image_paths(prefix: Path, page: int) -> List[Path]:
    """Possible pdftoppm output names for ``page``.

    pdftoppm zero-pads the page number to the width of the document's page
    count, and some versions always name a single-page export ``-1``.
    """
    names = [f'{prefix.name}-{page}.png']
    names.extend(f'{prefix.name}-{page:0{width}d}.png' for width in (2, 3, 4))
    names.append(f'{prefix.name}-1.png')

    seen = []
    for name in names:
        path = prefix.parent / name
        if path not in seen:
            seen.append(path)
    return seen


def get_page_count(pdf_file: Path) -> int:
    """Read the page count with pdfinfo (1 if unavailable)."""
    if shutil.which('pdfinfo') is None:
        return 1
    result = subprocess.run(['pdfinfo', str(pdf_file)], capture_output=True, text=True, check=False)
    match = re.search(r'^Pages:\s+(\d+)', result.stdout, re.MULTILINE)
    return int(match.group(1)) if match else 1


def render_page(pdf_file: Path, page: int, width: int, work_dir: Path) -> Path:
    """Rasterize one page to PNG and return the image path."""
    logger.debug("Rendering page %d of %s at %dpx", page, pdf_file, width)
    prefix = work_dir / f'preview-{page}'
    result = subprocess.run(
        ['pdftoppm', '-png', '-f', str(page), '-l', str(page), '-scale-to', str(width), str(pdf_file), str(prefix)],
        capture_output=True,
        check=False,
    )
    if result.returncode != 0:
        raise PreviewError(f'Error converting page {page} of {pdf_file} to an image')

    for candidate in candidate_image_paths(prefix, page):
        if candidate.exists():
            return candidate
    raise PreviewError(f'Could not find converted image for page {page}')


def display_image(image: Path, viewer: Viewer) -> None:
    result = subprocess.run([viewer.cmd, *viewer.args, str(image)], check=False)
    if result.returncode != 0:
        raise PreviewError(f'Error displaying image with {viewer.cmd}')


def preview_document(pdf_file: Path, page: int = 1, show_all: bool = False, width: int = 800) -> int:
    """Show one page (or every page as thumbnails) in the terminal.

    Returns:
        Number of pages displayed

    Raises:
        EngineNotFoundError: If pdftoppm or a viewer is missing
        PreviewError: If rasterizing or displaying fails
    """
    if shutil.which('pdftoppm') is None:
        raise EngineNotFoundError('pdftoppm not found. Install with: apt install poppler-utils')

    viewer = find_image_viewer()
    if viewer is None:
        raise EngineNotFoundError('No terminal image viewer found. Install one of: timg, chafa, viu')

    print(f'Previewing {pdf_file} with {viewer.cmd}...')

    with tempfile.TemporaryDirectory(prefix='beamer-preview-') as tmpdir:
        work_dir = Path(tmpdir)

        if not show_all:
            display_image(render_page(pdf_file, page, width, work_dir), viewer)
            return 1

        page_count = get_page_count(pdf_file)
        print(f'{page_count} slides\n')
        for i in range(1, page_count + 1):
            print(f'--- Slide {i} ---')
            display_image(render_page(pdf_file, i, min(width, THUMBNAIL_WIDTH), work_dir), viewer)
            print()
        return page_count
