"""Tests for terminal PDF preview helpers."""

import subprocess
from pathlib import Path

import pytest

from beamer_toolkit import preview
from beamer_toolkit.errors import EngineNotFoundError, PreviewError
from beamer_toolkit.preview import (
    candidate_image_paths,
    find_image_viewer,
    get_page_count,
    preview_document,
    render_page,
)


def test_candidate_image_paths():
    """Test that both plain and zero-padded names are tried."""
    names = [p.name for p in candidate_image_paths(Path("/tmp/preview-3"), 3)]
    assert names[0] == "preview-3-3.png"
    assert "preview-3-03.png" in names
    assert "preview-3-003.png" in names
    assert names[-1] == "preview-3-1.png"
    assert len(names) == len(set(names))


def test_render_page_finds_padded_image(tmp_path, monkeypatch):
    """Test that a zero-padded pdftoppm output is found."""
    def run(cmd, **kwargs):
        (tmp_path / "preview-2-02.png").write_bytes(b"png")
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(preview.subprocess, "run", run)
    image = render_page(Path("deck.pdf"), 2, 400, tmp_path)
    assert image == tmp_path / "preview-2-02.png"


def test_render_page_failure(tmp_path, monkeypatch):
    """Test that a pdftoppm failure raises PreviewError."""
    monkeypatch.setattr(preview.subprocess, "run", lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1))
    with pytest.raises(PreviewError):
        render_page(Path("deck.pdf"), 1, 400, tmp_path)


def test_get_page_count(monkeypatch):
    """Test page count parsing from pdfinfo."""
    output = "Title:   Deck\nPages:          12\nEncrypted: no\n"
    monkeypatch.setattr(preview.shutil, "which", lambda cmd: f"/usr/bin/{cmd}")
    monkeypatch.setattr(
        preview.subprocess, "run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, stdout=output),
    )
    assert get_page_count(Path("deck.pdf")) == 12


def test_get_page_count_without_pdfinfo(monkeypatch):
    """Test the fallback when pdfinfo is missing."""
    monkeypatch.setattr(preview.shutil, "which", lambda cmd: None)
    assert get_page_count(Path("deck.pdf")) == 1


def test_find_image_viewer_prefers_first_available(monkeypatch):
    """Test viewer selection order."""
    monkeypatch.setattr(preview.shutil, "which", lambda cmd: "/usr/bin/chafa" if cmd in ("chafa", "viu") else None)
    monkeypatch.setattr(preview.subprocess, "run", lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0))
    assert find_image_viewer().cmd == "chafa"


def test_preview_requires_pdftoppm(monkeypatch):
    """Test that a missing pdftoppm is reported."""
    monkeypatch.setattr(preview.shutil, "which", lambda cmd: None)
    with pytest.raises(EngineNotFoundError):
        preview_document(Path("deck.pdf"))
