"""Tests for LaTeX engine invocation."""

import subprocess
from pathlib import Path

import pytest

from beamer_toolkit import build
from beamer_toolkit.build import build_document, check_engine, engine_command
from beamer_toolkit.errors import BuildError, EngineNotFoundError


def test_engine_command_tectonic():
    """Test the tectonic invocation."""
    assert engine_command("tectonic", Path("/tmp/deck.tex")) == ["tectonic", "deck.tex"]


def test_engine_command_pdflatex():
    """Test non-interactive mode for classic engines."""
    assert engine_command("xelatex", Path("deck.tex")) == ["xelatex", "-interaction=nonstopmode", "deck.tex"]


def test_engine_command_unknown():
    """Test that unknown engines are rejected."""
    with pytest.raises(BuildError):
        engine_command("troff", Path("deck.tex"))


def test_check_engine_missing(monkeypatch):
    """Test the install hint for a missing engine."""
    monkeypatch.setattr(build.shutil, "which", lambda cmd: None)
    with pytest.raises(EngineNotFoundError) as exc_info:
        check_engine("tectonic")
    assert "Install with" in str(exc_info.value)


def fake_engine(returncode, calls):
    def run(cmd, cwd=None, check=False):
        calls.append((cmd, cwd))
        if returncode == 0:
            (Path(cwd) / cmd[-1]).with_suffix(".pdf").write_bytes(b"%PDF-1.5")
        return subprocess.CompletedProcess(cmd, returncode)
    return run


def test_build_document_success(tmp_path, monkeypatch):
    """Test a successful build runs in the source directory."""
    tex = tmp_path / "deck.tex"
    tex.write_text("x")
    calls = []
    monkeypatch.setattr(build.shutil, "which", lambda cmd: f"/usr/bin/{cmd}")
    monkeypatch.setattr(build.subprocess, "run", fake_engine(0, calls))

    result = build_document(tex, engine="pdflatex")

    assert result.pdf_path == tmp_path / "deck.pdf"
    assert result.pdf_path.exists()
    assert calls == [(["pdflatex", "-interaction=nonstopmode", "deck.tex"], tmp_path)]


def test_build_document_moves_output(tmp_path, monkeypatch):
    """Test that --output relocates the PDF."""
    tex = tmp_path / "deck.tex"
    tex.write_text("x")
    out = tmp_path / "dist" / "talk.pdf"
    out.parent.mkdir()
    monkeypatch.setattr(build.shutil, "which", lambda cmd: f"/usr/bin/{cmd}")
    monkeypatch.setattr(build.subprocess, "run", fake_engine(0, []))

    result = build_document(tex, output=out)

    assert result.pdf_path == out
    assert out.exists()
    assert not (tmp_path / "deck.pdf").exists()


def test_build_document_failure(tmp_path, monkeypatch):
    """Test that a non-zero exit raises BuildError."""
    tex = tmp_path / "deck.tex"
    tex.write_text("x")
    monkeypatch.setattr(build.shutil, "which", lambda cmd: f"/usr/bin/{cmd}")
    monkeypatch.setattr(build.subprocess, "run", fake_engine(1, []))

    with pytest.raises(BuildError):
        build_document(tex)
