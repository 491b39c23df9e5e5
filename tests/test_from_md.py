"""Tests for Markdown to Beamer conversion."""

from pathlib import Path
import tempfile

from beamer_toolkit.from_md import (
    ConversionOptions,
    convert_markdown_file,
    generate_latex,
    markdown_to_beamer,
    md_to_latex,
    parse_markdown,
)
from beamer_toolkit.lint import has_errors, lint_source


SAMPLE_MD = """---
title: "Data Pipelines"
author: Ann
theme: Berlin
---

## Overview
- **Fast** ingestion
- *Reliable* storage

Notes: stress the SLA

## Code
```python
def load():
    return 42
```

## Flow
```mermaid
graph LR
  A[Extract] --> B[Load]
```

## Results
| Stage | Rows |
|-------|------|
| Extract | 100 |
| Load | 98 |
"""


def test_frontmatter_scenario():
    """Test metadata and a single slide from frontmatter input."""
    meta, slides = parse_markdown("---\ntitle: Demo\nauthor: Ann\n---\n## Intro\nHello\n")
    assert meta == {"title": "Demo", "author": "Ann"}
    assert len(slides) == 1
    assert slides[0].title == "Intro"
    assert slides[0].content == ["Hello"]


def test_frontmatter_values_unquoted():
    """Test that quoted frontmatter values lose their quotes."""
    meta, _ = parse_markdown(SAMPLE_MD)
    assert meta["title"] == "Data Pipelines"
    assert meta["theme"] == "Berlin"


def test_notes_extraction():
    """Test that text after Notes: goes to notes, not content."""
    _, slides = parse_markdown("## Slide\nBody text\nNotes: remember X\n")
    assert slides[0].content == ["Body text"]
    assert slides[0].notes == ["remember X"]


def test_notes_continue_until_next_slide():
    """Test that lines after a Note: marker stay in notes."""
    _, slides = parse_markdown("## A\nNote:\nfirst\nsecond\n## B\nbody\n")
    assert slides[0].notes == ["first", "second"]
    assert slides[1].content == ["body"]
    assert slides[1].notes == []


def test_slide_count_matches_level_two_headings():
    """Test that K level-2 headings produce K slides, ignoring code fences."""
    md = "## One\na\n```\n## not a slide\n```\n## Two\nb\n## Three\n"
    _, slides = parse_markdown(md)
    assert [s.title for s in slides] == ["One", "Two", "Three"]


def test_horizontal_rule_slides():
    """Test that --- opens an untitled slide only when it has content."""
    _, slides = parse_markdown("## A\nx\n---\n\n## B\ny\n---\nloose text\n")
    assert [s.title for s in slides] == ["A", "B", ""]
    assert slides[2].content == ["loose text"]


def test_level_one_heading_sets_title():
    """Test that # Heading supplies the title when frontmatter does not."""
    meta, _ = parse_markdown("# My Talk\n## Slide\nx\n")
    assert meta["title"] == "My Talk"


def test_lists_switch_kind():
    """Test that bullet and numbered lists open and close correctly."""
    latex = md_to_latex(["- a", "- b", "1. one", "2. two", "", "after"])
    lines = latex.split("\n")
    assert lines == [
        r"\begin{itemize}",
        r"  \item a",
        r"  \item b",
        r"\end{itemize}",
        r"\begin{enumerate}",
        r"  \item one",
        r"  \item two",
        r"\end{enumerate}",
        "",
        "after",
    ]


def test_subheadings():
    """Test ### and #### headings."""
    latex = md_to_latex(["### Big", "#### Small"])
    assert r"\textbf{\large Big}" in latex
    assert r"\textbf{Small}" in latex


def test_code_block_is_verbatim():
    """Test that code is not escaped and gets a listing block."""
    latex = md_to_latex(["```python", "", "x = a_b % 2", "", "```"])
    assert latex == "\\begin{lstlisting}[language=python]\nx = a_b % 2\n\\end{lstlisting}"


def test_code_block_default_language():
    """Test that untagged fences use the text language."""
    assert r"[language=text]" in md_to_latex(["```", "plain", "```"])


def test_empty_code_block_dropped():
    """Test that a fence with only blank lines produces nothing."""
    assert md_to_latex(["```python", "", "```"]) == ""


def test_table_shape():
    """Test that a Markdown table keeps its rows and columns."""
    latex = md_to_latex(["| A | B | C |", "|---|:-:|---|", "| 1 | 2 | 3 |", "| 4 | 5 | 6 |", "", "next"])
    assert r"\begin{tabular}{lll}" in latex
    assert r"\textbf{A} & \textbf{B} & \textbf{C} \\" in latex
    assert r"1 & 2 & 3 \\" in latex
    assert r"4 & 5 & 6 \\" in latex
    assert latex.count(r"\\") == 3
    assert latex.rstrip().endswith("next")


def test_list_closed_at_end_of_slide():
    """Test that a list on the last lines of a slide is closed."""
    lines = md_to_latex(["- a", "- b"]).split("\n")
    assert lines[-1] == r"\end{itemize}"


def test_table_at_end_of_slide():
    """Test that a table on the last lines of a slide is still rendered."""
    latex = md_to_latex(["| A | B |", "|---|---|", "| 1 | 2 |"])
    assert r"1 & 2 \\" in latex
    assert latex.endswith("\\end{tabular}\n\\end{center}")


def test_pipes_inside_code_block_are_not_a_table():
    """Test that table syntax inside a fence stays verbatim."""
    latex = md_to_latex(["```", "| x | y |", "```"])
    assert latex == "\\begin{lstlisting}[language=text]\n| x | y |\n\\end{lstlisting}"
    assert "tabular" not in latex


def test_mermaid_block():
    """Test that mermaid fences become TikZ."""
    latex = md_to_latex(["```mermaid", "graph TD", "  A --> B", "```"])
    assert r"\centering" in latex
    assert r"\begin{tikzpicture}" in latex
    assert r"\node[box, below=of A] (B) {B};" in latex


def test_generate_latex_document():
    """Test full document assembly."""
    latex, count = markdown_to_beamer(SAMPLE_MD)

    assert count == 4
    assert r"\documentclass[aspectratio=169]{beamer}" in latex
    assert r"\usetheme{Berlin}" in latex
    assert r"\usecolortheme{dolphin}" in latex
    assert r"\title{Data Pipelines}" in latex
    assert r"\author{Ann}" in latex
    assert r"\begin{frame}[fragile]{Code}" in latex
    assert r"\begin{frame}{Overview}" in latex
    assert r"\textbf{Fast} ingestion" in latex
    assert r"\note{stress the SLA}" in latex
    assert r"\Huge Questions?" in latex
    assert latex.rstrip().endswith(r"\end{document}")


def test_notes_option_emitted_once_before_slides():
    """Test that the notes option appears once, before any frame."""
    latex, _ = markdown_to_beamer("## A\nx\nNote: one\n## B\ny\nNote: two\n")
    assert latex.count(r"\setbeameroption{show notes on second screen=right}") == 1
    assert latex.index(r"\setbeameroption") < latex.index(r"\begin{frame}")


def test_no_notes_option_without_notes():
    """Test that decks without notes do not enable notes."""
    latex, _ = markdown_to_beamer("## A\nx\n")
    assert r"\setbeameroption" not in latex


def test_options_used_when_frontmatter_silent():
    """Test that ConversionOptions apply unless frontmatter overrides them."""
    options = ConversionOptions(theme="Warsaw", color_theme="crane", aspect_ratio="43")
    latex = generate_latex({"colorTheme": "beaver"}, [], options)
    assert r"\usetheme{Warsaw}" in latex
    assert r"\usecolortheme{beaver}" in latex
    assert r"aspectratio=43" in latex
    assert r"\title{Presentation}" in latex
    assert r"\date{\today}" in latex


def test_frontmatter_aspect_ratio_normalized():
    """Test that a colon-style aspectRatio becomes Beamer's form."""
    latex, _ = markdown_to_beamer("---\naspectRatio: 16:9\n---\n## A\nx\n")
    assert r"\documentclass[aspectratio=169]{beamer}" in latex


def test_frontmatter_aspect_ratio_unknown_falls_back(caplog):
    """Test that an unsupported aspectRatio falls back to the option default."""
    options = ConversionOptions(aspect_ratio="43")
    latex = generate_latex({"aspectRatio": "21:9"}, [], options)
    assert r"aspectratio=43" in latex
    assert "21:9" in caplog.text


def test_slide_titles_escaped():
    """Test that special characters in slide titles are escaped."""
    latex, _ = markdown_to_beamer("## Q&A 100%\nx\n")
    assert r"\begin{frame}{Q\&A 100\%}" in latex


def test_generated_document_lints_clean():
    """Test that converter output has no lint errors."""
    latex, _ = markdown_to_beamer(SAMPLE_MD)
    assert not has_errors(lint_source(latex))


def test_convert_markdown_file():
    """Test file conversion with the default output path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        md_path = Path(tmpdir) / "talk.md"
        md_path.write_text(SAMPLE_MD, encoding="utf-8")

        output_path, count = convert_markdown_file(md_path)

        assert output_path == Path(tmpdir) / "talk.tex"
        assert count == 4
        assert r"\begin{document}" in output_path.read_text(encoding="utf-8")
