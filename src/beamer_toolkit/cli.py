"""
Command Line Interface for Beamer Toolkit

Provides the `slides` entry point with subcommands:
- from-md: Convert Markdown to a Beamer .tex file
- export: Export a Beamer deck (or Markdown) to reveal.js HTML
- lint: Check a .tex file for common structural mistakes
- build / watch: Compile with a LaTeX engine, once or on every change
- preview: Show compiled slides in the terminal
- themes: Save and inspect custom themes
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from . import __version__
from .build import build_document
from .config import CustomTheme, ThemeStore, find_project_config, normalize_aspect_ratio
from .discovery import find_export_source, find_pdf_file, find_tex_file
from .export import export_presentation
from .from_md import ConversionOptions, convert_markdown_file
from .lint import format_issue, format_summary, get_lint_json, has_errors, lint_file
from .preview import preview_document
from .watch import RebuildScheduler, watch_files

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


def _report_error(e: Exception, args: argparse.Namespace) -> int:
    print(f"\nError: {e}")
    if getattr(args, 'verbose', False):
        import traceback
        traceback.print_exc()
    return 1


def from_md_command(args: argparse.Namespace) -> int:
    """Execute from-md command."""
    print("=" * 60)
    print("Markdown to Beamer")
    print("=" * 60)

    try:
        project = find_project_config()
        options = ConversionOptions(
            theme=args.theme or project.theme,
            color_theme=args.color or project.color_theme,
            aspect_ratio=normalize_aspect_ratio(args.aspect_ratio) if args.aspect_ratio else project.aspect_ratio,
        )
        output_path, slide_count = convert_markdown_file(args.input, args.output, options)

        print(f"Created {output_path} with {slide_count} slides")
        print(f"\nNext: slides build {output_path}")
        return 0

    except Exception as e:
        return _report_error(e, args)


def export_command(args: argparse.Namespace) -> int:
    """Execute export command."""
    print("=" * 60)
    print("Export to HTML")
    print("=" * 60)

    if args.format != 'html':
        print(f"\nError: Unsupported format: {args.format}. Supported: html")
        return 1

    try:
        source = find_export_source(args.input)
        output_path, slide_count = export_presentation(source, args.output, theme=args.theme)

        print(f"Exported {slide_count} slides to {output_path}")
        print(f"Open in browser: file://{Path(output_path).resolve()}")
        return 0

    except Exception as e:
        return _report_error(e, args)


def lint_command(args: argparse.Namespace) -> int:
    """Execute lint command."""
    try:
        tex_file = find_tex_file(args.input)
        issues = lint_file(tex_file)
    except Exception as e:
        return _report_error(e, args)

    filename = args.input or tex_file.name

    if args.json:
        print(json.dumps(get_lint_json(issues, filename), indent=2))
        return 1 if has_errors(issues) else 0

    print("=" * 60)
    print(f"Linting {filename}")
    print("=" * 60)

    if args.fix:
        print("Auto-fix not yet implemented\n")

    if not issues:
        print("✓ No issues found")
        return 0

    for issue in issues:
        print(format_issue(issue, filename))

    print(f"\n{format_summary(issues)}")

    return 1 if has_errors(issues) else 0


def build_command(args: argparse.Namespace) -> int:
    """Execute build command."""
    try:
        tex_file = find_tex_file(args.input)
        engine = args.engine or find_project_config().engine

        print(f"Building {tex_file} with {engine}...")
        result = build_document(tex_file, engine=engine, output=args.output)

        print(f"✓ Built {result.pdf_path} in {result.elapsed:.1f}s")
        return 0

    except Exception as e:
        return _report_error(e, args)


def watch_command(args: argparse.Namespace) -> int:
    """Execute watch command."""
    try:
        engine = args.engine or find_project_config().engine
    except Exception as e:
        return _report_error(e, args)

    if args.input:
        pattern = args.input

        def resolve() -> List[Path]:
            return [Path(args.input)]
    else:
        pattern = '*.tex'

        def resolve() -> List[Path]:
            return sorted(Path.cwd().glob('*.tex'))

    def rebuild(path: Path) -> None:
        result = build_document(path, engine=engine)
        print(f"✓ Built {result.pdf_path} in {result.elapsed:.1f}s")

    print(f"Watching {pattern} for changes...")
    print("Press Ctrl+C to stop\n")

    try:
        watch_files(resolve, RebuildScheduler(rebuild), interval=args.interval)
    except KeyboardInterrupt:
        print("\nStopping watch...")

    return 0


def preview_command(args: argparse.Namespace) -> int:
    """Execute preview command."""
    try:
        pdf_file = find_pdf_file(args.input)
        preview_document(pdf_file, page=args.page, show_all=args.all, width=args.width)
        return 0

    except Exception as e:
        return _report_error(e, args)


def themes_command(args: argparse.Namespace) -> int:
    """Execute themes command."""
    store = ThemeStore(args.theme_dir)

    try:
        if args.save:
            theme = CustomTheme(
                name=args.save,
                base_theme=args.theme,
                color_theme=args.color,
                aspect_ratio=args.aspect_ratio,
            )
            path = store.save(theme)
            print(f"✓ Saved custom theme '{theme.name}' to {path}")
            return 0

        if args.use:
            theme = store.load(args.use)
            print(f"Custom theme: {theme.name}")
            print(f"  Base theme:   {theme.base_theme}")
            print(f"  Color theme:  {theme.color_theme}")
            print(f"  Aspect ratio: {theme.aspect_ratio}")
            print("\nAdd to your Markdown frontmatter:")
            print(f"  theme: {theme.base_theme}")
            print(f"  colorTheme: {theme.color_theme}")
            print(f"  aspectRatio: {theme.aspect_ratio}")
            return 0

        print("=" * 60)
        print("Custom Themes")
        print("=" * 60)

        themes = store.list()
        if not themes:
            print("No custom themes saved. Create one with:")
            print("  slides themes --save NAME -t Madrid -c dolphin")
            return 0

        for theme in themes:
            print(f"  {theme.name:<20} {theme.base_theme} + {theme.color_theme} ({theme.aspect_ratio})")
        return 0

    except Exception as e:
        return _report_error(e, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='slides',
        description='Beamer Toolkit - Markdown to Beamer conversion, HTML export and linting',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s from-md talk.md -t Berlin -c beaver
  %(prog)s lint talk.tex
  %(prog)s build talk.tex --engine xelatex
  %(prog)s export talk.tex -o talk.html
        """
    )

    parser.add_argument('--version', action='version', version=__version__)
    parser.add_argument('-v', '--verbose', action='store_true', help='Show detailed output')

    # Subcommands accept -v too without resetting a top-level -v
    verbose = argparse.ArgumentParser(add_help=False)
    verbose.add_argument('-v', '--verbose', action='store_true', default=argparse.SUPPRESS,
                         help='Show detailed output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # from-md command
    from_md_parser = subparsers.add_parser('from-md', parents=[verbose], help='Convert Markdown to Beamer')
    from_md_parser.add_argument('input', help='Markdown file')
    from_md_parser.add_argument('--output', '-o', help='Output .tex file (default: input.tex)')
    from_md_parser.add_argument('--theme', '-t', help='Beamer theme (default: Madrid)')
    from_md_parser.add_argument('--color', '-c', help='Color theme (default: dolphin)')
    from_md_parser.add_argument('--aspect-ratio', help='Aspect ratio, e.g. 169 or 43')

    # Export command
    export_parser = subparsers.add_parser('export', parents=[verbose], help='Export to reveal.js HTML')
    export_parser.add_argument('input', nargs='?', help='.tex or .md file (default: discovered)')
    export_parser.add_argument('--format', '-f', default='html', help='Output format (default: html)')
    export_parser.add_argument('--output', '-o', help='Output file (default: input.html)')
    export_parser.add_argument('--theme', '-t', default='black', help='reveal.js theme (default: black)')

    # Lint command
    lint_parser = subparsers.add_parser('lint', parents=[verbose], help='Check a .tex file for common issues')
    lint_parser.add_argument('input', nargs='?', help='.tex file (default: discovered)')
    lint_parser.add_argument('--fix', action='store_true', help='Attempt to fix issues')
    lint_parser.add_argument('--json', action='store_true', help='Output results as JSON')

    # Build command
    build_cmd_parser = subparsers.add_parser('build', parents=[verbose], help='Compile to PDF')
    build_cmd_parser.add_argument('input', nargs='?', help='.tex file (default: discovered)')
    build_cmd_parser.add_argument('--output', '-o', help='Output PDF path')
    build_cmd_parser.add_argument('--engine', help='LaTeX engine (default: slides.yaml or tectonic)')

    # Watch command
    watch_parser = subparsers.add_parser('watch', parents=[verbose], help='Rebuild on changes')
    watch_parser.add_argument('input', nargs='?', help='.tex file (default: all .tex files)')
    watch_parser.add_argument('--engine', help='LaTeX engine (default: slides.yaml or tectonic)')
    watch_parser.add_argument('--interval', type=float, default=1.0, help='Polling interval in seconds')

    # Preview command
    preview_parser = subparsers.add_parser('preview', parents=[verbose], help='Preview slides in the terminal')
    preview_parser.add_argument('input', nargs='?', help='PDF file (default: discovered)')
    preview_parser.add_argument('--page', '-p', type=int, default=1, help='Slide to show')
    preview_parser.add_argument('--all', '-a', action='store_true', help='Show all slides as thumbnails')
    preview_parser.add_argument('--width', '-w', type=int, default=800, help='Image width in pixels')

    # Themes command
    themes_parser = subparsers.add_parser('themes', parents=[verbose], help='Manage custom themes')
    themes_parser.add_argument('--save', metavar='NAME', help='Save settings as a custom theme')
    themes_parser.add_argument('--use', metavar='NAME', help='Show details of a custom theme')
    themes_parser.add_argument('--theme', '-t', default='Madrid', help='Base theme (for --save)')
    themes_parser.add_argument('--color', '-c', default='dolphin', help='Color theme (for --save)')
    themes_parser.add_argument('--aspect-ratio', default='169', help='Aspect ratio (for --save)')
    themes_parser.add_argument('--theme-dir', help=argparse.SUPPRESS)

    return parser


COMMANDS = {
    'from-md': from_md_command,
    'export': export_command,
    'lint': lint_command,
    'build': build_command,
    'watch': watch_command,
    'preview': preview_command,
    'themes': themes_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger.debug("Command: %s", args.command)

    if args.command is None:
        parser.print_help()
        return 1

    return COMMANDS[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
