#!/usr/bin/env python3
"""
combine_files.py
----------------
Recursively scans one or more directories for files, keeps the ones whose
path matches a regular expression and/or the ones picked in an interactive
checklist, then concatenates them into a single text file.

- By default, searches the current directory and writes "combined.txt".
- At least one of --regex / --interactive must be given.

Each file's content is preceded by a marker line:

    <blank line>
    // ===== FILE: <path> =====
    <blank line>
    <file contents>
"""

import argparse
import logging
import os
import re
import stat
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from combine_utils.errors import (
    CombineError,
    FileCombinerError,
    PatternError,
)
from combine_utils.prompt import present_choices

__version__ = "0.1.0"

DEFAULT_OUTPUT = "combined.txt"
FILE_MARKER = "// ===== FILE: {path} ====="

log = logging.getLogger("file_combiner")
console = Console()

Chooser = Callable[[list[str], list[bool]], list[int]]


# -----------------------------
# Configuration
# -----------------------------
@dataclass(frozen=True)
class CombineConfig:
    dirs: tuple[str, ...]
    output: str
    pattern: Optional[re.Pattern] = None
    interactive: bool = False
    verbose: bool = False


def parse_dirs(text: Optional[str]) -> list[str]:
    """
    Split a comma separated list of directories, trimming each entry.
    Blank entries are kept so they are reported as missing directories.
    """
    if text is None:
        return ["."]
    return [d.strip() for d in text.split(",")]


def compile_pattern(text: str) -> re.Pattern:
    try:
        return re.compile(text)
    except re.error as e:
        raise PatternError(f"Invalid regex pattern '{text}': {e}") from e


def build_config(args: argparse.Namespace) -> CombineConfig:
    pattern = compile_pattern(args.regex) if args.regex is not None else None
    return CombineConfig(
        dirs=tuple(parse_dirs(args.dirs)),
        output=args.output,
        pattern=pattern,
        interactive=args.interactive,
        verbose=args.verbose,
    )


# -----------------------------
# Directory enumeration
# -----------------------------
def _same_file(path: str, exclude: Optional[os.stat_result]) -> bool:
    if exclude is None:
        return False
    try:
        st = os.stat(path)
    except OSError:
        return False
    return st.st_ino == exclude.st_ino and st.st_dev == exclude.st_dev


def _log_walk_error(err: OSError):
    log.debug(f"Skipping unreadable entry {err.filename}: {err.strerror}")


def enumerate_files(roots: list[str], exclude: Optional[str] = None) -> list[str]:
    """
    Recursively collect every regular file under each root in `roots`.
    Roots that are not existing directories are skipped with a warning.
    Symlinks are neither followed nor collected. If `exclude` names an
    existing file, that file is left out of the result.
    Returns the paths, root by root, in sorted walk order.
    """
    exclude_stat = None
    if exclude is not None:
        try:
            exclude_stat = os.stat(exclude)
        except OSError:
            exclude_stat = None

    collected = []
    for root in roots:
        if not os.path.isdir(root):
            log.warning(f"Directory not found: {root}")
            continue

        for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
            dirnames.sort()
            for filename in sorted(filenames):
                path = os.path.join(dirpath, filename)
                try:
                    mode = os.lstat(path).st_mode
                except OSError as e:
                    _log_walk_error(e)
                    continue
                if not stat.S_ISREG(mode):
                    continue
                if _same_file(path, exclude_stat):
                    log.info(f"Skipping output file: {path}")
                    continue
                collected.append(path)

    log.debug(f"Found {len(collected)} file(s) under {', '.join(roots)}")
    return collected


# -----------------------------
# Filtering and selection
# -----------------------------
def filter_files(files: list[str], pattern: Optional[re.Pattern] = None) -> list[str]:
    """Keep the paths in which `pattern` matches anywhere. No pattern keeps all."""
    if pattern is None:
        return list(files)
    return [path for path in files if pattern.search(path)]


def display_path(path: str, cwd: Path) -> str:
    p = Path(path)
    if p.is_absolute():
        try:
            return str(p.relative_to(cwd))
        except ValueError:
            pass
    return path


def select_files(
    files: list[str],
    interactive: bool,
    chooser: Optional[Chooser] = None,
) -> list[str]:
    """
    Return the files to combine. In interactive mode the user picks from a
    checklist (every entry checked initially); otherwise `files` is returned
    unchanged. The returned paths are always the original values, never the
    display labels.
    """
    if not interactive:
        return list(files)

    chooser = chooser or present_choices
    cwd = Path.cwd()
    labels = [display_path(path, cwd) for path in files]
    indices = chooser(labels, [True] * len(labels))
    return [files[i] for i in sorted(indices)]


# -----------------------------
# Combining
# -----------------------------
def combine(files: list[str], output_path: str) -> int:
    """
    Write every file in `files` to `output_path`, each preceded by a marker
    line naming its path. Returns the number of files written.

    A file that cannot be read, or a failed write, aborts the run; whatever was
    already written stays in the output.
    """
    try:
        out = open(output_path, "w", encoding="utf-8", newline="")
    except OSError as e:
        raise CombineError(f"Failed to create output file: {output_path} ({e})") from e

    count = 0
    try:
        with out:
            for path in files:
                content = _read_text(path)
                out.write("\n" + FILE_MARKER.format(path=path) + "\n\n")
                out.write(content)
                out.write("\n")
                count += 1
    except OSError as e:
        raise CombineError(f"Failed to write output file: {output_path} ({e})") from e
    return count


def _read_text(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", newline="") as fin:
            return fin.read()
    except (OSError, UnicodeDecodeError) as e:
        raise CombineError(f"Failed to read file: {path} ({e})") from e


# -----------------------------
# CLI
# -----------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="combine-files",
        description="Combine multiple files into a single text file.",
    )
    parser.add_argument(
        "-r", "--regex",
        help="Regex pattern matched against each file's full path. "
             r'Example: --regex "\.py$"',
    )
    parser.add_argument(
        "-i", "--interactive",
        action="store_true",
        help="Pick the files to combine from an interactive checklist.",
    )
    parser.add_argument(
        "-o", "--output",
        default=DEFAULT_OUTPUT,
        help=f"Output file path (default: {DEFAULT_OUTPUT}).",
    )
    parser.add_argument(
        "-d", "--dirs",
        help='Directories to search, comma separated (default: current directory). '
             'Example: --dirs "src, tests"',
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    log.setLevel(logging.DEBUG if verbose else logging.INFO)


def run(config: CombineConfig) -> int:
    all_files = enumerate_files(list(config.dirs), exclude=config.output)
    if not all_files:
        console.print("No files found in the specified paths.", style="yellow")
        return 0

    filtered_files = filter_files(all_files, config.pattern)
    if not filtered_files:
        console.print("No files matched the specified pattern.", style="yellow")
        return 0

    files_to_combine = select_files(filtered_files, config.interactive)
    if not files_to_combine:
        console.print("No files selected for combining.", style="yellow")
        return 0

    count = combine(files_to_combine, config.output)
    console.print(
        f"[green]Successfully combined[/green] {count} "
        f"[green]files into[/green] {escape(config.output)}"
    )
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if not args.interactive and args.regex is None:
        console.print("Error: You must specify either --regex or --interactive", style="red")
        return 0

    try:
        config = build_config(args)
        return run(config)
    except FileCombinerError as e:
        log.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
