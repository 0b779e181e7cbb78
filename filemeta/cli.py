"""Console front end: prompts, live progress line and the export summary."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from colorama import Back, Fore, Style, init as colorama_init

from .config import ExportConfig, DEFAULT_OUTPUT, resolve_output, resolve_root, resolve_timezone
from .report import ReportWriteError, export_csv
from .scanner import DEFAULT_ROOT, scan
from .utils import format_bytes
from .drives import list_drives

log = logging.getLogger(__name__)

_use_color = True


def paint(text: str, *codes: str) -> str:
    if not _use_color or not codes:
        return text
    return "".join(codes) + text + Style.RESET_ALL


def print_banner():
    rule = paint("==============================", Fore.BLUE, Style.BRIGHT)
    print(rule)
    print(paint("   File Metadata Exporter   ", Style.BRIGHT, Fore.WHITE, Back.BLUE))
    print(rule)
    print(paint("Welcome! This tool scans a folder and exports file metadata to CSV.", Fore.YELLOW) + "\n")


def ask(question: str) -> str:
    label = paint("[Input] ", Fore.CYAN, Style.BRIGHT) + paint(question, Style.BRIGHT)
    try:
        return input(label)
    except EOFError:
        return ""


def print_progress(files: int):
    sys.stdout.write("\r" + paint("[Progress] Processed files:", Fore.MAGENTA, Style.BRIGHT)
                     + " " + paint(str(files), Fore.MAGENTA))
    sys.stdout.flush()


def print_drives():
    drives = list_drives()
    if not drives:
        print("No mounted volumes found.")
        return
    for d in drives:
        print(f"{d.mountpoint:<30} {d.fstype:<10} "
              f"total {format_bytes(d.total):>12}  free {format_bytes(d.free):>12}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filemeta",
        description="Scan a folder and export file metadata (path, modified time, size) to CSV.",
    )
    parser.add_argument("root", nargs="?", help=f"folder to scan (default: {DEFAULT_ROOT})")
    parser.add_argument("-o", "--output", help=f"CSV file to write (default: {DEFAULT_OUTPUT})")
    parser.add_argument("--no-size", action="store_true", help="omit the Size (MB) column")
    parser.add_argument("--utc", action="store_true", help="render timestamps in UTC instead of local time")
    parser.add_argument("--no-input", action="store_true", help="never prompt; use defaults for missing values")
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    parser.add_argument("--drives", action="store_true", help="list mounted volumes and exit")
    parser.add_argument("--gui", action="store_true", help="open the desktop window")
    parser.add_argument("-v", "--verbose", action="store_true", help="log skipped entries and other details")
    return parser


def config_from_args(args: argparse.Namespace) -> ExportConfig:
    interactive = not args.no_input
    root = args.root
    if root is None and interactive:
        root = ask(f"Enter the folder path to scan (default = {DEFAULT_ROOT}): ")
    output = args.output
    if output is None and interactive:
        output = ask(f"Enter output CSV filename (default = {DEFAULT_OUTPUT}): ")
    return ExportConfig(
        root=resolve_root(root),
        output=resolve_output(output),
        include_size=not args.no_size,
        tz=resolve_timezone(args.utc),
    )


def run_export(cfg: ExportConfig) -> int:
    print(f"\n{paint('[Scanning]', Fore.BLUE, Style.BRIGHT)} {cfg.root} ...")
    result = scan(cfg.root, progress=print_progress, track_size=cfg.include_size, tz=cfg.tz)
    print(f"\n{paint('[Done]', Fore.GREEN, Style.BRIGHT)} Total files: {paint(str(result.files), Fore.GREEN)}")
    log.info("%d records, %s in %.1f sec",
             len(result.records), format_bytes(result.bytes_scanned), result.elapsed_sec)

    try:
        export_csv(result.records, cfg.output, include_size=cfg.include_size, tz=cfg.tz)
    except ReportWriteError as e:
        print(f"{paint('[Error]', Fore.RED, Style.BRIGHT)} {paint('Error exporting to CSV:', Fore.RED)} {e}",
              file=sys.stderr)
        return 0
    print(f"{paint('[Success]', Fore.GREEN, Style.BRIGHT)} "
          f"{paint('Successfully exported data to', Fore.GREEN)} {cfg.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    global _use_color

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    _use_color = not args.no_color
    if _use_color:
        colorama_init()

    if args.drives:
        print_drives()
        return 0
    if args.gui:
        from .app import run as run_gui
        return run_gui()

    try:
        print_banner()
        cfg = config_from_args(args)
        return run_export(cfg)
    except KeyboardInterrupt:
        print(f"\n{paint('Operation cancelled by user.', Fore.YELLOW)}")
        return 130


if __name__ == "__main__":
    sys.exit(main())
