"""
Command-line interface: decode and encode package descriptions, and export a
repository database as a table.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import polars as pl
from pydantic import ValidationError

from .config import Settings, load_settings
from .decoder import decode
from .encoder import encode
from .errors import DescError
from .models import Package, PackageFiles
from .repository import Progress, Repository

logger = logging.getLogger(__name__)


def _read_text(path: str, encoding: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding=encoding) as f:
        return f.read()


def packages_frame(repo: Repository) -> pl.DataFrame:
    """One row per package, dependencies rendered back to strings."""
    rows: list[dict[str, Any]] = [package.model_dump(mode="json") for package in repo]
    if not rows:
        return pl.DataFrame(schema={name: pl.Utf8 for name in Package.model_fields})
    return pl.DataFrame(rows, infer_schema_length=None)


def write_frame(df: pl.DataFrame, output: Path) -> None:
    if output.suffix == ".parquet":
        df.write_parquet(output)
    elif output.suffix in (".json", ".ndjson", ".jsonl"):
        df.write_ndjson(output)
    else:
        raise ValueError(f"Unsupported output format: {output.suffix}")


def cmd_decode(args: argparse.Namespace, settings: Settings) -> int:
    target = PackageFiles if args.files else Package
    record = decode(_read_text(args.path, settings.encoding), target)
    print(record.model_dump_json(indent=2))
    return 0


def cmd_encode(args: argparse.Namespace, settings: Settings) -> int:
    data = json.loads(_read_text(args.path, settings.encoding))
    target = PackageFiles if args.files else Package
    sys.stdout.write(encode(target.model_validate(data)))
    return 0


def _print_progress(progress: Progress) -> None:
    logger.info(str(progress))


def cmd_table(args: argparse.Namespace, settings: Settings) -> int:
    if args.url:
        repo = asyncio.run(
            Repository.load(args.name, args.url, progress=_print_progress, timeout=settings.timeout)
        )
    else:
        archive = Path(args.archive).read_bytes()
        name = args.name or Path(args.archive).name.split(".db")[0]
        repo = Repository.from_archives(name, archive, progress=_print_progress, encoding=settings.encoding)

    df = packages_frame(repo)
    if args.output:
        write_frame(df, Path(args.output))
        print(f"Wrote {len(df)} packages to {args.output}")
    else:
        print(df.select(["name", "version", "architecture", "installed_size"]))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pacdesc", description="Read and write pacman package descriptions.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_decode = subparsers.add_parser("decode", help="Decode a desc file and print it as JSON")
    p_decode.add_argument("path", nargs="?", default="-", help="Input file path or '-' for stdin")
    p_decode.add_argument("--files", action="store_true", help="Input is a `files` member, not a `desc` member")
    p_decode.set_defaults(func=cmd_decode)

    p_encode = subparsers.add_parser("encode", help="Encode a JSON package as a desc file")
    p_encode.add_argument("path", nargs="?", default="-", help="Input file path or '-' for stdin")
    p_encode.add_argument("--files", action="store_true", help="Input is a files list, not a package")
    p_encode.set_defaults(func=cmd_encode)

    p_table = subparsers.add_parser("table", help="Export the packages of a repository database")
    source = p_table.add_mutually_exclusive_group(required=True)
    source.add_argument("--archive", "-a", type=str, help="Local <repo>.db.tar.gz file")
    source.add_argument("--url", "-u", type=str, help="Mirror URL of the repository directory")
    p_table.add_argument("--name", "-n", type=str, default=None, help="Repository name")
    p_table.add_argument("--output", "-o", type=str, default=None, help="Output .parquet or .json file")
    p_table.set_defaults(func=cmd_table)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "table" and args.url and not args.name:
        parser.error("--name is required with --url")

    try:
        settings = load_settings()
    except ValidationError as e:
        sys.stderr.write(f"error: invalid configuration: {e}\n")
        return 2
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args, settings)
    except (DescError, ValidationError, OSError, ValueError) as e:
        sys.stderr.write(f"error: {e}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
