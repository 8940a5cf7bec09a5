"""Main CLI entry point for the foxml-parse command-line tool.

Provides inspection of FOXML exports (object summary per file) and a
validation pass reporting the error code and byte offset of any fault.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from foxml_parser.api import FoxmlParser
from foxml_parser.errors import ParseError, StructuralError
from foxml_parser.shared.config import ConfigError, ParserConfig
from foxml_parser.shared.logging import configure_logging, get_logger


def load_config(args: argparse.Namespace) -> ParserConfig:
    """Build the parser configuration from a config file and CLI overrides."""
    config = ParserConfig()
    if args.config:
        config = ParserConfig.from_json(args.config.read_text())

    overrides: Dict[str, Any] = {}
    if args.chunk_size:
        overrides["stream__chunk_size"] = args.chunk_size
    if args.cache_dir:
        overrides["cache__backend"] = "file"
        overrides["cache__directory"] = str(args.cache_dir)
        overrides["cache__enabled"] = True
    if args.no_cache:
        overrides["cache__enabled"] = False
    if overrides:
        config = config.override(**overrides)
    return config


class FoxmlProcessor:
    """Parses files for CLI commands and turns outcomes into report rows."""

    def __init__(self, config: ParserConfig):
        self.config = config
        self.parser = FoxmlParser(config=config)
        self.logger = get_logger(__name__, config.correlation_id, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse one file and return a report row."""
        row: Dict[str, Any] = {"file": str(file_path)}
        try:
            root = self.parser.parse(file_path)
        except ParseError as e:
            row["success"] = False
            row["error"] = {
                "type": "structural" if isinstance(e, StructuralError) else "malformed",
                "message": e.message,
                "code": e.code,
                "offset": e.offset,
            }
        except OSError as e:
            row["success"] = False
            row["error"] = {"type": "io", "message": str(e), "code": None, "offset": None}
        else:
            row["success"] = True
            row["object"] = root.summary()

        if self.parser.last_metrics is not None:
            row["metrics"] = self.parser.last_metrics.to_dict()
        return row

    def process_files(self, paths: List[Path]) -> List[Dict[str, Any]]:
        return [self.process_single_file(path) for path in paths]


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="foxml-parse",
        description="Inspect and validate Fedora 3 FOXML export files",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    inspect_parser = subparsers.add_parser("inspect", help="Summarize FOXML files")
    inspect_parser.add_argument("paths", nargs="+", type=Path, help="FOXML files")
    inspect_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )

    validate_parser = subparsers.add_parser("validate", help="Check FOXML files parse cleanly")
    validate_parser.add_argument("paths", nargs="+", type=Path, help="FOXML files")
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )

    for sub in (inspect_parser, validate_parser):
        sub.add_argument("--config", "-c", type=Path, help="JSON parser configuration file")
        sub.add_argument("--chunk-size", type=int, help="Bytes per read")
        sub.add_argument("--cache-dir", type=Path, help="Directory for a shared file cache")
        sub.add_argument("--no-cache", action="store_true", help="Disable result caching")

    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Quiet output")
    return parser


def format_inspection(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format inspect results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    lines = []
    for result in results:
        lines.append(result["file"])
        if not result["success"]:
            lines.append(f"   Error: {result['error']['message']}")
            continue
        obj = result["object"]
        lines.append(f"   PID: {obj['pid']}  Label: {obj['label']}  State: {obj['state']}")
        for ds in obj["datastreams"]:
            lines.append(
                f"   {ds['id']} [{ds['control_group']}] {len(ds['versions'])} version(s)"
            )
    return "\n".join(lines)


def format_validation(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format validate results for output."""
    rows = [
        {
            "file": result["file"],
            "valid": result["success"],
            **({"error": result["error"]} if not result["success"] else {}),
        }
        for result in results
    ]
    if format_type == "json":
        return json.dumps(rows, indent=2)

    valid_count = sum(1 for row in rows if row["valid"])
    lines = [f"Validated {len(rows)} files, {valid_count} valid", "-" * 50]
    for row in rows:
        status = "OK  " if row["valid"] else "FAIL"
        lines.append(f"{status} {row['file']}")
        if not row["valid"]:
            error = row["error"]
            detail = error["message"]
            if error["offset"] is not None:
                detail += f" (offset {error['offset']})"
            if error["code"] is not None:
                detail += f" [code {error['code']}]"
            lines.append(f"     {detail}")
    return "\n".join(lines)


def cmd_inspect(args: argparse.Namespace) -> int:
    """Handle inspect command."""
    processor = FoxmlProcessor(load_config(args))
    results = processor.process_files(args.paths)
    print(format_inspection(results, args.format))
    return 0 if all(r["success"] for r in results) else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    processor = FoxmlProcessor(load_config(args))
    results = processor.process_files(args.paths)
    print(format_validation(results, args.format))
    return 0 if all(r["success"] for r in results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        configure_logging(logging.DEBUG)
    elif args.quiet:
        configure_logging(logging.ERROR)
    else:
        configure_logging(logging.WARNING)

    try:
        if args.command == "inspect":
            return cmd_inspect(args)
        if args.command == "validate":
            return cmd_validate(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1
    except (ConfigError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
