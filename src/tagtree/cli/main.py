"""Main CLI entry point for the tagtree command-line tool.

Commands:
    parse     Parse files and print their trees (tree or JSON output)
    validate  Report whether files parse cleanly
    trace     Show the state machine's transitions for one file
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from tagtree import __version__
from tagtree.api import parse_file
from tagtree.character import BufferLoadError, load_buffer
from tagtree.output import format_tree
from tagtree.parsing import ParseError, ParseResult
from tagtree.shared import ConfigValidationError, ParserConfig, get_logger
from tagtree.tools import trace_transitions

MARKUP_SUFFIXES = {".html", ".htm", ".xml", ".tag"}


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig()
        self.output_format = "tree"

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file holds ``ParserConfig`` fields plus an optional
        ``output_format``.
        """
        config = cls()
        if not config_path.exists():
            return config

        with config_path.open() as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration data must be a mapping")
        config.output_format = data.pop("output_format", config.output_format)
        config.parser_config = ParserConfig.from_dict(data)
        return config

    def apply_arguments(self, args: argparse.Namespace) -> None:
        """Apply command-line overrides on top of the loaded configuration."""
        overrides: Dict[str, Any] = {}
        if getattr(args, "max_depth", None) is not None:
            overrides["max_depth"] = args.max_depth
        if getattr(args, "tail_policy", None) is not None:
            overrides["tail_text"] = args.tail_policy
        if getattr(args, "strict", False):
            overrides["never_fail_mode"] = False
        if overrides:
            self.parser_config = self.parser_config.override(**overrides)
        if getattr(args, "format", None) is not None:
            self.output_format = args.format


class TagProcessor:
    """Core processing logic for CLI operations."""

    def __init__(self, config: CLIConfig) -> None:
        self.config = config
        self.logger = get_logger(__name__, None, "cli_processor")

    def parse_path(self, file_path: Path) -> ParseResult:
        """Parse one file with the configured parser settings."""
        return parse_file(file_path, config=self.config.parser_config)

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Process a single file and return a report dictionary."""
        result = self.parse_path(file_path)
        self.logger.debug(
            "Processed file",
            extra={"file_path": str(file_path), "success": result.success}
        )
        report: Dict[str, Any] = {
            "file": str(file_path),
            "success": result.success,
            "balanced": result.is_balanced,
            "element_count": result.element_count,
            "attribute_count": result.attribute_count,
            "processing_time_ms": result.processing_time_ms,
            "error": result.error.to_dict() if result.error else None,
            "diagnostics": [diag.to_dict() for diag in result.diagnostics],
        }
        if self.config.output_format == "json":
            report["root"] = result.root.to_dict()
        else:
            report["tree"] = format_tree(result.root)
        return report

    def find_markup_files(self, path: Path, recursive: bool = True) -> Iterator[Path]:
        """Expand ``path`` into the markup files it names."""
        if path.is_dir():
            pattern = "**/*" if recursive else "*"
            for candidate in sorted(path.glob(pattern)):
                if candidate.is_file() and candidate.suffix.lower() in MARKUP_SUFFIXES:
                    yield candidate
        else:
            # Missing files are reported by the parse itself
            yield path

    def batch_process(self, paths: List[Path], recursive: bool = True) -> List[Dict[str, Any]]:
        """Process every file named by ``paths``."""
        results = []
        for path in paths:
            for file_path in self.find_markup_files(path, recursive):
                results.append(self.process_single_file(file_path))
        return results


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="tagtree",
        description="Parse simplified tag markup into an element tree"
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse files and print their trees")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Files or directories to parse"
    )
    parse_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["tree", "json"],
        default=None,
        help="Output format (default: tree)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    _add_parser_options(parse_parser)

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Check that files parse cleanly")
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Files or directories to validate"
    )
    validate_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format"
    )
    _add_parser_options(validate_parser)

    # Trace command
    trace_parser = subparsers.add_parser("trace", help="Show state machine transitions")
    trace_parser.add_argument("path", type=Path, help="File to trace")
    trace_parser.add_argument(
        "--limit", "-n",
        type=int,
        help="Maximum number of steps to show"
    )
    trace_parser.add_argument(
        "--effects-only",
        action="store_true",
        help="Hide transitions that do not touch the tree"
    )
    # No --strict: a trace always runs up to the error
    _add_parser_options(trace_parser, strict=False)

    return parser


def _add_parser_options(subparser: argparse.ArgumentParser, strict: bool = True) -> None:
    subparser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    subparser.add_argument(
        "--max-depth",
        type=int,
        help="Maximum element nesting depth"
    )
    subparser.add_argument(
        "--tail-policy",
        choices=["drop", "tail"],
        help="Keep or drop text that follows a closing tag"
    )
    if strict:
        subparser.add_argument(
            "--strict",
            action="store_true",
            help="Stop at the first parse error"
        )


def _load_config(args: argparse.Namespace) -> CLIConfig:
    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    config.apply_arguments(args)
    # No-op when -v or -q already configured logging
    logging.basicConfig(level=config.parser_config.logging_level)
    return config


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format processing results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    sections = []
    for result in results:
        lines = []
        if len(results) > 1:
            lines.append(f"# {result['file']}")
        if result.get("tree"):
            lines.append(result["tree"].rstrip("\n"))
        sections.append("\n".join(lines))
    return "\n".join(section for section in sections if section)


def _report_errors(results: List[Dict[str, Any]]) -> None:
    for result in results:
        error = result.get("error")
        if error:
            print(
                f"{result['file']}: {error['kind']} at offset {error['offset']}: "
                f"{error['message']}",
                file=sys.stderr
            )
        elif not result["success"]:
            for diag in result["diagnostics"]:
                if diag["severity"] in ("ERROR", "CRITICAL"):
                    print(f"{result['file']}: {diag['message']}", file=sys.stderr)


def cmd_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    config = _load_config(args)
    processor = TagProcessor(config)
    results = processor.batch_process(args.paths, args.recursive)

    formatted_output = format_results(results, config.output_format)
    if args.output:
        try:
            args.output.write_text(formatted_output + "\n")
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        print(f"Results written to {args.output}", file=sys.stderr)
    elif formatted_output:
        print(formatted_output)

    _report_errors(results)

    if not results:
        return 1
    return 0 if all(r["success"] for r in results) else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    config = _load_config(args)
    processor = TagProcessor(config)

    results = []
    for report in processor.batch_process(args.paths, args.recursive):
        results.append({
            "file": report["file"],
            "valid": report["success"] and report["balanced"],
            "balanced": report["balanced"],
            "error": report["error"],
            "warnings": [d["message"] for d in report["diagnostics"]
                         if d["severity"] == "WARNING"],
            "errors": [d["message"] for d in report["diagnostics"]
                       if d["severity"] in ("ERROR", "CRITICAL")],
        })

    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        valid_count = sum(1 for r in results if r["valid"])
        print(f"Validated {len(results)} files, {valid_count} valid")
        print("-" * 50)
        for result in results:
            status = "OK  " if result["valid"] else "FAIL"
            print(f"{status} {result['file']}")
            for message in result["errors"] + result["warnings"]:
                print(f"     {message}")

    return 0 if all(r["valid"] for r in results) else 1


def cmd_trace(args: argparse.Namespace) -> int:
    """Handle trace command."""
    config = _load_config(args)
    try:
        text = load_buffer(args.path)
    except BufferLoadError as e:
        print(str(e), file=sys.stderr)
        return 1

    session, result = trace_transitions(
        text,
        config=config.parser_config,
        limit=args.limit,
        effects_only=args.effects_only,
    )
    print(session.format())
    if result.error:
        print(f"{type(result.error).__name__}: {result.error}", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "parse":
            return cmd_parse(args)
        if args.command == "validate":
            return cmd_validate(args)
        if args.command == "trace":
            return cmd_trace(args)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    except (ConfigValidationError, json.JSONDecodeError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except ParseError as e:
        # Only reached with --strict
        print(f"{e.kind}: {e}", file=sys.stderr)
        return 1
    except BufferLoadError as e:
        print(str(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
