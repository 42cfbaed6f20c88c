"""Main CLI entry point for the strict-markup command-line tool.

Provides parse, render (normalize) and validate commands over markup files.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from strict_markup import __version__
from strict_markup.api import MarkupParser
from strict_markup.shared import ConfigError, MarkupError, ParserConfig, RenderConfig
from strict_markup.shared.logging import get_logger
from strict_markup.tree import Element


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig.default()
        self.quotes = "double"
        self.encoding = "utf-8"

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load a JSON ``ParserConfig`` from file.

        Raises:
            ConfigError: If the file is not a valid configuration
        """
        config = cls()
        try:
            config.parser_config = ParserConfig.from_json(config_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load config file {config_path}: {e}") from e
        return config


class MarkupProcessor:
    """Core processing logic shared by the CLI commands."""

    def __init__(self, config: CLIConfig):
        self.config = config
        self.parser = MarkupParser(
            config.parser_config,
            RenderConfig.from_parser_config(config.parser_config, quotes=config.quotes),
        )
        self.logger = get_logger(__name__, self.parser.correlation_id, "cli_processor")

    def process_single_file(self, file_path: Path) -> Dict[str, Any]:
        """Parse a single file and return a JSON friendly summary."""
        start_time = time.time()
        try:
            text = file_path.read_text(encoding=self.config.encoding)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Could not read {file_path}: {e}")
            return {"file": str(file_path), "success": False, "error": str(e)}

        tree = self.parser.parse(text)
        result: Dict[str, Any] = {
            "file": str(file_path),
            "success": isinstance(tree, Element),
            "processing_time_ms": (time.time() - start_time) * 1000,
        }
        if isinstance(tree, Element):
            result["root"] = tree.tag
            result["element_count"] = sum(1 for _ in tree.iter_elements())
            result["tree"] = tree.to_dict()
            result["diagnostics"] = []
        else:
            result["diagnostics"] = [tree.to_diagnostic(self.parser.correlation_id).to_dict()]
        result["_tree"] = tree
        return result


def _public(result: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in result.items() if not key.startswith("_")}


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="strict-markup",
        description="Strict markup parser and renderer"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser("parse", help="Parse markup files")
    parse_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to parse"
    )
    parse_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)"
    )
    parse_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )

    # Render command
    render_parser = subparsers.add_parser(
        "render", help="Parse and re-render markup files in normalized form"
    )
    render_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to render"
    )
    render_parser.add_argument(
        "--quotes",
        choices=["double", "single"],
        default="double",
        help="Quote character around attribute values (default: double)"
    )
    render_parser.add_argument(
        "--output-dir", "-d",
        type=Path,
        help="Output directory for rendered files (default: stdout)"
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Check markup files")
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Markup files to validate"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )

    # Global options
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON parser configuration file"
    )
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

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format parse results for output."""
    if format_type == "json":
        return json.dumps([_public(r) for r in results], indent=2)

    if not results:
        return "No results to display."

    successful = sum(1 for r in results if r.get("success", False))
    lines = [f"Parsed {len(results)} files, {successful} successful", "-" * 60]
    for result in results:
        status = "✓" if result.get("success", False) else "✗"
        lines.append(f"{status} {result['file']}")
        if result.get("success", False):
            lines.append(
                f"   Root: <{result['root']}>, Elements: {result['element_count']}, "
                f"Time: {result.get('processing_time_ms', 0):.1f}ms"
            )
        for diagnostic in result.get("diagnostics", []):
            lines.append(f"   Error: {diagnostic.get('message', '')}")
        if "error" in result:
            lines.append(f"   Error: {result['error']}")
        lines.append("")
    return "\n".join(lines)


def cmd_parse(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle parse command."""
    processor = MarkupProcessor(config)
    results = [processor.process_single_file(path) for path in args.paths]

    formatted_output = format_results(results, args.format)
    if args.output:
        try:
            args.output.write_text(formatted_output)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
        if not args.quiet:
            print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(formatted_output)

    successful = sum(1 for r in results if r.get("success", False))
    return 0 if results and successful == len(results) else 1


def cmd_render(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle render command."""
    config.quotes = args.quotes
    processor = MarkupProcessor(config)
    failures = 0

    for path in args.paths:
        result = processor.process_single_file(path)
        if not result["success"]:
            message = result.get("error") or result["diagnostics"][0]["message"]
            print(f"Failed to parse {path}: {message}", file=sys.stderr)
            failures += 1
            continue

        output = processor.parser.render(result["_tree"])
        if isinstance(output, MarkupError):
            print(f"Failed to render {path}: {output}", file=sys.stderr)
            failures += 1
            continue

        if args.output_dir:
            output_path = args.output_dir / path.name
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output)
            if not args.quiet:
                print(f"Rendered: {path} -> {output_path}", file=sys.stderr)
        else:
            print(output)

    return 0 if failures == 0 else 1


def cmd_validate(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle validate command."""
    processor = MarkupProcessor(config)
    results = []
    for path in args.paths:
        result = processor.process_single_file(path)
        validation_result: Dict[str, Any] = {
            "file": str(path),
            "valid": result["success"],
        }
        if not result["success"]:
            if "error" in result:
                validation_result["error"] = result["error"]
            else:
                validation_result["diagnostics"] = result["diagnostics"]
        results.append(validation_result)

    valid_count = sum(1 for r in results if r["valid"])
    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        print(f"Validated {len(results)} files, {valid_count} valid")
        print("-" * 50)
        for result in results:
            status = "✓" if result["valid"] else "✗"
            print(f"{status} {result['file']}")
            if "error" in result:
                print(f"   Error: {result['error']}")
            for diagnostic in result.get("diagnostics", []):
                print(f"   Error: {diagnostic['message']}")

    return 0 if valid_count == len(results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        if args.command == "parse":
            return cmd_parse(args, config)
        if args.command == "render":
            return cmd_render(args, config)
        if args.command == "validate":
            return cmd_validate(args, config)
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
