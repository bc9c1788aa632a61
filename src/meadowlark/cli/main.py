"""Main CLI entry point."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional


def main(argv: Optional[list[str]] = None) -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(
        prog="meadowlark",
        description="Conservation investment opportunity finder",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # recommend
    recommend_parser = subparsers.add_parser(
        "recommend", help="Generate, validate and score opportunities for a preferences file"
    )
    recommend_parser.add_argument(
        "--preferences",
        type=Path,
        required=True,
        help="Path to preferences YAML/JSON",
    )
    recommend_parser.add_argument(
        "--provider",
        type=str,
        default=None,
        help="Generation provider (default: MEADOWLARK_LLM_PROVIDER)",
    )
    recommend_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write result JSON to file (default: stdout)",
    )

    # parse
    parse_parser = subparsers.add_parser(
        "parse", help="Extract, normalize and validate a saved generation response"
    )
    parse_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to the raw response text",
    )
    parse_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write validated opportunities to file",
    )

    # fallback
    fallback_parser = subparsers.add_parser(
        "fallback", help="Show the synthesized opportunities for a preferences file"
    )
    fallback_parser.add_argument(
        "--preferences",
        type=Path,
        required=True,
        help="Path to preferences YAML/JSON",
    )
    fallback_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write synthesized opportunities to file",
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "recommend":
        _run_recommend(args)
    elif args.command == "parse":
        _run_parse(args)
    elif args.command == "fallback":
        _run_fallback(args)
    else:
        parser.print_help()


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_preferences(path: Path):
    import yaml
    from pydantic import ValidationError

    from meadowlark.models.preferences import InvestmentPreferences

    try:
        return InvestmentPreferences.from_yaml(path)
    except FileNotFoundError:
        raise SystemExit(f"Preferences file not found: {path}")
    except (ValueError, ValidationError, yaml.YAMLError) as e:
        raise SystemExit(f"Invalid preferences file {path}:\n{e}")


def _emit(data: Any, output: Optional[Path], summary: str) -> None:
    text = json.dumps(data, indent=2, default=str, ensure_ascii=False)
    if output:
        output.write_text(text, encoding="utf-8")
        print(f"{summary} (wrote to {output})")
    else:
        print(text)


def _run_recommend(args: argparse.Namespace) -> None:
    """Run recommend command."""
    from meadowlark.pipeline import build_orchestrator

    preferences = _load_preferences(args.preferences)
    try:
        orchestrator = build_orchestrator(args.provider)
    except ValueError as e:
        raise SystemExit(str(e))

    result = asyncio.run(orchestrator.run(preferences))
    if result is None:
        raise SystemExit("Run was superseded before it finished")
    if result.used_fallback:
        print(f"Using synthesized opportunities: {result.error_detail}", file=sys.stderr)
    _emit(
        result.model_dump(mode="json", by_alias=True),
        args.output,
        f"{len(result.opportunities)} opportunities, state {result.state}",
    )


def _run_parse(args: argparse.Namespace) -> None:
    """Run parse command. Exits 1 when the response does not yield a valid collection."""
    from meadowlark.errors import PipelineError
    from meadowlark.normalize import normalize_candidate
    from meadowlark.parsing import parse_envelope
    from meadowlark.validation import validate_candidates

    try:
        text = args.input.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SystemExit(f"Input file not found: {args.input}")

    try:
        raws = parse_envelope(text)
        collection = validate_candidates(normalize_candidate(raw) for raw in raws)
    except PipelineError as e:
        print(f"{e.reason}: {e}", file=sys.stderr)
        raise SystemExit(1)

    _emit(
        [o.model_dump(mode="json", by_alias=True) for o in collection.opportunities],
        args.output,
        f"Validated {len(collection)} opportunities "
        f"({collection.rejected} rejected, {collection.truncated} over the cap)",
    )


def _run_fallback(args: argparse.Namespace) -> None:
    """Run fallback command."""
    from meadowlark.fallback import synthesize

    preferences = _load_preferences(args.preferences)
    opportunities = synthesize(preferences)
    _emit(
        [o.model_dump(mode="json", by_alias=True) for o in opportunities],
        args.output,
        f"Synthesized {len(opportunities)} opportunities",
    )


if __name__ == "__main__":
    main()
