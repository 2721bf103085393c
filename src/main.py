# src/main.py — v1
"""CLI entry point — build, validate commands.

Usage:
    toolfactory build <file> [options]
    toolfactory validate <analysis.json> [--design design.json] [--html tool.html]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from toolfactory.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="toolfactory",
        description=f"toolfactory v{__version__} — course content to decision tools",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- build ---
    p_build = subparsers.add_parser(
        "build", help="Run the factory pipeline on a course content file",
    )
    p_build.add_argument("file", type=Path, help="Path to course content (text/markdown)")
    p_build.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Where to write the generated HTML (default: <slug>.html)",
    )
    p_build.add_argument("--slug", default=None, help="Job slug (derived if omitted)")
    p_build.set_defaults(func=_cmd_build)

    # --- validate ---
    p_validate = subparsers.add_parser(
        "validate", help="Validate extraction / design / HTML offline",
    )
    p_validate.add_argument("analysis", type=Path, help="Course analysis JSON")
    p_validate.add_argument("--design", type=Path, default=None, help="Tool design JSON")
    p_validate.add_argument(
        "--html", type=Path, default=None, help="Generated HTML (requires --design)",
    )
    p_validate.set_defaults(func=_cmd_validate)

    return parser


async def _cmd_build(args: argparse.Namespace) -> int:
    """Run one job end to end and write its artifact."""
    from toolfactory.api.facade import create_tool_factory
    from toolfactory.config.settings import load_settings
    from toolfactory.logging.logger import setup_logging_from_settings

    file_path: Path = args.file
    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        return 1

    settings = load_settings()
    setup_logging_from_settings(settings, verbose=args.verbose)
    factory = create_tool_factory(settings)
    job_id = await factory.submit(file_path.read_text(encoding="utf-8"), slug=args.slug)
    await factory.wait_for_job(job_id)

    overview = await factory.describe_job(job_id)
    html = await factory.get_artifact(job_id)
    output: Path = args.output or Path(f"{overview.slug}.html")
    if html:
        output.write_text(html, encoding="utf-8")

    print("\nBuild complete:")
    print(f"  Job ID:    {overview.job_id}")
    print(f"  Status:    {overview.status.value}")
    if overview.qa_report is not None:
        report = overview.qa_report
        print(f"  QA score:  {report.score}/{report.max_score}")
        print(f"  Summary:   {report.summary}")
    if overview.last_error:
        print(f"  Error:     {overview.last_error}")
    print(f"  Artifact:  {output if html else '(none)'}")
    costs = factory.cost_summary(job_id)
    if costs is not None and costs.total_calls:
        print(
            f"  AI calls:  {costs.total_calls} "
            f"({costs.fallback_calls} fallback, ${costs.total_cost_usd:.4f})"
        )
    return 0 if overview.status.value == "READY_FOR_REVIEW" else 1


async def _cmd_validate(args: argparse.Namespace) -> int:
    """Run the validation engine on saved stage outputs."""
    from toolfactory.core.models import CourseAnalysis, ToolDesign
    from toolfactory.pipeline.context_builder import build_builder_context
    from toolfactory.validation.design import validate_design_alignment
    from toolfactory.validation.extraction import validate_extraction
    from toolfactory.validation.output import validate_tool_output
    from toolfactory.validation.report import format_validation_result

    if args.html is not None and args.design is None:
        logger.error("--html requires --design")
        return 1

    analysis = CourseAnalysis.model_validate(_read_json(args.analysis))
    results = [validate_extraction(analysis)]

    if args.design is not None:
        design = ToolDesign.model_validate(_read_json(args.design))
        results.append(validate_design_alignment(analysis, design))
        if args.html is not None:
            context = build_builder_context(analysis, design)
            html = args.html.read_text(encoding="utf-8")
            results.append(validate_tool_output(html, context))

    for result in results:
        print(format_validation_result(result))
        print()
    return 0 if all(r.passed for r in results) else 1


def _read_json(path: Path) -> dict:
    with path.open(encoding="utf-8") as fh:
        return json.load(fh)


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from toolfactory.logging.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "INFO", log_format="text")


if __name__ == "__main__":
    sys.exit(main())
