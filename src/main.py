# src/main.py — v3
"""CLI entry point — provider diagnostics and pipeline commands.

Usage:
    classboard status
    classboard test-provider <name>
    classboard generate <prompt> [--family gemini]
    classboard categorize <text>
    classboard format <text> [--category notes]
    classboard process [--text TEXT] <file> ...
    classboard analyze-image <image>

Every command prints JSON on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from classboard.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    from classboard.api.facade import build_services
    from classboard.config.settings import Settings
    from classboard.logging.logger import setup_logging

    settings = Settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    try:
        services = build_services(settings)
        return asyncio.run(_run_command(args, services))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="classboard",
        description=f"classboard v{__version__} — AI provider orchestration for the updates board",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_status = subparsers.add_parser("status", help="Show provider pool status")
    p_status.set_defaults(func=_cmd_status)

    p_test = subparsers.add_parser("test-provider", help="Send a greeting to one provider")
    p_test.add_argument("name", help="Provider name (e.g. HuggingFace, Gemini-1)")
    p_test.set_defaults(func=_cmd_test_provider)

    p_generate = subparsers.add_parser("generate", help="Generate text with fallback")
    p_generate.add_argument("prompt", help="Prompt text")
    p_generate.add_argument(
        "--family", choices=["huggingface", "gemini"], default=None,
        help="Provider family to try first",
    )
    p_generate.set_defaults(func=_cmd_generate)

    p_categorize = subparsers.add_parser("categorize", help="Classify a text")
    p_categorize.add_argument("text", help="Text to classify")
    p_categorize.set_defaults(func=_cmd_categorize)

    p_format = subparsers.add_parser("format", help="Title (and describe) a text")
    p_format.add_argument("text", help="Text to format")
    p_format.add_argument(
        "--category", choices=["assignments", "notes", "presentations", "general"],
        default=None, help="Skip classification and use this category",
    )
    p_format.set_defaults(func=_cmd_format)

    p_process = subparsers.add_parser("process", help="Process a text plus files")
    p_process.add_argument("files", nargs="*", type=Path, help="Attached files")
    p_process.add_argument("--text", default="", help="Context text")
    p_process.set_defaults(func=_cmd_process)

    p_image = subparsers.add_parser("analyze-image", help="Transcribe text in an image")
    p_image.add_argument("image", type=Path, help="Image file")
    p_image.set_defaults(func=_cmd_analyze_image)

    return parser


async def _run_command(args: argparse.Namespace, services: Any) -> int:
    try:
        return await args.func(args, services)
    finally:
        await services.aclose()


async def _cmd_status(args: argparse.Namespace, services: Any) -> int:
    _print_json(services.manager.get_status())
    return 0


async def _cmd_test_provider(args: argparse.Namespace, services: Any) -> int:
    result = await services.manager.test_provider(args.name)
    _print_json(result)
    return 0 if result.success else 1


async def _cmd_generate(args: argparse.Namespace, services: Any) -> int:
    result = await services.manager.generate_with_fallback(
        args.prompt, preferred_family=args.family
    )
    _print_json(result)
    return 0 if result.success else 1


async def _cmd_categorize(args: argparse.Namespace, services: Any) -> int:
    _print_json(await services.content.categorize(args.text))
    return 0


async def _cmd_format(args: argparse.Namespace, services: Any) -> int:
    from classboard.core.models import CategoryResult

    if args.category:
        category = CategoryResult(category=args.category)
    else:
        category = await services.content.categorize(args.text)
    _print_json(await services.content.format(args.text, category))
    return 0


async def _cmd_process(args: argparse.Namespace, services: Any) -> int:
    from classboard.pipeline.content_pipeline import NoContentProvidedError

    try:
        result = await services.content.process_files(args.text, list(args.files))
    except NoContentProvidedError as exc:
        logger.error("%s", exc)
        return 2
    _print_json(result)
    return 0


async def _cmd_analyze_image(args: argparse.Namespace, services: Any) -> int:
    image_path: Path = args.image
    if not image_path.is_file():
        logger.error("File not found: %s", image_path)
        return 1
    media_type = _MEDIA_TYPES.get(image_path.suffix.lower(), "image/jpeg")
    text = await services.content.analyze_image(image_path.read_bytes(), media_type)
    _print_json({"text": text})
    return 0


_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
    ".webp": "image/webp",
}


def _print_json(value: Any) -> None:
    if hasattr(value, "model_dump"):
        value = value.model_dump(mode="json")
    print(json.dumps(value, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    sys.exit(main())
