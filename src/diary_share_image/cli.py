"""Command-line entry point for rendering a diary share image."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

from pydantic import ValidationError

import diary_share_image.config as dsi_config
from diary_share_image.constants import MAX_PHOTOS
from diary_share_image.exceptions import ImageGenerationError
from diary_share_image.formats import FORMAT_CHOICES, ShareFormat
from diary_share_image.generator import Failure, generate_share_image
from diary_share_image.logging_utils import logger, set_verbosity
from diary_share_image.photo_handles import FilePhotoHandle
from diary_share_image.type_defs import DiaryEntry
from diary_share_image.version import resolve_project_version

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

T = TypeVar("T")


def _wrap_validator(
    validator: Callable[[str], T],
    error_cls: type[argparse.ArgumentTypeError] = argparse.ArgumentTypeError,
) -> Callable[[str], T]:
    """Convert ``ValueError`` from a validator into ``ArgumentTypeError``."""

    def wrapper(text: str) -> T:
        try:
            return validator(text)
        except ValueError as exc:
            raise error_cls(str(exc)) from exc

    return wrapper


def iso_date(text: str) -> date:
    """Parse ``YYYY-MM-DD`` into a date."""
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        msg = "date must look like YYYY-MM-DD"
        raise ValueError(msg) from exc


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser for the share image tool."""
    parser = argparse.ArgumentParser(
        description=(
            "Render a diary entry and up to three photos into a single "
            "share-ready PNG."
        ),
    )
    parser.add_argument("--title", type=str, default="")
    content = parser.add_mutually_exclusive_group()
    content.add_argument("--content", type=str, default=None,
                         help="Diary body text.")
    content.add_argument("--content-file", type=Path, default=None,
                         help="Read the diary body from a UTF-8 text file.")
    parser.add_argument(
        "--date",
        type=_wrap_validator(iso_date),
        default=None,
        help="Diary date as YYYY-MM-DD (default: today).",
    )
    parser.add_argument("--entry-id", type=str, default="diary")
    parser.add_argument(
        "--photo",
        dest="photos",
        action="append",
        type=Path,
        default=[],
        help=f"Photo file; repeat up to {MAX_PHOTOS} times.",
    )
    parser.add_argument(
        "--format",
        type=str,
        default=None,
        choices=list(FORMAT_CHOICES),
        help="Output pixel format (default from config: portrait).",
    )
    parser.add_argument("--output", type=str, default=None,
                        help="Output directory.")
    parser.add_argument("--locale", type=str, default=None)
    parser.add_argument("--font", type=str, default=None,
                        help="Path to a regular TrueType font.")
    parser.add_argument("--bold-font", type=str, default=None,
                        help="Path to a bold TrueType font.")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to config.toml file")
    parser.add_argument(
        "--validate-config-only", action="store_true",
        help="Validate config file and exit without rendering",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true",
                           help="Also log per-render debug details.")
    verbosity.add_argument("--quiet", action="store_true",
                           help="Only log warnings and errors.")
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {resolve_project_version()}",
    )
    return parser


def _apply_overrides(
    cfg: dsi_config.ShareImageConfig,
    args: argparse.Namespace,
) -> dsi_config.ShareImageConfig:
    """Return a config with CLI flags taking precedence over the file."""
    data = cfg.model_dump()
    overrides = {
        ("output", "format"): args.format,
        ("output", "output"): args.output,
        ("text", "locale"): args.locale,
        ("text", "font_path"): args.font,
        ("text", "bold_font_path"): args.bold_font,
    }
    for (section, key), value in overrides.items():
        if value is not None:
            data[section][key] = value
    data["output"]["write_file"] = True
    return dsi_config.ShareImageConfig.model_validate(data)


def _read_content(args: argparse.Namespace) -> str:
    if args.content_file is not None:
        return Path(args.content_file).read_text(encoding="utf-8")
    return args.content or ""


def run_from_args(args: argparse.Namespace) -> Path:
    """Render the share image described by parsed arguments."""
    base_cfg = dsi_config.ShareImageConfig()
    if args.config:
        base_cfg = dsi_config.ConfigLoader.load(args.config)
    cfg = _apply_overrides(base_cfg, args)

    diary = DiaryEntry(
        title=args.title,
        content=_read_content(args),
        date=args.date or date.today(),
        entry_id=args.entry_id,
    )
    photos = [FilePhotoHandle(p) for p in args.photos]
    fmt = ShareFormat.from_name(cfg.output.format)

    result = generate_share_image(diary, fmt, photos, config=cfg)
    if isinstance(result, Failure):
        raise result.error
    saved = result.value.path
    logger.info("Share image saved to: %s", saved)
    return saved  # type: ignore[return-value]


def main(argv: Sequence[str] | None = None) -> int:
    """Parse command-line arguments and render the share image."""
    parser = build_parser()
    args = parser.parse_args(argv)
    set_verbosity(verbose=args.verbose, quiet=args.quiet)

    if len(args.photos) > MAX_PHOTOS:
        parser.error(f"at most {MAX_PHOTOS} photos are supported")

    if args.validate_config_only:
        if not args.config:
            parser.error("--validate-config-only requires --config")
        try:
            dsi_config.ConfigLoader.load(args.config)
        except (FileNotFoundError, ValidationError) as exc:
            parser.error(str(exc))
        logger.info("Config %s validated successfully.", args.config)
        return 0

    try:
        run_from_args(args)
    except (FileNotFoundError, ValidationError, ValueError) as exc:
        parser.error(str(exc))
    except ImageGenerationError as exc:
        logger.error("Could not generate image: %s", exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
