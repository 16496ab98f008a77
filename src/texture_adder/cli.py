import argparse
import asyncio
import logging
from typing import Optional

from texture_adder.api.loader import Loader
from texture_adder.api.session import Session
from texture_adder.constants import (
    DEFAULT_FILENAME,
    DEFAULT_QUALITY,
    DEFAULT_TEXTURE,
    TEXTURES,
    BlendMode,
    ExportState,
    ImageFormat,
    SizePreset,
)
from texture_adder.errors import DecodeError
from texture_adder.export.delivery import select_sink
from texture_adder.settings import ExportSettings
from texture_adder.version import __version__

logger = logging.getLogger(__name__)


def _add_settings_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("photo", help="Input photo")
    parser.add_argument(
        "-t", "--texture", default=DEFAULT_TEXTURE, choices=TEXTURES, help="Texture overlay"
    )
    parser.add_argument(
        "-b",
        "--blend",
        default=BlendMode.OVERLAY.value,
        choices=[m.value for m in BlendMode],
        help="Blend mode of the texture",
    )
    parser.add_argument("--opacity", type=float, default=100, help="Texture opacity, 0-100")
    parser.add_argument("--brightness", type=float, default=100, help="Brightness, 100 is neutral")
    parser.add_argument("--contrast", type=float, default=100, help="Contrast, 100 is neutral")
    parser.add_argument("--saturation", type=float, default=100, help="Saturation, 100 is neutral")
    parser.add_argument("--texture-dir", default=None, help="Directory holding the textures")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="texture-adder command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Blend and export an image")
    _add_settings_arguments(export_parser)
    export_parser.add_argument(
        "-s",
        "--size",
        default=SizePreset.ORIGINAL.value,
        choices=[p.value for p in SizePreset],
        help="Cap on the longer edge",
    )
    export_parser.add_argument(
        "-f",
        "--format",
        default=ImageFormat.PNG.value,
        choices=[f.value for f in ImageFormat],
        help="Output format",
    )
    export_parser.add_argument(
        "-q", "--quality", type=float, default=DEFAULT_QUALITY, help="JPEG/WebP quality, 0.5-1.0"
    )
    export_parser.add_argument(
        "--pixel-ratio", type=float, default=None, help="Render at this pixel ratio"
    )
    export_parser.add_argument("-o", "--output-dir", default=".", help="Output directory")
    export_parser.add_argument("--name", default=DEFAULT_FILENAME, help="Output file base name")
    export_parser.add_argument(
        "--open", action="store_true", help="Open the exported file in the system viewer"
    )

    preview_parser = subparsers.add_parser("preview", help="Render a preview PNG")
    _add_settings_arguments(preview_parser)
    preview_parser.add_argument("output_file", help="Output PNG file")
    preview_parser.add_argument(
        "--max-edge", type=int, default=1024, help="Longer edge of the preview"
    )

    subparsers.add_parser("textures", help="List the available textures")

    return parser.parse_args(argv)


def _settings(args: argparse.Namespace, **kwargs) -> ExportSettings:
    return ExportSettings(
        blend_mode=args.blend,
        opacity_percent=args.opacity,
        brightness_percent=args.brightness,
        contrast_percent=args.contrast,
        saturation_percent=args.saturation,
        **kwargs
    )


def _report(state: ExportState, fraction: float, label: str) -> None:
    logger.info("[%3d%%] %s" % (round(fraction * 100), label))


async def _export(args: argparse.Namespace) -> int:
    settings = _settings(
        args,
        size_preset=args.size,
        format=args.format,
        quality=args.quality,
        use_device_pixel_ratio=args.pixel_ratio is not None,
        device_pixel_ratio=args.pixel_ratio or 1.0,
        filename=args.name,
    )
    sink = select_sink(args.output_dir, open_viewer=args.open)
    session = Session(Loader(args.texture_dir), sink)
    await session.open(args.photo)
    session.select_texture(args.texture)
    result = await session.export(settings, observer=_report)
    if not result.ok:
        logger.error(result.error)
        return 1
    print(getattr(sink, "last_path", None) or result.filename)
    return 0


async def _preview(args: argparse.Namespace) -> int:
    session = Session(Loader(args.texture_dir), preview_edge=args.max_edge)
    await session.open(args.photo)
    session.select_texture(args.texture)
    image = await session.preview(_settings(args))
    image.save(args.output_file, format="PNG")
    return 0


def main(argv: Optional[list[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    root = logging.getLogger("texture_adder")
    if args.verbose:
        root.setLevel(logging.DEBUG)
    else:
        root.setLevel(logging.INFO)

    if args.command == "textures":
        for name in TEXTURES:
            print(name)
        return None

    try:
        if args.command == "export":
            return asyncio.run(_export(args))
        elif args.command == "preview":
            return asyncio.run(_preview(args))
    except (DecodeError, ValueError) as e:
        logger.error(str(e))
        return 1

    return None
