"""Command-line interface for the logo_kit project."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Iterable

from tqdm import tqdm

from .candidates.naming import select_logo, to_source_logos
from .derive.assemble import DerivationSettings, process, process_async
from .derive.geometry import ICON_SIZE
from .derive.operators import DEFAULT_TOLERANCE
from .export.download import download, extension_for
from .io.models import ColorPalette, DerivedAssetBundle, SourceLogo
from .io.outputs import build_report, write_report

_REMOTE_PREFIXES = ("http://", "https://", "data:", "file:")


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the logo derivation pipeline."""
    parser = argparse.ArgumentParser(
        description="Derive brand-kit logo variants from generated logo images."
    )
    parser.add_argument(
        "sources",
        nargs="+",
        metavar="SOURCE",
        help="Logo image URLs or local file paths, in generation order.",
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Directory where derived variants will be written.",
    )
    parser.add_argument(
        "--name",
        default="brand",
        help="Brand name used as the file name prefix.",
    )
    parser.add_argument(
        "--select",
        default=None,
        metavar="ID",
        help="Only derive the logo with this id (e.g. logo-fallback-0).",
    )
    parser.add_argument(
        "--palette",
        default=None,
        help="Path to a generated colour palette JSON file.",
    )
    parser.add_argument(
        "--tolerance",
        type=int,
        default=DEFAULT_TOLERANCE,
        help="Per-channel distance for background keying (default %(default)s).",
    )
    parser.add_argument(
        "--icon-size",
        type=int,
        default=ICON_SIZE,
        help="Edge length of the square icon variant (default %(default)s).",
    )
    parser.add_argument(
        "--concurrent",
        action="store_true",
        help="Derive variants concurrently.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def source_reference(value: str) -> str:
    """Return *value* as a fetchable reference, turning local paths into file URIs."""
    cleaned = value.strip()
    if cleaned.startswith(_REMOTE_PREFIXES):
        return cleaned
    path = Path(cleaned)
    if path.exists():
        return path.resolve().as_uri()
    return cleaned


def brand_slug(name: str) -> str:
    slug = "-".join(name.lower().split())
    sanitized = "".join(ch if ch.isalnum() or ch in "._-" else "_" for ch in slug)
    return sanitized.strip("._-") or "brand"


def read_palette(path: Path) -> ColorPalette:
    if not path.exists():
        raise FileNotFoundError(f"Palette file does not exist: {path}")
    data: Any = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Palette file must hold a JSON object: {path}")
    return ColorPalette.from_dict(data)


def _choose_logos(sources: list[str], selected: str | None) -> list[SourceLogo]:
    candidates = [{"url": source_reference(source)} for source in sources]
    if selected is None:
        return to_source_logos(candidates)
    resolved = select_logo(candidates, selected)
    return [logo for logo in to_source_logos(resolved) if logo.selected]


def _write_bundle(bundle: DerivedAssetBundle, out_dir: Path, prefix: str) -> dict[str, Path]:
    files: dict[str, Path] = {}
    for key in bundle.available():
        stem = prefix if key == "svg" else f"{prefix}-{key}"
        filename = f"{stem}{extension_for(key)}"
        try:
            files[key] = download(bundle, key, filename, out_dir)
        except Exception as exc:  # noqa: BLE001 - keep writing the other variants
            print(f"[warn] {key}: failed to save ({exc})")
    return files


def _derive(
    logo: SourceLogo,
    palette: ColorPalette | None,
    settings: DerivationSettings,
    concurrent: bool,
) -> DerivedAssetBundle:
    if concurrent:
        return asyncio.run(process_async(logo, palette, settings))
    return process(logo, palette, settings)


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        logos = _choose_logos(args.sources, args.select)
    except KeyError:
        print(f"[error] no logo with id {args.select!r}")
        return 2
    palette = read_palette(Path(args.palette)) if args.palette else None
    settings = DerivationSettings(tolerance=args.tolerance, icon_size=args.icon_size)
    prefix = brand_slug(args.name)
    out_root = Path(args.out)
    out_root.mkdir(parents=True, exist_ok=True)

    failed = 0
    for logo in tqdm(logos, desc="Deriving logos", unit="logo", leave=False):
        bundle = _derive(logo, palette, settings, args.concurrent)
        logo_dir = out_root / logo.id
        logo_dir.mkdir(parents=True, exist_ok=True)
        files = _write_bundle(bundle, logo_dir, prefix)
        write_report(logo_dir / "manifest.json", build_report(logo.id, bundle, files))
        if bundle.load_error is not None:
            failed += 1
            print(f"[error] {logo.id}: {bundle.load_error}")
            continue
        for key, reason in bundle.failures.items():
            print(f"[warn] {logo.id}: {key} unavailable ({reason})")
        print(f"[saved] {logo.id}: {len(files)} files in {logo_dir}")

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
