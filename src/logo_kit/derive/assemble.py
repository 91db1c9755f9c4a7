"""Derive the full family of logo variants from one source image."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Sequence, Tuple
from xml.sax.saxutils import quoteattr

from ..errors import FetchError, LoadError, TransformFailure
from ..io.fetch import encode_data_uri
from ..io.models import AssetVariant, ColorPalette, DerivedAssetBundle, SourceLogo
from ..pixels.buffer import PixelBuffer, encode, fetch_bytes, load
from .geometry import ICON_SIZE, render_fit
from .operators import BLACK, DEFAULT_TOLERANCE, WHITE, invert, key_out_background, recolor

logger = logging.getLogger(__name__)

SVG_MIME_TYPE = "image/svg+xml"


@dataclass(frozen=True, slots=True)
class DerivationSettings:
    """Tunable parameters for one derivation run."""

    tolerance: int = DEFAULT_TOLERANCE
    icon_size: int = ICON_SIZE
    fetch_payloads: bool = True


DEFAULT_SETTINGS = DerivationSettings()

Step = Callable[[PixelBuffer, SourceLogo, DerivationSettings], AssetVariant]


@dataclass(frozen=True, slots=True)
class StepOutcome:
    key: str
    variant: AssetVariant | None = None
    failure: TransformFailure | None = None


class BundleBuilder:
    """Append-only accumulator for the variants of one run."""

    def __init__(self, source: SourceLogo) -> None:
        self.source = source
        self._variants: Dict[str, AssetVariant] = {}
        self._failures: Dict[str, str] = {}

    def add(self, key: str, variant: AssetVariant) -> None:
        if key in self._variants:
            raise ValueError(f"Variant {key!r} already recorded")
        self._variants[key] = variant

    def fail(self, key: str, reason: str) -> None:
        self._failures.setdefault(key, reason)

    def record(self, outcome: StepOutcome) -> None:
        if outcome.variant is not None:
            self.add(outcome.key, outcome.variant)
        elif outcome.failure is not None:
            self.fail(outcome.key, outcome.failure.reason)

    def build(self, load_error: LoadError | None = None) -> DerivedAssetBundle:
        return DerivedAssetBundle(
            variants=dict(self._variants),
            failures=dict(self._failures),
            load_error=load_error,
        )


def _encoded(buffer: PixelBuffer, settings: DerivationSettings) -> AssetVariant:
    encoded = encode(buffer, "image/png")
    return AssetVariant(
        url=encoded.url,
        data=encoded.data if settings.fetch_payloads else None,
        mime_type=encoded.mime_type,
        size=buffer.size,
    )


def _derive_negative(buffer: PixelBuffer, source: SourceLogo, settings: DerivationSettings) -> AssetVariant:
    return _encoded(invert(buffer), settings)


def _derive_black(buffer: PixelBuffer, source: SourceLogo, settings: DerivationSettings) -> AssetVariant:
    return _encoded(recolor(buffer, BLACK), settings)


def _derive_white(buffer: PixelBuffer, source: SourceLogo, settings: DerivationSettings) -> AssetVariant:
    return _encoded(recolor(buffer, WHITE), settings)


def _derive_transparent(
    buffer: PixelBuffer, source: SourceLogo, settings: DerivationSettings
) -> AssetVariant:
    return _encoded(key_out_background(buffer, settings.tolerance), settings)


def _derive_icon(buffer: PixelBuffer, source: SourceLogo, settings: DerivationSettings) -> AssetVariant:
    return _encoded(render_fit(buffer, settings.icon_size), settings)


def _derive_svg(buffer: PixelBuffer, source: SourceLogo, settings: DerivationSettings) -> AssetVariant:
    content = svg_wrapper(source.url, buffer.width, buffer.height)
    data = content.encode("utf-8")
    return AssetVariant(
        url=encode_data_uri(data, SVG_MIME_TYPE),
        data=data if settings.fetch_payloads else None,
        mime_type=SVG_MIME_TYPE,
        size=buffer.size,
        content=content,
    )


STEPS: Tuple[Tuple[str, Step], ...] = (
    ("negative", _derive_negative),
    ("black", _derive_black),
    ("white", _derive_white),
    ("transparent", _derive_transparent),
    ("icon", _derive_icon),
    ("svg", _derive_svg),
)


def svg_wrapper(href: str, width: int, height: int) -> str:
    """Return SVG markup embedding the raster at *href* at its natural size.

    This is a container for the raster, not a tracing of it.
    """
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<image href={quoteattr(href)} width="{width}" height="{height}" />'
        "</svg>\n"
    )


def run_step(
    key: str,
    step: Step,
    buffer: PixelBuffer,
    source: SourceLogo,
    settings: DerivationSettings,
) -> StepOutcome:
    """Run one derivation step, converting any error into a recorded failure."""
    try:
        variant = step(buffer, source, settings)
    except Exception as exc:  # noqa: BLE001 - one variant must not sink the bundle
        failure = TransformFailure(key, str(exc) or exc.__class__.__name__)
        logger.warning("Skipping %s variant for %s: %s", key, source.id, failure.reason)
        return StepOutcome(key=key, failure=failure)
    return StepOutcome(key=key, variant=variant)


def _start_bundle(
    source: SourceLogo, palette: ColorPalette | None, settings: DerivationSettings
) -> Tuple[BundleBuilder, bytes | None, FetchError | None]:
    if palette is not None:
        logger.debug("Palette %s accepted for %s; not used by any transform", palette.id, source.id)

    builder = BundleBuilder(source)
    payload: bytes | None = None
    fetch_error: FetchError | None = None
    if settings.fetch_payloads:
        try:
            payload = fetch_bytes(source.url)
        except FetchError as exc:
            logger.warning("Original payload unavailable for %s: %s", source.id, exc.reason)
            builder.fail("original", exc.reason)
            fetch_error = exc
    builder.add("original", AssetVariant(url=source.url, data=payload))
    return builder, payload, fetch_error


def _load_base(source: SourceLogo, payload: bytes | None, fetch_error: FetchError | None) -> PixelBuffer:
    # a failed step-1 fetch is final; the source is not requested again
    if fetch_error is not None:
        raise LoadError(source.url, fetch_error.reason) from fetch_error
    return load(source.url, payload)


def _load_failed(builder: BundleBuilder, exc: LoadError) -> DerivedAssetBundle:
    logger.warning("Cannot derive variants for %s: %s", builder.source.id, exc)
    return builder.build(load_error=exc)


def process(
    source: SourceLogo,
    palette: ColorPalette | None = None,
    settings: DerivationSettings = DEFAULT_SETTINGS,
) -> DerivedAssetBundle:
    """Derive every variant of *source* in sequence.

    The returned bundle always holds ``original``. If the source image cannot
    be loaded, that is the only key and ``bundle.load_error`` is set. Failures
    of individual variants are logged and listed in ``bundle.failures``.
    """
    builder, payload, fetch_error = _start_bundle(source, palette, settings)
    try:
        buffer = _load_base(source, payload, fetch_error)
    except LoadError as exc:
        return _load_failed(builder, exc)

    for key, step in STEPS:
        builder.record(run_step(key, step, buffer.copy(), source, settings))

    bundle = builder.build()
    logger.info("Derived %d variants for %s", len(bundle), source.id)
    return bundle


async def process_async(
    source: SourceLogo,
    palette: ColorPalette | None = None,
    settings: DerivationSettings = DEFAULT_SETTINGS,
) -> DerivedAssetBundle:
    """Cooperative variant of :func:`process`.

    Fetching and decoding run off the event loop, and the derivation steps run
    concurrently, each on its own copy of the loaded buffer. A failing step
    never cancels its siblings.
    """
    builder, payload, fetch_error = await asyncio.to_thread(_start_bundle, source, palette, settings)
    try:
        buffer = await asyncio.to_thread(_load_base, source, payload, fetch_error)
    except LoadError as exc:
        return _load_failed(builder, exc)

    outcomes: Sequence[StepOutcome] = await asyncio.gather(
        *(
            asyncio.to_thread(run_step, key, step, buffer.copy(), source, settings)
            for key, step in STEPS
        )
    )
    for outcome in outcomes:
        builder.record(outcome)

    bundle = builder.build()
    logger.info("Derived %d variants for %s", len(bundle), source.id)
    return bundle
