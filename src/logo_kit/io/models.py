"""Data models shared across the logo derivation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Literal, Mapping, Tuple

from ..errors import LoadError

FormatKey = Literal["original", "negative", "black", "white", "transparent", "svg", "icon"]

FORMAT_KEYS: Tuple[FormatKey, ...] = (
    "original",
    "negative",
    "black",
    "white",
    "transparent",
    "svg",
    "icon",
)


@dataclass(frozen=True, slots=True)
class SourceLogo:
    """A logo candidate returned by an external image generator."""

    id: str
    url: str
    prompt: str | None = None
    selected: bool = False

    def __post_init__(self) -> None:
        if not self.url:
            raise ValueError("SourceLogo requires a non-empty url")


@dataclass(frozen=True, slots=True)
class Color:
    """One named colour of a generated palette."""

    name: str
    hex: str
    rgb: str = ""


@dataclass(frozen=True, slots=True)
class ColorPalette:
    """A generated colour palette.

    Accepted by the pipeline but not consumed by any transform yet.
    """

    id: str
    colors: Tuple[Color, ...] = ()
    selected: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColorPalette":
        """Build a palette from the generator's JSON shape."""
        colors = tuple(
            Color(
                name=str(item.get("name", "")),
                hex=str(item.get("hex", "")),
                rgb=str(item.get("rgb", "")),
            )
            for item in data.get("colors") or []
            if isinstance(item, Mapping)
        )
        return cls(
            id=str(data.get("id") or "palette"),
            colors=colors,
            selected=bool(data.get("selected", False)),
        )


@dataclass(frozen=True, slots=True)
class AssetVariant:
    """One named rendition of a logo."""

    url: str
    data: bytes | None = None
    mime_type: str = "image/png"
    size: Tuple[int, int] | None = None
    content: str | None = None


@dataclass(frozen=True)
class DerivedAssetBundle(Mapping[str, AssetVariant]):
    """Read-only mapping of format keys to derived variants."""

    variants: Mapping[str, AssetVariant]
    failures: Mapping[str, str] = field(default_factory=dict)
    load_error: LoadError | None = None

    def __post_init__(self) -> None:
        if "original" not in self.variants:
            raise ValueError("A bundle always holds the 'original' variant")
        object.__setattr__(self, "variants", MappingProxyType(dict(self.variants)))
        object.__setattr__(self, "failures", MappingProxyType(dict(self.failures)))

    def __getitem__(self, key: str) -> AssetVariant:
        return self.variants[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.variants)

    def __len__(self) -> int:
        return len(self.variants)

    @property
    def original(self) -> AssetVariant:
        return self.variants["original"]

    def available(self) -> List[str]:
        """Return the populated keys in canonical order."""
        return [key for key in FORMAT_KEYS if key in self.variants]

    def raise_for_load_error(self) -> None:
        """Re-raise the fatal load error recorded for this run, if any."""
        if self.load_error is not None:
            raise self.load_error


@dataclass(slots=True)
class BundleReport:
    """Summary of one logo's derivation, written next to its files."""

    logo_id: str
    source_url: str
    files: Dict[str, str] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    load_error: str | None = None
