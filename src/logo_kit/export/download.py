"""Save individual bundle variants to disk."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import MissingFormatError
from ..io.fetch import fetch_bytes
from ..io.models import FORMAT_KEYS, DerivedAssetBundle

logger = logging.getLogger(__name__)


def extension_for(key: str) -> str:
    """Return the file extension used when saving the *key* variant."""
    return ".svg" if key == "svg" else ".png"


def download(
    bundle: DerivedAssetBundle,
    key: str,
    filename: str,
    dest_dir: str | Path = ".",
) -> Path:
    """Write the *key* variant of *bundle* to ``dest_dir/filename``.

    The key's extension is appended when *filename* has none. Raises
    :class:`~logo_kit.errors.MissingFormatError` if the variant is absent,
    for example because its derivation failed.
    """
    if key not in FORMAT_KEYS or key not in bundle:
        logger.error("Format %s not available", key)
        raise MissingFormatError(key)

    variant = bundle[key]
    data = variant.data if variant.data is not None else fetch_bytes(variant.url)

    name = filename if Path(filename).suffix else f"{filename}{extension_for(key)}"
    target = Path(dest_dir) / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    logger.debug("Saved %s variant to %s (%d bytes)", key, target, len(data))
    return target
