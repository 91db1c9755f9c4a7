"""Output helpers for persisting derivation results."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from .models import BundleReport, DerivedAssetBundle


def build_report(logo_id: str, bundle: DerivedAssetBundle, files: dict[str, Path]) -> BundleReport:
    """Summarise *bundle* and the files written for it."""
    return BundleReport(
        logo_id=logo_id,
        source_url=bundle.original.url,
        files={key: path.name for key, path in files.items()},
        failures=dict(bundle.failures),
        load_error=str(bundle.load_error) if bundle.load_error else None,
    )


def write_report(path: Path, report: BundleReport) -> Path:
    """Write a bundle report to *path* as JSON and return the path."""
    path.write_text(json.dumps(asdict(report), indent=2), encoding="utf-8")
    return path
