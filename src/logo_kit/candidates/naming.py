"""Stable identifiers for logo candidates within a generation batch."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..io.models import SourceLogo

CandidateLike = Mapping[str, Any]

FALLBACK_PREFIX = "logo-fallback-"


def fallback_id(index: int) -> str:
    return f"{FALLBACK_PREFIX}{index}"


def resolve_logo_ids(candidates: Sequence[CandidateLike]) -> list[dict[str, Any]]:
    """Return copies of *candidates* where every entry carries an ``id``.

    Candidates with a missing or empty id get ``logo-fallback-<index>``, based
    on their position in the batch.
    """
    resolved: list[dict[str, Any]] = []
    for index, candidate in enumerate(candidates):
        candidate_copy: dict[str, Any] = dict(candidate)
        if not candidate_copy.get("id"):
            candidate_copy["id"] = fallback_id(index)
        resolved.append(candidate_copy)
    return resolved


def to_source_logos(candidates: Sequence[CandidateLike]) -> list[SourceLogo]:
    """Resolve ids and convert *candidates* into :class:`SourceLogo` values."""
    return [
        SourceLogo(
            id=str(candidate["id"]),
            url=str(candidate.get("url") or ""),
            prompt=candidate.get("prompt"),
            selected=bool(candidate.get("selected", False)),
        )
        for candidate in resolve_logo_ids(candidates)
    ]


def select_logo(candidates: Sequence[CandidateLike], logo_id: str) -> list[dict[str, Any]]:
    """Mark the candidate identified by *logo_id* as the only selected one.

    Raises :class:`KeyError` if no candidate resolves to *logo_id*.
    """
    resolved = resolve_logo_ids(candidates)
    if not any(candidate["id"] == logo_id for candidate in resolved):
        raise KeyError(logo_id)
    for candidate in resolved:
        candidate["selected"] = candidate["id"] == logo_id
    return resolved
