"""Case-insensitive keyword ladders used to classify free text."""
from __future__ import annotations

from typing import Sequence, TypeVar

T = TypeVar("T")

Ladder = Sequence[tuple[T, Sequence[str]]]


def classify(text: str | None, ladder: Ladder[T], default: T) -> T:
    """Return the label of the first rung whose keywords occur in ``text``."""
    if not text:
        return default
    lowered = text.lower()
    for label, keywords in ladder:
        if any(keyword in lowered for keyword in keywords):
            return label
    return default


IMPORTANCE_LADDER: Ladder[str] = (
    ("critical", ("critical", "fatal", "blocker", "must", "required", "essential")),
    ("high", ("important", "significant", "major", "key", "core")),
    ("low", ("minor", "nice to have", "optional", "future")),
)

TAKEAWAY_CATEGORY_LADDER: Ladder[str] = (
    ("blocker", ("blocker", "cannot", "impossible", "prevented", "blocked")),
    ("risk", ("risk", "concern", "threat", "danger", "warning", "problem")),
    ("opportunity", ("opportunity", "potential", "advantage", "could", "possible")),
)

IMPACT_LADDER: Ladder[str] = (
    ("high", ("critical", "major", "significant", "substantial", "high", "large", "massive")),
    ("low", ("minor", "small", "minimal", "slight", "low")),
)

PRIORITY_LADDER: Ladder[str] = (
    ("high", ("p0", "high", "critical")),
    ("low", ("p3", "low")),
)

SEVERITY_LADDER: Ladder[str] = (
    ("critical", ("critical", "blocking", "p0")),
    ("minor", ("minor", "p3", "low")),
)

METRIC_TYPE_LADDER: Ladder[str] = (
    ("histogram", ("histogram", "distribution")),
    ("gauge", ("gauge", "current", "rate")),
)

AUTH_TYPE_LADDER: Ladder[str] = (
    ("jwt", ("jwt",)),
    ("session", ("session",)),
    ("api-key", ("api-key", "apikey")),
    ("none", ("none", "public")),
)


__all__ = [
    "AUTH_TYPE_LADDER",
    "IMPACT_LADDER",
    "IMPORTANCE_LADDER",
    "METRIC_TYPE_LADDER",
    "PRIORITY_LADDER",
    "SEVERITY_LADDER",
    "TAKEAWAY_CATEGORY_LADDER",
    "Ladder",
    "classify",
]
