"""Phase extractor registry.

Maps canonical phase names to their extractor and, optionally, the name of the
display adapter the UI should use for the raw artifact. Every phase name (known
or not) resolves to some extractor: phases without an entry get the generic one.

To add a phase: write an extractor under ``extractors/`` and register it in
``_ENTRIES``.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from .extractors.base import GenericExtractor, PhaseExtractor
from .extractors.opportunity import OpportunityExtractor
from .phases import normalize_planning_phase, ordered_phases


@dataclass(frozen=True)
class RegistryEntry:
    extractor: PhaseExtractor
    display_adapter: str | None = None


DEFAULT_EXTRACTOR: PhaseExtractor = GenericExtractor()

_ENTRIES: Mapping[str, RegistryEntry] = MappingProxyType(
    {
        "opportunity": RegistryEntry(extractor=OpportunityExtractor(), display_adapter="opportunity-view"),
    }
)


def _entry(phase: str) -> RegistryEntry | None:
    canonical = normalize_planning_phase(phase)
    if canonical is None:
        return None
    return _ENTRIES.get(canonical)


def get_extractor_for_phase(phase: str) -> PhaseExtractor:
    entry = _entry(phase)
    return entry.extractor if entry is not None else DEFAULT_EXTRACTOR


def get_display_adapter_for_phase(phase: str) -> str | None:
    """Name of the phase-specific display adapter; ``None`` means use the generic JSON view."""
    entry = _entry(phase)
    return entry.display_adapter if entry is not None else None


def has_custom_extractor(phase: str) -> bool:
    return _entry(phase) is not None


def list_registered_phases() -> list[str]:
    return ordered_phases(_ENTRIES)


__all__ = [
    "DEFAULT_EXTRACTOR",
    "RegistryEntry",
    "get_display_adapter_for_phase",
    "get_extractor_for_phase",
    "has_custom_extractor",
    "list_registered_phases",
]
