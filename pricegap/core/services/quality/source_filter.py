"""Restrict quality maps to selected data sources."""

from __future__ import annotations

from collections import Counter
from collections.abc import Collection

from pricegap.core.models import QualityMap


def filter_by_sources(
    quality_map: QualityMap,
    selected_sources: Collection[str],
    *,
    keep_expected_gaps: bool = False,
) -> QualityMap:
    """Keep only entries whose source is selected.

    An empty selection returns ``quality_map`` itself. Real observations
    without a source match ``Unknown``. Entries below quality 1.0 carry no
    source and are dropped, unless ``keep_expected_gaps`` keeps the 0.7
    weekend/holiday entries.
    """

    if not selected_sources:
        return quality_map

    selected = set(selected_sources)
    filtered: QualityMap = {}
    for day, entry in quality_map.items():
        if entry.is_real:
            if entry.source_label in selected:
                filtered[day] = entry
        elif keep_expected_gaps and entry.is_expected_gap:
            filtered[day] = entry
    return filtered


def source_breakdown(quality_map: QualityMap) -> list[tuple[str, int]]:
    """Count real observations per source, most frequent first."""

    counts = Counter(entry.source_label for entry in quality_map.values() if entry.is_real)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


def available_sources(quality_map: QualityMap) -> list[str]:
    return sorted({entry.source_label for entry in quality_map.values() if entry.is_real and entry.source_label})


__all__ = ["available_sources", "filter_by_sources", "source_breakdown"]
