"""
Line Partitioner
================
Slices cleaned receipt lines into header / items / totals / footer views
using the zone tags produced by the external image-region classifier.

Only the *presence* of a tag is used. Lines are never matched against the
region's bounding box; the slice is a fixed proportion of the line count
(a known positional approximation):

  Header  → first 20% of lines   (at least 3)
  Items   → lines 20% .. 70%
  Totals  → last 30% of lines    (at least 5)
  Footer  → last 15% of lines    (at least 2)
  Unknown → nothing

When no region list is given, or it has no tag of the requested type, the
partition is empty and extractors fall back to their own default view.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from loguru import logger

from receipt_models import ClassifiedLineRegion, RegionType


HEADER_FRACTION = 0.2
HEADER_MIN_LINES = 3
ITEMS_START_FRACTION = 0.2
ITEMS_END_FRACTION = 0.7
TOTALS_FRACTION = 0.3
TOTALS_MIN_LINES = 5
FOOTER_FRACTION = 0.15
FOOTER_MIN_LINES = 2


def _clamp(index: int, n: int) -> int:
    return max(0, min(index, n))


def _last(lines: Sequence[str], count: int) -> List[str]:
    count = _clamp(count, len(lines))
    return list(lines[len(lines) - count:])


def partition(
    lines: Sequence[str],
    regions: Sequence[ClassifiedLineRegion],
    region_type: RegionType,
) -> List[str]:
    """
    Lines belonging to one region type.

    Returns:
        Sub-sequence of lines, empty when the region type was not tagged
    """
    if not regions:
        return []
    if not any(region.region_type == region_type for region in regions):
        return []

    n = len(lines)

    if region_type == RegionType.HEADER:
        count = max(int(n * HEADER_FRACTION), HEADER_MIN_LINES)
        return list(lines[:_clamp(count, n)])

    if region_type == RegionType.ITEMS:
        start = _clamp(int(n * ITEMS_START_FRACTION), n)
        end = _clamp(int(n * ITEMS_END_FRACTION), n)
        return list(lines[start:end])

    if region_type == RegionType.TOTALS:
        return _last(lines, max(int(n * TOTALS_FRACTION), TOTALS_MIN_LINES))

    if region_type == RegionType.FOOTER:
        return _last(lines, max(int(n * FOOTER_FRACTION), FOOTER_MIN_LINES))

    return []


@dataclass(frozen=True)
class PartitionedLines:
    """Every region view of one receipt."""
    header: List[str] = field(default_factory=list)
    items: List[str] = field(default_factory=list)
    totals: List[str] = field(default_factory=list)
    footer: List[str] = field(default_factory=list)


class LinePartitioner:
    """
    Partition all regions at once.

    Usage
    -----
    partitioner = LinePartitioner()
    parts = partitioner.partition_all(lines, regions)
    header = parts.header or lines[:5]
    """

    def partition_all(
        self,
        lines: Sequence[str],
        regions: Sequence[ClassifiedLineRegion],
    ) -> PartitionedLines:
        parts = PartitionedLines(
            header=partition(lines, regions, RegionType.HEADER),
            items=partition(lines, regions, RegionType.ITEMS),
            totals=partition(lines, regions, RegionType.TOTALS),
            footer=partition(lines, regions, RegionType.FOOTER),
        )
        logger.debug(
            f"[LinePartitioner] lines={len(lines)} regions={len(regions)} "
            f"header={len(parts.header)} items={len(parts.items)} "
            f"totals={len(parts.totals)} footer={len(parts.footer)}"
        )
        return parts
