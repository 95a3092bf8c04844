"""
Tests for the Line Partitioner
"""

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from line_partitioner import LinePartitioner, PartitionedLines, partition
from receipt_models import ClassifiedLineRegion, RegionType


def tag(*types):
    return [ClassifiedLineRegion(region_type=t) for t in types]


@pytest.fixture
def lines():
    """Ten numbered lines"""
    return [f"line {i}" for i in range(10)]


@pytest.fixture
def all_regions():
    return tag(RegionType.HEADER, RegionType.ITEMS, RegionType.TOTALS, RegionType.FOOTER)


def test_no_regions_gives_empty(lines):
    """Test that an empty region list partitions nothing"""
    for region_type in RegionType:
        assert partition(lines, [], region_type) == []


def test_untagged_region_gives_empty(lines):
    """Test that a type absent from the region list partitions nothing"""
    regions = tag(RegionType.HEADER)
    assert partition(lines, regions, RegionType.ITEMS) == []
    assert partition(lines, regions, RegionType.TOTALS) == []


def test_header_slice(lines, all_regions):
    """Test header: first 20% with a minimum of 3"""
    assert partition(lines, all_regions, RegionType.HEADER) == lines[:3]


def test_items_slice(lines, all_regions):
    """Test items: lines 20% .. 70%"""
    assert partition(lines, all_regions, RegionType.ITEMS) == lines[2:7]


def test_totals_slice(lines, all_regions):
    """Test totals: last 30% with a minimum of 5"""
    assert partition(lines, all_regions, RegionType.TOTALS) == lines[5:]


def test_footer_slice(lines, all_regions):
    """Test footer: last 15% with a minimum of 2"""
    assert partition(lines, all_regions, RegionType.FOOTER) == lines[8:]


def test_unknown_region_gives_empty(lines):
    """Test that UNKNOWN tags never select lines"""
    assert partition(lines, tag(RegionType.UNKNOWN), RegionType.UNKNOWN) == []


def test_minimums_clamp_to_short_receipts(all_regions):
    """Test minimum counts never index past the receipt"""
    short = ["a", "b"]
    assert partition(short, all_regions, RegionType.HEADER) == short
    assert partition(short, all_regions, RegionType.ITEMS) == ["a"]
    assert partition(short, all_regions, RegionType.TOTALS) == short
    assert partition(short, all_regions, RegionType.FOOTER) == short


def test_empty_lines(all_regions):
    """Test partitioning an empty line list"""
    for region_type in RegionType:
        assert partition([], all_regions, region_type) == []


def test_partitions_are_in_order_subsequences(all_regions):
    """Test every slice preserves line order"""
    lines = [f"line {i}" for i in range(23)]
    for region_type in RegionType:
        part = partition(lines, all_regions, region_type)
        indexes = [lines.index(line) for line in part]
        assert indexes == sorted(indexes)


def test_partition_all(lines):
    """Test the all-regions view"""
    parts = LinePartitioner().partition_all(lines, tag(RegionType.HEADER, RegionType.TOTALS))

    assert isinstance(parts, PartitionedLines)
    assert parts.header == lines[:3]
    assert parts.items == []
    assert parts.totals == lines[5:]
    assert parts.footer == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
