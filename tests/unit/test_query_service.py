"""
Unit tests for QueryService.

Runs against the 7-order sample dataset unless a test builds its own.
"""

import pytest

from models.record import Record, RecordStatus
from services.query_service import (
    UNKNOWN_LABEL,
    group_counts,
    matches_criterion,
)

from tests.factories import make_dataset, make_row


@pytest.fixture
async def sample_snapshot(tracker, sample_dataset):
    return await tracker.ingest(sample_dataset, "sample_data.csv")


class TestMatchesCriterion:
    """Tests for matches_criterion."""

    def test_list_membership(self):
        assert matches_criterion("LOC001", ["LOC001", "LOC002"])
        assert not matches_criterion("LOC003", ["LOC001", "LOC002"])

    def test_empty_list_matches_anything(self):
        assert matches_criterion("LOC003", [])

    def test_string_substring_case_insensitive(self):
        assert matches_criterion("Acme Corp", "acme")
        assert not matches_criterion("TechGiant", "acme")

    def test_equality_for_other_types(self):
        assert matches_criterion(5, 5)
        assert not matches_criterion(5, 6)
        assert not matches_criterion(None, "acme")


class TestGroupCounts:
    """Tests for group_counts."""

    def test_blank_values_counted_as_unknown(self):
        records = [
            Record(
                identifier=i,
                fields={"GPU Model": gpu},
                snapshot_id="s",
                first_seen="t",
                last_seen="t",
                status=RecordStatus.NEW,
            )
            for i, gpu in enumerate(["RTX 3080", None, "RTX 3080"])
        ]

        groups = group_counts(records, "GPU Model")

        assert [(g.value, g.count) for g in groups] == [("RTX 3080", 2), (UNKNOWN_LABEL, 1)]


class TestFilter:
    """Tests for filtered."""

    async def test_no_criteria_returns_all(self, tracker, sample_snapshot):
        assert len(await tracker.filtered()) == 7

    async def test_list_criterion(self, tracker, sample_snapshot):
        records = await tracker.filtered({"Location Code": ["LOC001"]})
        assert sorted(r.identifier for r in records) == [1001, 1003]

    async def test_combined_criteria(self, tracker, sample_snapshot):
        records = await tracker.filtered({"Customer": "tech", "Fabric Type": ["Cotton"]})
        assert [r.identifier for r in records] == [1005]

    async def test_internal_keys_ignored(self, tracker, sample_snapshot):
        assert len(await tracker.filtered({"_snapshotId": "whatever"})) == 7

    async def test_scoped_to_snapshot(self, tracker, sample_snapshot):
        second = await tracker.ingest(make_dataset([make_row(2001)]), "b.csv")

        assert len(await tracker.filtered(snapshot_id=sample_snapshot)) == 7
        assert len(await tracker.filtered(snapshot_id=second)) == 1
        assert len(await tracker.filtered()) == 8


class TestSearch:
    """Tests for search."""

    async def test_matches_any_field(self, tracker, sample_snapshot):
        records = await tracker.search("rtx 30")
        assert sorted(r.identifier for r in records) == [1001, 1003, 1005, 1006]

    async def test_matches_numbers_as_text(self, tracker, sample_snapshot):
        records = await tracker.search("1004")
        assert [r.identifier for r in records] == [1004]

    async def test_empty_query_without_snapshot(self, tracker, sample_snapshot):
        assert await tracker.search("   ") == []

    async def test_empty_query_with_snapshot(self, tracker, sample_snapshot):
        assert len(await tracker.search("", sample_snapshot)) == 7


class TestAggregates:
    """Tests for distinct, grouped, summary and location_detail."""

    async def test_distinct_sorted(self, tracker, sample_snapshot):
        assert await tracker.distinct("Location Code") == ["LOC001", "LOC002", "LOC003", "LOC004"]
        assert await tracker.distinct("Quantity") == [1, 2, 3, 4, 5, 6]

    async def test_distinct_unknown_field(self, tracker, sample_snapshot):
        assert await tracker.distinct("Nope") == []

    async def test_grouped_most_common_first(self, tracker, sample_snapshot):
        groups = await tracker.grouped("Customer")

        assert groups[0].count == 2
        assert {g.value for g in groups if g.count == 2} == {"Acme Corp", "TechGiant", "DataSystems"}
        assert groups[-1].value == "CloudHost"

    async def test_summary(self, tracker, sample_snapshot):
        summary = await tracker.summary()

        assert summary.total_records == 7
        assert summary.locations == 4
        assert summary.gpu_models == 6
        assert summary.fabric_types == 5

    async def test_summary_empty(self, tracker):
        summary = await tracker.summary()
        assert summary.total_records == 0

    async def test_location_detail(self, tracker, sample_snapshot):
        detail = await tracker.location_detail("LOC002")

        assert detail.total_records == 2
        assert detail.customers == ["TechGiant"]
        assert {g.value for g in detail.gpu_models} == {"RTX 4090", "RTX 3090"}
        assert {g.value for g in detail.fabric_types} == {"Polyester", "Cotton"}

    async def test_location_detail_unknown(self, tracker, sample_snapshot):
        detail = await tracker.location_detail("LOC999")

        assert detail.total_records == 0
        assert detail.records == []
