import random
from datetime import date
from decimal import Decimal

from timebill.aggregation import (
    UNSPECIFIED_LABEL,
    Dimension,
    EntryFilter,
    aggregate,
    filter_entries,
    grand_totals,
)
from timebill.models import ServiceLocation, TimeEntry


def make_entry(entry_id, hours, value, **overrides):
    fields = dict(
        id=entry_id,
        date=date(2024, 12, entry_id),
        consultant_id=3,
        client_id=1,
        service_id=1,
        start_time="08:00",
        end_time="17:00",
        total_hours=Decimal(hours),
        total_value=Decimal(value),
    )
    fields.update(overrides)
    return TimeEntry(**fields)


def sample_entries():
    return [
        make_entry(1, "8.00", "1136.00", sector_id=1, service_type_id=1),
        make_entry(2, "8.00", "1136.00", service_id=2, sector_id=2, service_type_id=2),
        make_entry(3, "8.00", "1136.00", service_type_id=3),
    ]


def test_three_day_client_total():
    result = aggregate(sample_entries(), Dimension.CLIENT, labels={1: "SkyStone Brasil"})

    assert len(result.groups) == 1
    group = result.groups[0]
    assert group.label == "SkyStone Brasil"
    assert group.hours == Decimal("24.00")
    assert group.value == Decimal("3408.00")
    assert group.entries == 3
    assert result.total_entries == 3


def test_groups_sum_to_grand_total_for_every_dimension():
    entries = sample_entries() + [
        make_entry(4, "2.50", "300.00", client_id=2, service_id=3, consultant_id=1),
        make_entry(5, "1.25", "177.50", location=ServiceLocation.REMOTE),
    ]
    expected_hours, expected_value = grand_totals(entries)

    for dimension in Dimension:
        result = aggregate(entries, dimension)
        assert sum(g.hours for g in result.groups) == expected_hours
        assert sum(g.value for g in result.groups) == expected_value
        assert sum(g.entries for g in result.groups) == len(entries)


def test_missing_and_unknown_references_fold_into_unspecified():
    entries = sample_entries()
    result = aggregate(entries, Dimension.SECTOR, labels={1: "IT"})

    assert [g.label for g in result.groups] == [UNSPECIFIED_LABEL, "IT"]
    unspecified = result.group(None)
    # sector 2 is not in the labels, entry 3 has no sector
    assert unspecified.entries == 2
    assert unspecified.hours == Decimal("16.00")
    assert result.total_hours == Decimal("24.00")


def test_groups_are_ordered_by_value_then_hours_then_label():
    entries = [
        make_entry(1, "2.00", "100.00", client_id=1),
        make_entry(2, "3.00", "100.00", client_id=2),
        make_entry(3, "1.00", "500.00", client_id=3),
        make_entry(4, "3.00", "100.00", client_id=4),
    ]
    labels = {1: "Alpha", 2: "Delta", 3: "Gamma", 4: "Beta"}

    result = aggregate(entries, Dimension.CLIENT, labels=labels)

    assert [g.label for g in result.groups] == ["Gamma", "Beta", "Delta", "Alpha"]


def test_result_does_not_depend_on_input_order():
    entries = sample_entries() + [make_entry(4, "4.00", "480.00", consultant_id=1)]
    shuffled = entries[:]
    random.Random(7).shuffle(shuffled)

    assert aggregate(entries, Dimension.CONSULTANT) == aggregate(shuffled, Dimension.CONSULTANT)


def test_entries_without_totals_are_skipped_not_fatal():
    broken = make_entry(4, "0", "0", total_hours=None)
    negative = make_entry(5, "-1.00", "10.00")

    result = aggregate(sample_entries() + [broken, negative], Dimension.CLIENT)

    assert result.total_entries == 3
    assert result.total_value == Decimal("3408.00")
    assert [s.entry_id for s in result.skipped] == [4, 5]
    assert result.skipped[0].reason == "missing derived totals"


def test_entries_with_non_numeric_totals_are_skipped():
    garbled = make_entry(4, "0", "0", total_hours="n/a")
    untyped = make_entry(5, "0", "0", total_value=[])

    result = aggregate(sample_entries() + [garbled, untyped], Dimension.CONSULTANT)

    assert result.total_value == Decimal("3408.00")
    assert [(s.entry_id, s.reason) for s in result.skipped] == [
        (4, "non-numeric derived totals"),
        (5, "non-numeric derived totals"),
    ]
    assert grand_totals(sample_entries() + [garbled]) == grand_totals(sample_entries())


def test_location_groups_use_enum_values():
    entries = [
        make_entry(1, "1.00", "10.00", location=ServiceLocation.ON_SITE),
        make_entry(2, "2.00", "20.00", location=ServiceLocation.REMOTE),
    ]

    result = aggregate(entries, Dimension.LOCATION, labels={"on_site": "On-site", "remote": "Remote"})

    assert [(g.key, g.label) for g in result.groups] == [("remote", "Remote"), ("on_site", "On-site")]


def test_filter_entries_is_inclusive_on_both_ends():
    entries = sample_entries()
    entry_filter = EntryFilter(start_date=date(2024, 12, 2), end_date=date(2024, 12, 3))

    assert [e.id for e in filter_entries(entries, entry_filter)] == [2, 3]
    assert [e.id for e in filter_entries(entries, EntryFilter(consultant_id=99))] == []
    assert filter_entries(entries, None) == entries


def test_empty_input_yields_zero_totals():
    result = aggregate([], Dimension.PROJECT)

    assert result.groups == []
    assert result.total_hours == 0
    assert grand_totals([]) == (Decimal("0.00"), Decimal("0.00"))
