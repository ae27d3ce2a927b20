import pytest

from beacon_ingest.scripts.errors import ParseError
from beacon_ingest.scripts.image_index import build_image_index
from beacon_ingest.scripts.models import ImageRecord
from beacon_ingest.scripts.resolve_beacons import (
    SITE_NAME_LAYOUT,
    BeaconLayout,
    ResolveStats,
    resolve_beacons,
)

TS = "2024-05-01T12:00:00+00:00"


@pytest.fixture
def index():
    return build_image_index([
        ["1", "Stonehenge", "https://x/s.png"],
        ["2", "Pillars", "https://x/p.png"],
    ])


def test_stonehenge_scenario(index):
    row = ["u1", "001", "STONEHENGE", "Sol", "10ly", "Monument", "A", "1", "STONEHENGE", "", "", "", ""]
    [beacon] = resolve_beacons([row], index, TS)
    assert beacon.images == (ImageRecord(id="1", name="STONEHENGE", src="https://x/s.png"),)
    assert beacon.captured_at == TS


def test_scalar_fields_are_verbatim(index):
    row = [" u1 ", "007", "stonehenge", "Sol ", "10 ly", "monument", "a", "01"]
    [beacon] = resolve_beacons([row], index, TS)
    assert (beacon.uuid, beacon.number, beacon.site_name, beacon.system) == (" u1 ", "007", "stonehenge", "Sol ")
    assert (beacon.distance, beacon.beacon_type, beacon.series, beacon.set) == ("10 ly", "monument", "a", "01")


def test_empty_or_missing_uuid_is_skipped(index):
    rows = [
        ["", "002", "Nowhere", "Sol", "0ly", "Monument", "A", "1"],
        [],
        ["u3", "003", "Pillars", "Eagle", "7000ly", "Nebula", "B", "2"],
    ]
    stats = ResolveStats()
    beacons = resolve_beacons(rows, index, TS, stats=stats)
    assert [b.uuid for b in beacons] == ["u3"]
    assert stats.skipped_empty_uuid == 2
    assert stats.rows == 3


def test_unmatched_and_blank_cells_contribute_nothing(index):
    row = ["u1", "001", "x", "Sol", "1ly", "T", "A", "1", "UNKNOWN", "", "pillars", "Stonehenge", "nope"]
    stats = ResolveStats()
    [beacon] = resolve_beacons([row], index, TS, stats=stats)
    assert [img.id for img in beacon.images] == ["2", "1"]
    assert stats.unmatched_images == 2


def test_short_row_without_image_cells_does_not_crash(index):
    row = ["u1", "001", "x", "Sol", "1ly", "T", "A", "1", "pillars"]
    [beacon] = resolve_beacons([row], index, TS)
    assert [img.name for img in beacon.images] == ["PILLARS"]

    [bare] = resolve_beacons([row[:8]], index, TS)
    assert bare.images == ()


def test_row_missing_core_cells_is_parse_error(index):
    with pytest.raises(ParseError) as exc:
        resolve_beacons([["u1", "001", "x", "Sol", "1ly", "T", "A", "1"], ["u2", "002", "y"]], index, TS)
    assert exc.value.row == 1


def test_shared_timestamp_and_source_order(index):
    rows = [[f"u{i}", str(i), "s", "Sol", "1ly", "T", "A", "1"] for i in range(5)]
    beacons = resolve_beacons(rows, index, TS)
    assert [b.uuid for b in beacons] == ["u0", "u1", "u2", "u3", "u4"]
    assert {b.captured_at for b in beacons} == {TS}


def test_site_name_layout_keeps_single_image(index):
    matched = ["u1", "001", "Stonehenge", "Sol", "10ly", "Monument", "A", "1", "Pillars"]
    unmatched = ["u2", "002", "Elsewhere", "Sol", "10ly", "Monument", "A", "1"]
    first, second = resolve_beacons([matched, unmatched], index, TS, layout=SITE_NAME_LAYOUT)
    assert [img.id for img in first.images] == ["1"]
    assert second.images == ()


def test_single_image_layout_stops_at_first_match(index):
    layout = BeaconLayout(image_columns=(8, 9, 10), single_image=True)
    row = ["u1", "001", "x", "Sol", "1ly", "T", "A", "1", "unknown", "pillars", "stonehenge"]
    [beacon] = resolve_beacons([row], index, TS, layout=layout)
    assert [img.id for img in beacon.images] == ["2"]
