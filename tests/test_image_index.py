import pytest

from beacon_ingest.scripts.errors import ParseError
from beacon_ingest.scripts.image_index import build_image_index, image_records
from beacon_ingest.scripts.models import ImageRecord


def test_index_keys_are_uppercased_names():
    index = build_image_index([["1", "Stonehenge", "https://x/s.png"], ["2", "pillars", "https://x/p.png"]])
    assert set(index) == {"STONEHENGE", "PILLARS"}
    assert index["STONEHENGE"] == ImageRecord(id="1", name="STONEHENGE", src="https://x/s.png")


def test_duplicate_names_last_row_wins():
    index = build_image_index([
        ["1", "Stonehenge", "https://x/old.png"],
        ["9", "STONEHENGE", "https://x/new.png"],
    ])
    assert len(index) == 1
    assert index["STONEHENGE"].id == "9"
    assert index["STONEHENGE"].src == "https://x/new.png"


def test_extra_cells_are_ignored():
    index = build_image_index([["1", "Arch", "https://x/a.png", "note", "more"]])
    assert index["ARCH"].src == "https://x/a.png"


def test_short_row_is_parse_error():
    with pytest.raises(ParseError) as exc:
        build_image_index([["1", "Arch", "https://x/a.png"], ["2", "Bridge"]])
    assert exc.value.row == 1


def test_image_records_sorted_by_name():
    index = build_image_index([["2", "zeta", "z"], ["1", "alpha", "a"], ["3", "Mid", "m"]])
    assert [r.name for r in image_records(index)] == ["ALPHA", "MID", "ZETA"]
