# Ensure src/ is importable (so `import beacon_ingest.scripts.cli` works under pytest).
import sys, pathlib
SRC = pathlib.Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pandas as pd
import pytest

BEACON_HEADER = [
    "uuid", "number", "site_name", "system", "distance", "beacon_type", "series", "set",
    "image_name_1", "image_name_2", "image_name_3", "image_name_4", "image_name_5",
]

BEACON_ROWS = [
    ["u1", "001", "STONEHENGE", "Sol", "10ly", "Monument", "A", "1", "STONEHENGE", "", "", "", ""],
    ["", "002", "Nowhere", "Sol", "0ly", "Monument", "A", "1", "", "", "", "", ""],
    ["u3", "003", "Pillars", "Eagle", "7000ly", "Nebula", "B", "2", "pillars", "UNKNOWN", "Stonehenge", "", ""],
]

IMAGE_ROWS = [
    ["1", "Stonehenge", "https://x/s.png"],
    ["2", "Pillars", "https://x/p.png"],
]


def write_csv(path, rows, header=None):
    df = pd.DataFrame(rows, columns=header)
    df.to_csv(path, index=False, header=header is not None)
    return path


@pytest.fixture
def sheet_files(tmp_path):
    raw = tmp_path / "raw"
    raw.mkdir(exist_ok=True)
    beacons = write_csv(raw / "beacons.csv", BEACON_ROWS, BEACON_HEADER)
    images = write_csv(raw / "images.csv", IMAGE_ROWS)
    return beacons, images


@pytest.fixture
def config_dict(tmp_path):
    out = tmp_path / "out"
    return {
        "local_dir": str(tmp_path / "raw"),
        "http_timeout": 5,
        "sources": {
            "beacons": {"url": "https://sheets.test/beacons.csv", "path": str(tmp_path / "raw" / "beacons.csv"), "header": True},
            "images": {"url": "https://sheets.test/images.csv", "path": str(tmp_path / "raw" / "images.csv")},
        },
        "outputs": {
            "beacons": str(out / "tourist-beacon.json"),
            "images": str(out / "tourist-beacon-images.json"),
            "manifest": str(out / "manifest.json"),
        },
    }
