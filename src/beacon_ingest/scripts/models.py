# File: beacon_ingest/scripts/models.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence, Tuple

# A table line as parsed: string cells in column order.
RawRow = Sequence[str]

BEACON_FIELDS: Tuple[str, ...] = (
    "uuid", "number", "site_name", "system", "distance", "beacon_type", "series", "set",
)


@dataclass(frozen=True)
class ImageRecord:
    id: str
    name: str
    src: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageRecord":
        return cls(id=data["id"], name=data["name"], src=data["src"])


@dataclass(frozen=True)
class BeaconRecord:
    uuid: str
    number: str
    site_name: str
    system: str
    distance: str
    beacon_type: str
    series: str
    set: str
    images: Tuple[ImageRecord, ...] = field(default_factory=tuple)
    captured_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {name: getattr(self, name) for name in BEACON_FIELDS}
        out["images"] = [img.to_dict() for img in self.images]
        out["captured_at"] = self.captured_at
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BeaconRecord":
        images: List[ImageRecord] = [ImageRecord.from_dict(i) for i in data.get("images", [])]
        return cls(
            **{name: data[name] for name in BEACON_FIELDS},
            images=tuple(images),
            captured_at=data.get("captured_at", ""),
        )
