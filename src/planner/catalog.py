"""Catalog browsing: filter, search and sort device lists."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Literal

from .enums import DeviceCategory
from .models import BaseDevice

SortKey = Literal["newest", "score", "price", "name"]

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _created(device: BaseDevice) -> datetime:
    created = device.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=UTC)
    return created


def filter_devices(
    devices: Iterable[BaseDevice],
    *,
    category: DeviceCategory | str | None = None,
    tag: str | None = None,
    search: str | None = None,
) -> list[BaseDevice]:
    """Filter devices by category, tag and a case-insensitive name/brand search."""
    needle = search.strip().lower() if search else None
    result = []
    for device in devices:
        if category is not None and device.category != category:
            continue
        if tag is not None and tag not in device.tags:
            continue
        if needle and needle not in device.name.lower() and needle not in device.brand.lower():
            continue
        result.append(device)
    return result


def sort_devices(devices: Iterable[BaseDevice], sort: SortKey = "newest") -> list[BaseDevice]:
    """Sort a device list. ``newest`` is the default catalog order."""
    devices = list(devices)
    if sort == "score":
        return sorted(devices, key=lambda d: (-d.score, d.name.lower()))
    if sort == "price":
        return sorted(devices, key=lambda d: (d.price, d.name.lower()))
    if sort == "name":
        return sorted(devices, key=lambda d: d.name.lower())
    return sorted(devices, key=_created, reverse=True)


def all_tags(devices: Iterable[BaseDevice]) -> list[str]:
    """Distinct tags across devices, alphabetically."""
    return sorted({tag for device in devices for tag in device.tags})


def gateway_candidates(devices: Iterable[BaseDevice]) -> list[BaseDevice]:
    """Devices that can be assigned at house level."""
    return [device for device in devices if device.category == DeviceCategory.GATEWAY]
