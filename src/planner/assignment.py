"""Room/device assignment and ownership quotas.

A base device may be placed in many rooms. Each placement is a
``RoomDeviceInstance`` with its own display name and an "owned" flag.
The number of owned placements of a base device, across all rooms plus
the house-level gateway assignment, may not exceed the device's
``quantity``.

All operations here return new ``Room`` objects; callers persist them
as full-document overwrites.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from src.exceptions import NotFoundError, QuotaExceededError, ValidationError

from .models import (
    BaseDevice,
    Room,
    RoomDeviceInstance,
    RoomTemplate,
    new_id,
)

logger = logging.getLogger(__name__)

TEMPLATE_NAME_SUFFIX = "Template"


@dataclass(frozen=True)
class OwnershipQuota:
    """Owned vs. used units of one base device."""

    device_id: str
    owned: int
    used: int

    @property
    def remaining(self) -> int:
        return max(self.owned - self.used, 0)

    @property
    def exhausted(self) -> bool:
        return self.used >= self.owned


def count_owned_instances(rooms: Iterable[Room]) -> Counter[str]:
    """Count ``is_owned`` instances per base device id."""
    counts: Counter[str] = Counter()
    for room in rooms:
        for instance in room.devices:
            if instance.is_owned:
                counts[instance.device_id] += 1
    return counts


def _merge_draft(rooms: Iterable[Room], draft: Room | None) -> list[Room]:
    """Replace the persisted copy of the room under edit with its live draft."""
    rooms = list(rooms)
    if draft is None:
        return rooms
    merged = [draft if room.id == draft.id else room for room in rooms]
    if not any(room.id == draft.id for room in rooms):
        merged.append(draft)
    return merged


class OwnershipLedger:
    """Per-device quota view over all rooms.

    The room currently being edited is counted from its in-progress
    draft instead of its persisted state so that its instances are not
    counted twice.
    """

    def __init__(
        self,
        devices: Mapping[str, BaseDevice],
        rooms: Iterable[Room],
        *,
        draft: Room | None = None,
        house_gateway_ids: Iterable[str] = (),
    ):
        self._devices = devices
        self._room_usage = count_owned_instances(_merge_draft(rooms, draft))
        self._house_gateway_ids = set(house_gateway_ids)

    def room_usage(self, device_id: str) -> int:
        """Owned instances of a device across rooms only."""
        return self._room_usage.get(device_id, 0)

    def holds_house_unit(self, device_id: str) -> bool:
        return device_id in self._house_gateway_ids

    def quota(self, device_id: str) -> OwnershipQuota:
        """Get owned/used counts for a base device.

        Unknown device ids report zero owned units.
        """
        device = self._devices.get(device_id)
        owned = device.quantity if device is not None else 0
        used = self._room_usage.get(device_id, 0)
        # A house-assigned gateway holds one unit while any remain
        if device_id in self._house_gateway_ids and used < owned:
            used += 1
        return OwnershipQuota(device_id=device_id, owned=owned, used=used)

    def quotas(self) -> dict[str, OwnershipQuota]:
        return {device_id: self.quota(device_id) for device_id in self._devices}

    def can_toggle_owned(self, instance: RoomDeviceInstance) -> bool:
        """Whether the "owned" checkbox of an instance is enabled.

        Unchecking is always allowed. Checking requires a free unit.
        """
        if instance.is_owned:
            return True
        quota = self.quota(instance.device_id)
        if quota.owned == 0:
            return False
        return quota.used < quota.owned


def _find_instance(room: Room, instance_id: str) -> RoomDeviceInstance:
    for instance in room.devices:
        if instance.instance_id == instance_id:
            return instance
    raise NotFoundError(
        f"Device instance {instance_id} not found in room {room.name}",
        collection="rooms",
        record_id=instance_id,
    )


def _replace_instance(room: Room, updated: RoomDeviceInstance) -> Room:
    devices = [
        updated if instance.instance_id == updated.instance_id else instance
        for instance in room.devices
    ]
    return room.model_copy(update={"devices": devices})


def new_instance(device: BaseDevice) -> RoomDeviceInstance:
    return RoomDeviceInstance(
        instance_id=new_id(),
        device_id=device.id,
        custom_name=device.name,
        is_owned=False,
    )


def add_instance(room: Room, device: BaseDevice) -> tuple[Room, RoomDeviceInstance]:
    """Place a base device in a room.

    Args:
        room: Target room
        device: Base device to place

    Returns:
        Tuple of (updated room, new instance)
    """
    instance = new_instance(device)
    updated = room.model_copy(update={"devices": [*room.devices, instance]})
    logger.debug("Added %s to room %s as %s", device.id, room.id, instance.instance_id)
    return updated, instance


def remove_instance(room: Room, instance_id: str) -> Room:
    """Remove an instance from a room; quotas are simply recomputed."""
    _find_instance(room, instance_id)
    devices = [i for i in room.devices if i.instance_id != instance_id]
    return room.model_copy(update={"devices": devices})


def rename_instance(room: Room, instance_id: str, custom_name: str) -> Room:
    instance = _find_instance(room, instance_id)
    return _replace_instance(room, instance.model_copy(update={"custom_name": custom_name}))


def set_owned(
    room: Room,
    instance_id: str,
    is_owned: bool,
    ledger: OwnershipLedger,
) -> Room:
    """Toggle the owned flag of an instance.

    Args:
        room: Room holding the instance (the live draft)
        instance_id: Instance to toggle
        is_owned: Desired flag value
        ledger: Ledger built with this room as the draft

    Returns:
        Updated room

    Raises:
        QuotaExceededError: If checking would exceed the device quantity
    """
    instance = _find_instance(room, instance_id)
    if instance.is_owned == is_owned:
        return room
    if is_owned and not ledger.can_toggle_owned(instance):
        quota = ledger.quota(instance.device_id)
        raise QuotaExceededError(
            f"All {quota.owned} owned unit(s) of device {instance.device_id} are already in use",
            device_id=instance.device_id,
            owned=quota.owned,
            used=quota.used,
        )
    return _replace_instance(room, instance.model_copy(update={"is_owned": is_owned}))


def copy_template_devices(template: RoomTemplate) -> list[RoomDeviceInstance]:
    """Copy template entries with freshly generated instance ids.

    Owned flags are copied verbatim; quotas re-apply on the next check.
    """
    return [
        entry.model_copy(update={"instance_id": new_id()})
        for entry in template.devices
    ]


def apply_template(room: Room, template: RoomTemplate) -> Room:
    """Append a template's devices to a room."""
    return room.model_copy(
        update={"devices": [*room.devices, *copy_template_devices(template)]}
    )


def default_template_name(room: Room) -> str:
    return f"{room.name} {TEMPLATE_NAME_SUFFIX}"


def template_from_room(room: Room, name: str | None = None) -> RoomTemplate:
    """Snapshot a room's device configuration as a reusable template."""
    return RoomTemplate(
        name=name or default_template_name(room),
        devices=[instance.model_copy() for instance in room.devices],
    )


def ensure_unique_instance_ids(rooms: Iterable[Room]) -> None:
    """Check that instance ids are globally unique across rooms.

    Raises:
        ValidationError: On the first duplicate found
    """
    seen: dict[str, str] = {}
    for room in rooms:
        for instance in room.devices:
            owner = seen.get(instance.instance_id)
            if owner is not None:
                raise ValidationError(
                    f"Device instance {instance.instance_id} is used in rooms "
                    f"{owner} and {room.id}"
                )
            seen[instance.instance_id] = room.id


def ensure_quota(
    devices: Mapping[str, BaseDevice],
    rooms: Iterable[Room],
    draft: Room,
    previous: Room | None = None,
    house_gateway_ids: Iterable[str] = (),
) -> None:
    """Reject a room draft that newly marks more instances owned than allowed.

    Instances already owned in the persisted copy are grandfathered so
    that lowering a device's quantity never blocks unrelated edits. An
    instance only keeps that status while it points at the same device.

    Raises:
        QuotaExceededError: For the first device over its quota
    """
    previously_owned = {
        (i.instance_id, i.device_id)
        for i in (previous.devices if previous else [])
        if i.is_owned
    }
    newly_owned = Counter(
        i.device_id
        for i in draft.devices
        if i.is_owned and (i.instance_id, i.device_id) not in previously_owned
    )
    if not newly_owned:
        return
    ledger = OwnershipLedger(
        devices, rooms, draft=draft, house_gateway_ids=house_gateway_ids
    )
    for device_id in newly_owned:
        quota = ledger.quota(device_id)
        required = ledger.room_usage(device_id)
        if ledger.holds_house_unit(device_id) and quota.owned > 0:
            required += 1
        if required > quota.owned:
            raise QuotaExceededError(
                f"Device {device_id} has {quota.owned} owned unit(s) but "
                f"{required} unit(s) are assigned as owned",
                device_id=device_id,
                owned=quota.owned,
                used=required,
            )
