"""Unit tests for room assignment and ownership quotas."""

import pytest

from src.exceptions import NotFoundError, QuotaExceededError, ValidationError
from src.planner.assignment import (
    OwnershipLedger,
    add_instance,
    apply_template,
    copy_template_devices,
    count_owned_instances,
    ensure_quota,
    ensure_unique_instance_ids,
    remove_instance,
    rename_instance,
    set_owned,
    template_from_room,
)
from tests.factories import (
    GatewayFactory,
    InstanceFactory,
    RoomFactory,
    RoomTemplateFactory,
    SensorFactory,
)


@pytest.fixture
def sensor():
    return SensorFactory(name="Motion", quantity=2)


@pytest.fixture
def room(sensor):
    return RoomFactory(
        name="Kitchen",
        devices=[
            InstanceFactory(instance_id="i-1", device_id=sensor.id, custom_name="Door", is_owned=True),
            InstanceFactory(instance_id="i-2", device_id=sensor.id, custom_name="Window"),
        ],
    )


class TestInstances:
    """Adding, renaming and removing placements."""

    def test_add_instance_uses_device_name(self, sensor):
        room = RoomFactory()
        updated, instance = add_instance(room, sensor)

        assert instance.device_id == sensor.id
        assert instance.custom_name == "Motion"
        assert instance.is_owned is False
        assert updated.devices == [instance]
        assert room.devices == []

    def test_same_device_twice_gets_distinct_ids(self, sensor):
        room, first = add_instance(RoomFactory(), sensor)
        room, second = add_instance(room, sensor)

        assert first.instance_id != second.instance_id
        assert len(room.devices) == 2

    def test_rename(self, room):
        updated = rename_instance(room, "i-2", "Back window")
        assert updated.devices[1].custom_name == "Back window"
        assert room.devices[1].custom_name == "Window"

    def test_remove(self, room):
        updated = remove_instance(room, "i-1")
        assert [i.instance_id for i in updated.devices] == ["i-2"]

    def test_unknown_instance(self, room):
        with pytest.raises(NotFoundError):
            remove_instance(room, "missing")


class TestOwnershipLedger:
    def test_counts_owned_instances(self, room, sensor):
        assert count_owned_instances([room])[sensor.id] == 1

    def test_quota(self, room, sensor):
        ledger = OwnershipLedger({sensor.id: sensor}, [room])
        quota = ledger.quota(sensor.id)

        assert quota.owned == 2
        assert quota.used == 1
        assert quota.remaining == 1
        assert not quota.exhausted

    def test_draft_replaces_persisted_room(self, room, sensor):
        draft = room.model_copy(update={"devices": []})
        ledger = OwnershipLedger({sensor.id: sensor}, [room], draft=draft)
        assert ledger.quota(sensor.id).used == 0

    def test_draft_for_new_room_is_counted(self, room, sensor):
        draft = RoomFactory(devices=[InstanceFactory(device_id=sensor.id, is_owned=True)])
        ledger = OwnershipLedger({sensor.id: sensor}, [room], draft=draft)
        assert ledger.quota(sensor.id).used == 2

    def test_unknown_device_has_no_units(self):
        ledger = OwnershipLedger({}, [])
        assert ledger.quota("ghost").owned == 0

    def test_house_gateway_holds_a_unit(self):
        gateway = GatewayFactory(quantity=1)
        ledger = OwnershipLedger({gateway.id: gateway}, [], house_gateway_ids=[gateway.id])
        assert ledger.quota(gateway.id).used == 1

    def test_house_gateway_without_stock_holds_nothing(self):
        gateway = GatewayFactory(quantity=0)
        ledger = OwnershipLedger({gateway.id: gateway}, [], house_gateway_ids=[gateway.id])
        assert ledger.quota(gateway.id).used == 0

    def test_quotas_cover_every_device(self, room, sensor):
        other = SensorFactory()
        ledger = OwnershipLedger({sensor.id: sensor, other.id: other}, [room])
        assert set(ledger.quotas()) == {sensor.id, other.id}


class TestSetOwned:
    """Checking and unchecking the owned flag."""

    def test_check_within_quota(self, room, sensor):
        ledger = OwnershipLedger({sensor.id: sensor}, [room], draft=room)
        updated = set_owned(room, "i-2", True, ledger)
        assert all(i.is_owned for i in updated.devices)

    def test_check_beyond_quota(self, room):
        limited = SensorFactory(quantity=1)
        room = room.model_copy(
            update={"devices": [i.model_copy(update={"device_id": limited.id}) for i in room.devices]}
        )
        ledger = OwnershipLedger({limited.id: limited}, [room], draft=room)

        with pytest.raises(QuotaExceededError) as exc_info:
            set_owned(room, "i-2", True, ledger)

        assert exc_info.value.owned == 1
        assert exc_info.value.used == 1

    def test_zero_quantity_disables_checkbox(self):
        device = SensorFactory(quantity=0)
        instance = InstanceFactory(device_id=device.id)
        room = RoomFactory(devices=[instance])
        ledger = OwnershipLedger({device.id: device}, [room], draft=room)

        assert ledger.can_toggle_owned(instance) is False
        with pytest.raises(QuotaExceededError):
            set_owned(room, instance.instance_id, True, ledger)

    def test_uncheck_always_allowed(self, room):
        ledger = OwnershipLedger({}, [room], draft=room)
        updated = set_owned(room, "i-1", False, ledger)
        assert not updated.devices[0].is_owned

    def test_no_change_returns_same_room(self, room, sensor):
        ledger = OwnershipLedger({sensor.id: sensor}, [room], draft=room)
        assert set_owned(room, "i-1", True, ledger) is room


class TestEnsureQuota:
    def test_newly_owned_over_quota(self, sensor):
        sensor = sensor.model_copy(update={"quantity": 1})
        draft = RoomFactory(
            devices=[
                InstanceFactory(device_id=sensor.id, is_owned=True),
                InstanceFactory(device_id=sensor.id, is_owned=True),
            ]
        )
        with pytest.raises(QuotaExceededError):
            ensure_quota({sensor.id: sensor}, [], draft)

    def test_previously_owned_is_grandfathered(self, room, sensor):
        lowered = sensor.model_copy(update={"quantity": 0})
        draft = rename_instance(room, "i-2", "Renamed")
        ensure_quota({sensor.id: lowered}, [room], draft, previous=room)

    def test_repointed_instance_is_checked_against_new_device(self):
        stocked = SensorFactory(quantity=1)
        unstocked = SensorFactory(quantity=0)
        previous = RoomFactory(
            devices=[InstanceFactory(instance_id="i-1", device_id=stocked.id, is_owned=True)]
        )
        draft = previous.model_copy(
            update={
                "devices": [
                    InstanceFactory(instance_id="i-1", device_id=unstocked.id, is_owned=True)
                ]
            }
        )
        devices = {stocked.id: stocked, unstocked.id: unstocked}

        with pytest.raises(QuotaExceededError):
            ensure_quota(devices, [], draft, previous=previous)

    def test_house_unit_counts_against_rooms(self):
        gateway = GatewayFactory(quantity=1)
        draft = RoomFactory(devices=[InstanceFactory(device_id=gateway.id, is_owned=True)])

        with pytest.raises(QuotaExceededError):
            ensure_quota({gateway.id: gateway}, [], draft, house_gateway_ids=[gateway.id])


class TestUniqueInstanceIds:
    def test_distinct_ids_pass(self, room):
        ensure_unique_instance_ids([room, RoomFactory(devices=[InstanceFactory()])])

    def test_duplicate_across_rooms(self, room):
        other = RoomFactory(devices=[InstanceFactory(instance_id="i-1")])
        with pytest.raises(ValidationError):
            ensure_unique_instance_ids([room, other])


class TestTemplates:
    def test_apply_template_generates_new_ids(self, sensor):
        template = RoomTemplateFactory(
            devices=[
                InstanceFactory(instance_id="t-1", device_id=sensor.id, custom_name="Ceiling", is_owned=True),
                InstanceFactory(instance_id="t-2", device_id=sensor.id, custom_name="Desk"),
            ]
        )
        room = apply_template(RoomFactory(), template)

        assert len(room.devices) == 2
        ids = {i.instance_id for i in room.devices}
        assert len(ids) == 2
        assert ids.isdisjoint({"t-1", "t-2"})
        assert [(i.device_id, i.custom_name, i.is_owned) for i in room.devices] == [
            (sensor.id, "Ceiling", True),
            (sensor.id, "Desk", False),
        ]

    def test_each_copy_is_fresh(self):
        template = RoomTemplateFactory(devices=[InstanceFactory()])
        first = copy_template_devices(template)
        second = copy_template_devices(template)
        assert first[0].instance_id != second[0].instance_id

    def test_template_from_room_default_name(self, room):
        template = template_from_room(room)
        assert template.name == "Kitchen Template"
        assert len(template.devices) == 2

    def test_template_from_room_custom_name(self, room):
        assert template_from_room(room, "Cooking").name == "Cooking"
