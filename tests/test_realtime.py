from datetime import timedelta

import pytest
from socketio import exceptions as sio_exceptions

from core.exceptions import StorageError
from core.security import Identity, sign_token
from repositories.emergency_contact import EmergencyContactRepository
from repositories.panic_event import PanicEventRepository
from services.realtime import ConnectionState


async def _events_of(session_factory, user_id):
    async with session_factory() as session:
        return await PanicEventRepository(session).list_for_owner(user_id)


async def _add_contact(session_factory, owner_id, contact_name):
    async with session_factory() as session:
        await EmergencyContactRepository(session).add(owner_id, contact_name)


async def test_handlers_are_registered(gateway, fake_sio):
    assert {"connect", "authenticate", "trigger", "button_click", "error", "disconnect"} <= set(fake_sio.handlers)


async def test_connection_lifecycle_states(gateway, make_user):
    ana, token = await make_user("Ana")

    await gateway.on_connect("sid-ana", {})
    assert gateway.state_of("sid-ana") == ConnectionState.UNAUTHENTICATED

    ack = await gateway.on_authenticate("sid-ana", token)
    assert ack == {"success": True, "userId": ana.id, "name": "Ana"}
    assert gateway.state_of("sid-ana") == ConnectionState.AUTHENTICATED

    await gateway.on_disconnect("sid-ana", "client disconnect")
    assert gateway.state_of("sid-ana") == ConnectionState.CLOSED
    assert gateway.registry.find_by_user_id(ana.id) is None


async def test_authenticate_after_disconnect_is_dropped(gateway, make_user):
    ana, token = await make_user("Ana")
    await gateway.on_connect("sid-ana", {})
    await gateway.on_disconnect("sid-ana", "transport close")

    ack = await gateway.on_authenticate("sid-ana", token)

    assert ack is None
    assert "sid-ana" not in gateway.registry
    assert gateway.registry.find_by_user_id(ana.id) is None
    assert len(gateway.registry) == 0


async def test_failed_authentication_closes_connection(gateway, fake_sio):
    await gateway.on_connect("sid-x", {})

    ack = await gateway.on_authenticate("sid-x", "not-a-token")

    assert ack is None
    assert fake_sio.disconnected == ["sid-x"]
    assert gateway.state_of("sid-x") == ConnectionState.CLOSED


async def test_unauthenticated_trigger_is_dropped(gateway, fake_sio, make_user, session_factory):
    ana, _ = await make_user("Ana")
    ben, ben_token = await make_user("Ben")
    await _add_contact(session_factory, ben.id, "Ana")

    await gateway.on_connect("sid-ben", {})
    await gateway.on_authenticate("sid-ben", ben_token)
    await gateway.on_connect("sid-anon", {})

    assert await gateway.on_trigger("sid-anon", {"location": "Park"}) is None
    assert fake_sio.emitted == []
    assert fake_sio.disconnected == []
    assert await _events_of(session_factory, ana.id) == []


async def test_panic_alert_reaches_only_connected_watchers(gateway, fake_sio, make_user, session_factory):
    ana, ana_token = await make_user("Ana", "a@x.com")
    ben, ben_token = await make_user("Ben", "b@x.com")
    cleo, cleo_token = await make_user("Cleo", "c@x.com")
    await _add_contact(session_factory, ben.id, "Ana")

    for sid, token in (("sid-ana", ana_token), ("sid-ben", ben_token), ("sid-cleo", cleo_token)):
        await gateway.on_connect(sid, {})
        await gateway.on_authenticate(sid, token)

    ack = await gateway.on_trigger("sid-ana", {"location": "Park", "coordinates": {"lat": 32.7, "lng": -117.1}})

    events = await _events_of(session_factory, ana.id)
    assert len(events) == 1
    assert events[0].cause is None
    assert ack == {"success": True, "eventId": events[0].id, "notified": 1}

    assert fake_sio.sent_to("sid-cleo") == []
    assert fake_sio.sent_to("sid-ana") == []
    [notification] = fake_sio.sent_to("sid-ben")
    assert "Ana is under attack!" in notification["message"]
    assert notification["location"] == "Park"
    assert notification["ownerId"] == ana.id
    assert notification["coordinates"] == {"lat": 32.7, "lng": -117.1}


async def test_offline_watcher_is_skipped(gateway, fake_sio, make_user, session_factory):
    ana, ana_token = await make_user("Ana")
    ben, ben_token = await make_user("Ben")
    cleo, _ = await make_user("Cleo")
    await _add_contact(session_factory, ben.id, "Ana")
    await _add_contact(session_factory, cleo.id, "Ana")

    await gateway.on_connect("sid-ana", {})
    await gateway.on_authenticate("sid-ana", ana_token)
    await gateway.on_connect("sid-ben", {})
    await gateway.on_authenticate("sid-ben", ben_token)

    ack = await gateway.on_trigger("sid-ana", {"location": "Park"})

    assert ack["notified"] == 1
    assert [to for _, _, to in fake_sio.emitted] == ["sid-ben"]


async def test_button_click_alias_and_missing_payload(gateway, fake_sio, make_user, session_factory):
    ana, ana_token = await make_user("Ana")
    ben, ben_token = await make_user("Ben")
    await _add_contact(session_factory, ben.id, "Ana")

    for sid, token in (("sid-ana", ana_token), ("sid-ben", ben_token)):
        await gateway.on_connect(sid, {})
        await gateway.on_authenticate(sid, token)

    await fake_sio.handlers["button_click"]("sid-ana", None)

    [notification] = fake_sio.sent_to("sid-ben")
    assert notification["location"] == "Location unavailable"


async def test_token_at_connect_time_authenticates(gateway, make_user):
    ana, token = await make_user("Ana")

    await gateway.on_connect("sid-1", {}, {"token": token})
    await gateway.on_connect("sid-2", {"asgi.scope": {"query_string": f"EIO=4&token={token}".encode()}})

    assert gateway.registry.find_all_by_user_id(ana.id) == ["sid-1", "sid-2"]


async def test_bad_token_at_connect_time_is_refused(gateway):
    with pytest.raises(sio_exceptions.ConnectionRefusedError):
        await gateway.on_connect("sid-1", {}, {"token": "forged"})
    assert gateway.state_of("sid-1") == ConnectionState.CLOSED


async def test_storage_failure_drops_the_alert(gateway, fake_sio, make_user, monkeypatch):
    _, token = await make_user("Ana")

    async def broken_record(self, owner_id, cause=None):
        raise StorageError("Error recording panic event")

    monkeypatch.setattr(PanicEventRepository, "record", broken_record)
    await gateway.on_connect("sid-ana", {})
    await gateway.on_authenticate("sid-ana", token)

    ack = await gateway.on_trigger("sid-ana", {"location": "Park"})

    assert ack == {"success": False, "message": "Panic event could not be recorded"}
    assert fake_sio.emitted == []
    assert gateway.state_of("sid-ana") == ConnectionState.AUTHENTICATED


async def test_transport_error_does_not_change_state(gateway, make_user):
    _, token = await make_user("Ana")
    await gateway.on_connect("sid-ana", {})
    await gateway.on_authenticate("sid-ana", token)

    await gateway.on_error("sid-ana", "ping timeout")

    assert gateway.state_of("sid-ana") == ConnectionState.AUTHENTICATED


async def test_reauthentication_overwrites_identity(gateway, make_user):
    ana, ana_token = await make_user("Ana")
    ben, ben_token = await make_user("Ben")

    await gateway.on_connect("sid-1", {})
    await gateway.on_authenticate("sid-1", ana_token)
    await gateway.on_authenticate("sid-1", ben_token)

    assert gateway.registry.identity_of("sid-1") == Identity(user_id=ben.id, name="Ben")
    assert gateway.registry.find_by_user_id(ana.id) is None


async def test_expired_token_is_refused_on_authenticate(gateway, fake_sio):
    token = sign_token(Identity(user_id=1, name="Ana"), expires_delta=timedelta(seconds=-1))
    await gateway.on_connect("sid-1", {})

    await gateway.on_authenticate("sid-1", {"token": token})

    assert fake_sio.disconnected == ["sid-1"]
