from conftest import auth_header


async def _token(client, name):
    r = await client.post("/api/v1/auth/signup", json={"name": name, "email": f"{name.lower()}@x.com"})
    return r.json()["token"]


async def test_event_without_cause_can_be_amended(client):
    headers = auth_header(await _token(client, "Ana"))

    r = await client.post("/api/v1/panic-events", json={}, headers=headers)
    assert r.status_code == 201
    event_id = r.json()["id"]

    events = (await client.get("/api/v1/panic-events", headers=headers)).json()
    assert len(events) == 1
    assert events[0]["id"] == event_id
    assert events[0]["cause"] is None
    assert events[0]["timestamp"]

    r = await client.patch(f"/api/v1/panic-events/{event_id}", json={"cause": "stress"}, headers=headers)
    assert r.status_code == 200
    assert r.json()["cause"] == "stress"

    events = (await client.get("/api/v1/panic-events", headers=headers)).json()
    assert events[0]["cause"] == "stress"


async def test_events_are_listed_newest_first_and_only_for_owner(client):
    ana = auth_header(await _token(client, "Ana"))
    ben = auth_header(await _token(client, "Ben"))

    first = (await client.post("/api/v1/panic-events", json={"cause": "crowd"}, headers=ana)).json()["id"]
    second = (await client.post("/api/v1/panic-events", json={}, headers=ana)).json()["id"]
    await client.post("/api/v1/panic-events", json={}, headers=ben)

    events = (await client.get("/api/v1/panic-events", headers=ana)).json()
    assert [e["id"] for e in events] == [second, first]


async def test_non_owner_cannot_amend_event(client):
    ana = auth_header(await _token(client, "Ana"))
    ben = auth_header(await _token(client, "Ben"))
    event_id = (await client.post("/api/v1/panic-events", json={}, headers=ana)).json()["id"]

    r = await client.patch(f"/api/v1/panic-events/{event_id}", json={"cause": "hijack"}, headers=ben)
    assert r.status_code == 404

    events = (await client.get("/api/v1/panic-events", headers=ana)).json()
    assert events[0]["cause"] is None


async def test_amending_missing_event_is_not_found(client):
    headers = auth_header(await _token(client, "Ana"))

    r = await client.patch("/api/v1/panic-events/999", json={"cause": "stress"}, headers=headers)
    assert r.status_code == 404


async def test_owner_can_delete_event(client):
    ana = auth_header(await _token(client, "Ana"))
    ben = auth_header(await _token(client, "Ben"))
    event_id = (await client.post("/api/v1/panic-events", json={}, headers=ana)).json()["id"]

    r = await client.delete(f"/api/v1/panic-events/{event_id}", headers=ben)
    assert r.status_code == 404

    r = await client.delete(f"/api/v1/panic-events/{event_id}", headers=ana)
    assert r.status_code == 200
    assert r.json()["success"] is True

    assert (await client.get("/api/v1/panic-events", headers=ana)).json() == []
