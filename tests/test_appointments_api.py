import pytest
from httpx import AsyncClient

from conftest import auth_header

OIL_CHANGE = {"title": "Oil change", "start": "2024-05-01T10:00", "end": "2024-05-01T11:00"}


async def _create(client: AsyncClient, negocio, **overrides) -> dict:
    body = {**OIL_CHANGE, **overrides}
    resp = await client.post("/appointments", json=body, headers=auth_header(negocio))
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_booking_scenario(client, negocio, cliente_a, cliente_b):
    created = await _create(client, negocio)
    assert created["status"] == "AVAILABLE"
    assert created["ownerUserId"] is None
    assert created["start"] == "2024-05-01T10:00:00"

    first = await client.put(f"/appointments/reserve/{created['id']}", headers=auth_header(cliente_a))
    assert first.status_code == 200
    body = first.json()
    assert body["message"]
    assert body["appointment"]["status"] == "RESERVED"
    assert body["appointment"]["ownerUserId"] == cliente_a.id

    second = await client.put(f"/appointments/reserve/{created['id']}", headers=auth_header(cliente_b))
    assert second.status_code == 400
    assert second.json()["reason"] == "conflict"

    current = await client.get(f"/appointments/{created['id']}")
    assert current.json()["ownerUserId"] == cliente_a.id


@pytest.mark.asyncio
async def test_listing_is_public(client, negocio):
    await _create(client, negocio)
    await _create(client, negocio, title="Alineación", start="2024-05-02T09:00", end="2024-05-02T10:00")

    resp = await client.get("/appointments")
    assert resp.status_code == 200
    assert [item["title"] for item in resp.json()] == ["Oil change", "Alineación"]


@pytest.mark.asyncio
async def test_create_ignores_requested_status(client, negocio):
    created = await _create(client, negocio, status="RESERVED")
    assert created["status"] == "AVAILABLE"
    assert created["ownerUserId"] is None


@pytest.mark.asyncio
async def test_cliente_cannot_mutate_slots(client, negocio, cliente_a):
    created = await _create(client, negocio)
    headers = auth_header(cliente_a)

    resp = await client.post("/appointments", json=OIL_CHANGE, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["reason"] == "forbidden"

    resp = await client.put(f"/appointments/{created['id']}", json={**OIL_CHANGE, "title": "hacked"}, headers=headers)
    assert resp.status_code == 403

    resp = await client.delete(f"/appointments/{created['id']}", headers=headers)
    assert resp.status_code == 403

    listing = (await client.get("/appointments")).json()
    assert listing == [created]


@pytest.mark.asyncio
async def test_mutations_require_authentication(client, negocio):
    created = await _create(client, negocio)

    assert (await client.post("/appointments", json=OIL_CHANGE)).status_code == 401
    assert (await client.delete(f"/appointments/{created['id']}")).status_code == 401
    resp = await client.put(f"/appointments/reserve/{created['id']}")
    assert resp.status_code == 401
    assert resp.json()["reason"] == "unauthenticated"

    bad_token = {"Authorization": "Bearer not-a-token"}
    assert (await client.put(f"/appointments/reserve/{created['id']}", headers=bad_token)).status_code == 401


@pytest.mark.asyncio
async def test_invalid_bodies_are_rejected_without_writes(client, negocio):
    headers = auth_header(negocio)
    bad_bodies = [
        {**OIL_CHANGE, "end": "2024-05-01T09:00"},
        {**OIL_CHANGE, "title": " "},
        {**OIL_CHANGE, "status": "sin_tomar"},
        {**OIL_CHANGE, "start": "not a date"},
        {**OIL_CHANGE, "clienteId": 1},
        {"title": "Missing times"},
    ]
    for body in bad_bodies:
        resp = await client.post("/appointments", json=body, headers=headers)
        assert resp.status_code == 400, body
        assert resp.json()["reason"] == "validation_error"

    assert (await client.get("/appointments")).json() == []


@pytest.mark.asyncio
async def test_update_validates_and_keeps_store_unchanged(client, negocio):
    created = await _create(client, negocio)
    headers = auth_header(negocio)

    resp = await client.put(
        f"/appointments/{created['id']}",
        json={**OIL_CHANGE, "start": "2024-05-01T12:00"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert (await client.get(f"/appointments/{created['id']}")).json() == created

    resp = await client.put(
        f"/appointments/{created['id']}",
        json={**OIL_CHANGE, "description": "Cambio de aceite", "status": "COMPLETED"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "COMPLETED"
    assert resp.json()["description"] == "Cambio de aceite"


@pytest.mark.asyncio
async def test_unknown_ids_return_404(client, negocio, cliente_a):
    assert (await client.get("/appointments/999")).status_code == 404
    resp = await client.put("/appointments/999", json=OIL_CHANGE, headers=auth_header(negocio))
    assert resp.status_code == 404
    assert resp.json()["reason"] == "not_found"
    assert (await client.put("/appointments/reserve/999", headers=auth_header(cliente_a))).status_code == 404


@pytest.mark.asyncio
async def test_delete_is_idempotent(client, negocio):
    created = await _create(client, negocio)
    headers = auth_header(negocio)

    first = await client.delete(f"/appointments/{created['id']}", headers=headers)
    assert first.status_code == 204
    second = await client.delete(f"/appointments/{created['id']}", headers=headers)
    assert second.status_code == 404
    assert (await client.get("/appointments")).json() == []


@pytest.mark.asyncio
async def test_negocio_may_also_reserve(client, negocio):
    created = await _create(client, negocio)
    resp = await client.put(f"/appointments/reserve/{created['id']}", headers=auth_header(negocio))
    assert resp.status_code == 200
    assert resp.json()["appointment"]["ownerUserId"] == negocio.id


@pytest.mark.asyncio
async def test_admin_update_cannot_mark_open_slot_reserved(client, negocio, cliente_a):
    created = await _create(client, negocio)

    resp = await client.put(
        f"/appointments/{created['id']}",
        json={**OIL_CHANGE, "status": "RESERVED"},
        headers=auth_header(negocio),
    )
    assert resp.status_code == 400
    assert resp.json()["reason"] == "validation_error"
    assert (await client.get(f"/appointments/{created['id']}")).json() == created

    reserve = await client.put(f"/appointments/reserve/{created['id']}", headers=auth_header(cliente_a))
    assert reserve.status_code == 200
    assert reserve.json()["appointment"]["ownerUserId"] == cliente_a.id
