from uuid import uuid4

import pytest

API = "/api/v1"


@pytest.mark.asyncio
async def test_establishment_validation_flow(client):
    response = await client.post(f"{API}/establishments/", json={
        "name": "Hopital de Pikine",
        "kind": "hospital",
        "region": "Dakar",
        "services": ["urgences", "radiologie"],
    })
    establishment = response.json()
    assert establishment["validation_status"] == "pending"
    assert establishment["slug"].startswith("hopital-de-pikine-")

    pending = await client.get(f"{API}/establishments/pending")
    assert [e["id"] for e in pending.json()] == [establishment["id"]]
    validated = await client.get(f"{API}/establishments/validated")
    assert validated.json() == []

    response = await client.post(
        f"{API}/establishments/{establishment['id']}/validation", json={"status": "validated"}
    )
    assert response.json()["validation_status"] == "validated"

    validated = await client.get(f"{API}/establishments/validated", params={"region": "Dakar"})
    assert [e["id"] for e in validated.json()] == [establishment["id"]]


@pytest.mark.asyncio
async def test_establishment_update_and_missing(client):
    establishment = (await client.post(f"{API}/establishments/", json={"name": "Cabinet Fann"})).json()

    response = await client.patch(f"{API}/establishments/{establishment['id']}", json={"city": "Dakar"})
    assert response.json()["city"] == "Dakar"
    assert response.json()["name"] == "Cabinet Fann"

    response = await client.get(f"{API}/establishments/{uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_doctor_listing_skips_inactive(client):
    establishment = (await client.post(f"{API}/establishments/", json={"name": "Clinique Pasteur"})).json()
    url = f"{API}/doctors/{establishment['id']}/doctors"
    kept = (await client.post(url, json={"first_name": "Aminata", "last_name": "Ba"})).json()
    gone = (await client.post(url, json={"first_name": "Cheikh", "last_name": "Gueye"})).json()

    response = await client.post(f"{API}/doctors/{gone['id']}/deactivate")
    assert response.json()["active"] is False

    listed = await client.get(url)
    assert [d["id"] for d in listed.json()] == [kept["id"]]


@pytest.mark.asyncio
async def test_doctor_for_unknown_establishment(client):
    response = await client.post(
        f"{API}/doctors/{uuid4()}/doctors", json={"first_name": "Aminata", "last_name": "Ba"}
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_patient_record_crud(client):
    patient_id = str(uuid4())
    response = await client.post(f"{API}/patients/records", json={
        "patient_id": patient_id,
        "first_name": "Mariama",
        "last_name": "Sow",
        "email": "mariama.sow@example.sn",
        "blood_group": "O+",
        "weight_kg": 62.5,
    })
    assert response.status_code == 201
    record = response.json()
    assert record["active"] is True

    by_patient = await client.get(f"{API}/patients/records/by-patient/{patient_id}")
    assert by_patient.json()["id"] == record["id"]

    updated = await client.patch(f"{API}/patients/records/{record['id']}", json={"allergies": "Penicilline"})
    assert updated.json()["allergies"] == "Penicilline"
    assert updated.json()["blood_group"] == "O+"

    found = await client.get(f"{API}/patients/records/search", params={"q": "SOW"})
    assert [r["id"] for r in found.json()] == [record["id"]]

    deleted = await client.delete(f"{API}/patients/records/{record['id']}")
    assert deleted.json()["active"] is False

    assert (await client.get(f"{API}/patients/records")).json() == []
    missing = await client.get(f"{API}/patients/records/by-patient/{patient_id}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_search_matches_wildcards_literally(client):
    url = f"{API}/patients/records"
    underscored = (await client.post(url, json={
        "patient_id": str(uuid4()),
        "first_name": "Khady",
        "last_name": "Ndour",
        "email": "khady_ndour@example.sn",
    })).json()
    await client.post(url, json={
        "patient_id": str(uuid4()),
        "first_name": "Omar",
        "last_name": "Seck",
        "email": "omar.seck@example.sn",
    })

    found = await client.get(f"{url}/search", params={"q": "_"})
    assert [r["id"] for r in found.json()] == [underscored["id"]]

    found = await client.get(f"{url}/search", params={"q": "%"})
    assert found.json() == []
