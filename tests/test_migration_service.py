from datetime import date
from uuid import uuid4

import pytest

from rendezvous.db.models import Appointment
from rendezvous.services.migration_service import MigrationService


def legacy_appointment(**fields):
    data = dict(
        patient_id=uuid4(),
        appointment_date=date(2026, 9, 14),
        start_time="11:00",
        end_time="11:30",
        motive="Suivi tension",
        status="confirmed",
        history=[],
    )
    data.update(fields)
    return Appointment(**data)


@pytest.fixture
def fixture_set(establishment, doctor, foreign_doctor):
    return {
        "orphan": legacy_appointment(doctor_id=doctor.id),
        "foreign_orphan": legacy_appointment(doctor_id=foreign_doctor.id),
        "pending_with_doctor": legacy_appointment(
            establishment_id=establishment.id, doctor_id=doctor.id, status="pending"
        ),
        "slot_string": legacy_appointment(
            establishment_id=establishment.id,
            status="pending",
            start_time=None,
            end_time=None,
            time_slot="14:30 - 15:00",
        ),
        "legacy_status": legacy_appointment(
            establishment_id=establishment.id, doctor_id=doctor.id, status="terminee"
        ),
        "legacy_date": legacy_appointment(
            establishment_id=establishment.id,
            doctor_id=doctor.id,
            appointment_date=None,
            legacy_date=date(2026, 9, 21),
        ),
        "healthy": legacy_appointment(establishment_id=establishment.id, doctor_id=doctor.id),
    }


async def reload(session, appointments):
    ids = {name: a.id for name, a in appointments.items()}
    session.expunge_all()
    return {name: await session.get(Appointment, appointment_id) for name, appointment_id in ids.items()}


@pytest.mark.asyncio
async def test_sweep_repairs_legacy_records(session, establishment, doctor, foreign_doctor, fixture_set):
    establishment_id = establishment.id
    doctor_id = doctor.id
    foreign_doctor_id = foreign_doctor.id
    session.add_all(fixture_set.values())
    await session.commit()

    updated = await MigrationService(session).clean_and_migrate(establishment_id)
    rows = await reload(session, fixture_set)

    assert updated == 5

    # establishment backfilled only through the establishment's own doctors
    assert rows["orphan"].establishment_id == establishment_id
    assert rows["orphan"].history[-1]["field"] == "establishment_id"
    assert rows["orphan"].history[-1]["action"] == "migration"
    assert rows["foreign_orphan"].establishment_id is None
    assert rows["foreign_orphan"].history == []
    assert rows["foreign_orphan"].doctor_id == foreign_doctor_id

    pending = rows["pending_with_doctor"]
    assert pending.doctor_id is None
    assert pending.history[-1]["action"] == "cleanup"
    assert pending.history[-1]["old_value"] == str(doctor_id)

    slot = rows["slot_string"]
    assert (slot.start_time, slot.end_time) == ("14:30", "15:00")
    assert slot.history[-1]["old_value"] == "14:30 - 15:00"
    assert slot.history[-1]["reason"]

    legacy = rows["legacy_status"]
    assert legacy.status == "completed"
    assert legacy.history[-1]["old_value"] == "terminee"

    dated = rows["legacy_date"]
    assert dated.appointment_date == date(2026, 9, 21)
    assert [entry["field"] for entry in dated.history] == ["appointment_date"]
    assert dated.history[-1]["new_value"] == "2026-09-21"

    assert rows["healthy"].history == []
    for name in ("orphan", "pending_with_doctor", "slot_string", "legacy_status", "legacy_date"):
        assert all(entry["actor"] == "system" for entry in rows[name].history)


@pytest.mark.asyncio
async def test_sweep_is_idempotent(session, establishment, fixture_set):
    establishment_id = establishment.id
    session.add_all(fixture_set.values())
    await session.commit()

    service = MigrationService(session)
    assert await service.clean_and_migrate(establishment_id) == 5
    first_pass = {name: list(a.history) for name, a in (await reload(session, fixture_set)).items()}

    assert await service.clean_and_migrate(establishment_id) == 0
    second_pass = {name: list(a.history) for name, a in (await reload(session, fixture_set)).items()}
    assert second_pass == first_pass


@pytest.mark.asyncio
async def test_one_record_can_need_several_fixes(session, establishment, doctor):
    establishment_id = establishment.id
    record = legacy_appointment(
        doctor_id=doctor.id,
        status="en_attente",
        start_time=None,
        end_time=None,
        time_slot="08:00 - 08:15",
    )
    session.add(record)
    await session.commit()
    record_id = record.id

    assert await MigrationService(session).clean_and_migrate(establishment_id) == 1

    session.expunge_all()
    repaired = await session.get(Appointment, record_id)
    assert repaired.establishment_id == establishment_id
    assert repaired.status == "pending"
    assert repaired.doctor_id is None
    assert (repaired.start_time, repaired.end_time) == ("08:00", "08:15")
    assert [entry["field"] for entry in repaired.history] == [
        "establishment_id", "status", "doctor_id", "start_end_time"
    ]


@pytest.mark.asyncio
async def test_sweep_without_work_is_a_no_op(session, establishment):
    assert await MigrationService(session).clean_and_migrate(establishment.id) == 0


@pytest.mark.asyncio
async def test_unparseable_slot_is_left_alone(session, establishment):
    record = legacy_appointment(
        establishment_id=establishment.id, start_time=None, end_time=None, time_slot="matin"
    )
    session.add(record)
    await session.commit()

    assert await MigrationService(session).clean_and_migrate(establishment.id) == 0


@pytest.mark.asyncio
async def test_row_without_any_date_is_left_alone(session, establishment):
    establishment_id = establishment.id
    record = legacy_appointment(establishment_id=establishment_id, appointment_date=None)
    session.add(record)
    await session.commit()
    record_id = record.id

    assert await MigrationService(session).clean_and_migrate(establishment_id) == 0

    session.expunge_all()
    untouched = await session.get(Appointment, record_id)
    assert untouched.appointment_date is None
    assert untouched.history == []
