import pytest

from workflows.notifications import Level
from workflows.patients import PatientService
from workflows.schemas import PatientUpdate


@pytest.fixture
def service(backend, notices):
    return PatientService(backend, notices)


@pytest.fixture
def seeded(backend):
    backend.tables["profiles"].extend([
        {"id": "u1", "first_name": "Ana", "user_type": "patient", "created_at": "2025-01-01T00:00:00+00:00"},
        {"id": "u2", "first_name": "Awa", "user_type": "patient", "created_at": "2025-02-01T00:00:00+00:00"},
        {"id": "u3", "first_name": "Moussa", "user_type": "doctor", "created_at": "2025-03-01T00:00:00+00:00"},
    ])
    return backend


@pytest.mark.asyncio
async def test_list_only_patients_newest_first(seeded, service):
    assert [p.id for p in await service.list()] == ["u2", "u1"]


@pytest.mark.asyncio
async def test_update_skips_blank_fields(seeded, service):
    ok = await service.update("u1", PatientUpdate(last_name="Diallo", date_of_birth="1990-04-02", address=""))

    assert ok
    row = seeded.tables["profiles"][0]
    assert row["first_name"] == "Ana"
    assert row["last_name"] == "Diallo"
    assert row["date_of_birth"] == "1990-04-02"
    assert "address" not in row


@pytest.mark.asyncio
async def test_deactivate_is_a_soft_delete(seeded, service):
    assert await service.deactivate("u1")

    assert seeded.tables["profiles"][0]["user_type"] == "inactive"
    assert [p.id for p in await service.list()] == ["u2"]


@pytest.mark.asyncio
async def test_update_failure(seeded, notices, service):
    seeded.fail("update")
    assert await service.update("u1", PatientUpdate(first_name="X")) is False
    assert "The patient could not be updated." in notices.messages(Level.error)


def test_create_is_refused_with_info(notices, service):
    assert service.create() is False
    assert notices.messages(Level.info)
