import pytest

from workflows.notifications import Level
from workflows.practitioners import PractitionerService


@pytest.fixture
def service(backend, notices):
    return PractitionerService(backend, notices)


@pytest.fixture
def seeded(backend):
    backend.tables["profiles"].extend([
        {"id": "u1", "first_name": "Moussa", "last_name": "Konate", "user_type": "doctor"},
        {"id": "u2", "first_name": "Awa", "last_name": "Sy", "user_type": "doctor"},
        {"id": "u3", "first_name": "", "last_name": "", "user_type": "patient"},
        {"id": "admin", "first_name": "Root", "last_name": "", "user_type": "admin"},
    ])
    backend.tables["practitioners"].extend([
        {"id": "p1", "speciality": "Pediatrics", "experience_years": 4, "user_id": "u1"},
        {"id": "p2", "speciality": "Cardiology", "experience_years": 12, "user_id": "u2"},
        {"id": "p3", "speciality": "Dermatology", "experience_years": 1, "user_id": "ghost"},
    ])
    return backend


@pytest.mark.asyncio
async def test_list_merges_profiles_ordered_by_speciality(seeded, service):
    practitioners = await service.list()

    assert [p.speciality for p in practitioners] == ["Cardiology", "Dermatology", "Pediatrics"]
    by_id = {p.id: p for p in practitioners}
    assert by_id["p1"].name == "Moussa Konate"
    assert by_id["p3"].first_name is None
    assert by_id["p3"].name == "Unnamed"


@pytest.mark.asyncio
async def test_list_failure(backend, notices, service):
    backend.fail("select:practitioners")
    assert await service.list() == []
    assert "Practitioners could not be loaded." in notices.messages(Level.error)


@pytest.mark.asyncio
async def test_available_users_exclude_admins_and_practitioners(seeded, service):
    users = await service.available_users()
    assert [(u.id, u.name) for u in users] == [("u3", "u3")]


@pytest.mark.asyncio
async def test_options(seeded, service):
    options = await service.options()
    assert {o.id: o.name for o in options} == {"p1": "Moussa Konate", "p2": "Awa Sy", "p3": "Unnamed"}


@pytest.mark.asyncio
async def test_for_user(seeded, service):
    assert (await service.for_user("u2")).id == "p2"
    assert await service.for_user("nobody") is None


@pytest.mark.asyncio
async def test_create_validates_before_saving(backend, notices, service):
    ok = await service.save({"user_id": "u3", "speciality": "X", "experience_years": 2})

    assert ok is False
    assert backend.tables["practitioners"] == []
    assert notices.messages(Level.error)[0].startswith("Invalid speciality")


@pytest.mark.asyncio
async def test_create_and_update(backend, notices, service):
    assert await service.save({"user_id": "u3", "speciality": "Neurology", "experience_years": 3})
    [row] = backend.tables["practitioners"]
    assert row["speciality"] == "Neurology"

    assert await service.save(
        {"user_id": "u3", "speciality": "Neurosurgery", "experience_years": 5, "description": "Spine"},
        practitioner_id=row["id"],
    )
    assert row["speciality"] == "Neurosurgery"
    assert row["experience_years"] == 5
    assert notices.messages(Level.success) == ["Practitioner created.", "Practitioner updated."]


@pytest.mark.asyncio
async def test_negative_experience_is_refused(backend, service):
    assert await service.save({"user_id": "u3", "speciality": "Neurology", "experience_years": -1}) is False


@pytest.mark.asyncio
async def test_delete(seeded, notices, service):
    assert await service.delete("p1")
    assert [p["id"] for p in seeded.tables["practitioners"]] == ["p2", "p3"]

    seeded.fail("delete")
    assert await service.delete("p2") is False
    assert "The practitioner could not be deleted." in notices.messages(Level.error)
