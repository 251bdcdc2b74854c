import pytest

from workflows.centers import AffiliationService, HealthCenterService
from workflows.notifications import Level

CENTER = {"name": "Clinique du Port", "address": "12 rue du Port", "city": "Dakar", "country": "Senegal"}


@pytest.fixture
def centers(backend, notices):
    return HealthCenterService(backend, notices)


@pytest.fixture
def affiliations(backend, notices):
    return AffiliationService(backend, notices)


@pytest.fixture
def seeded(backend):
    backend.tables["health_centers"].extend([
        {"id": "c1", **CENTER},
        {"id": "c2", "name": "Hopital Central", "address": "1 avenue", "city": "Thies", "country": "Senegal"},
    ])
    backend.tables["practitioners"].append({"id": "p1", "speciality": "Cardiology", "user_id": "u1"})
    backend.tables["profiles"].append({"id": "u1", "first_name": "Moussa", "last_name": "Konate"})
    backend.tables["practitioner_centers"].append({"id": "pc1", "practitioner_id": "p1", "center_id": "c1"})
    return backend


# ----------------------------------------------------------------------------
# Health centers
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_ordered_by_name(seeded, centers):
    assert [c.name for c in await centers.list()] == ["Clinique du Port", "Hopital Central"]
    assert [(o.id, o.city) for o in await centers.options()] == [("c1", "Dakar"), ("c2", "Thies")]


@pytest.mark.asyncio
async def test_create_records_creator(backend, centers):
    assert await centers.save({**CENTER, "phone": "", "email": ""}, created_by="admin-1")

    [row] = backend.tables["health_centers"]
    assert row["created_by"] == "admin-1"
    assert row["phone"] is None
    assert row["email"] is None


@pytest.mark.asyncio
async def test_invalid_email_is_refused(backend, notices, centers):
    assert await centers.save({**CENTER, "email": "not-an-email"}) is False
    assert backend.tables["health_centers"] == []
    assert notices.messages(Level.error)[0].startswith("Invalid email")


@pytest.mark.asyncio
async def test_update(seeded, centers):
    assert await centers.save({**CENTER, "city": "Saint-Louis"}, center_id="c1")
    assert seeded.tables["health_centers"][0]["city"] == "Saint-Louis"


@pytest.mark.asyncio
async def test_delete_refused_while_affiliated(seeded, notices, centers):
    assert await centers.delete("c1") is False
    assert len(seeded.tables["health_centers"]) == 2
    assert "affiliated practitioner" in notices.messages(Level.error)[0]


@pytest.mark.asyncio
async def test_delete_unaffiliated(seeded, centers):
    assert await centers.delete("c2") is True
    assert [c["id"] for c in seeded.tables["health_centers"]] == ["c1"]


# ----------------------------------------------------------------------------
# Affiliations
# ----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_joins_practitioner_center_and_profile(seeded, affiliations):
    [a] = await affiliations.list()

    assert a.id == "pc1"
    assert a.practitioner_speciality == "Cardiology"
    assert a.center_name == "Clinique du Port"
    assert a.center_city == "Dakar"
    assert a.practitioner_name == "Moussa Konate"


@pytest.mark.asyncio
async def test_duplicate_affiliation_is_refused(seeded, notices, affiliations):
    assert await affiliations.create("p1", "c1") is False
    assert len(seeded.tables["practitioner_centers"]) == 1
    assert "already affiliated" in notices.messages(Level.error)[0]


@pytest.mark.asyncio
async def test_create_and_delete_affiliation(seeded, affiliations):
    assert await affiliations.create("p1", "c2") is True
    assert len(seeded.tables["practitioner_centers"]) == 2

    assert await affiliations.delete("pc1") is True
    assert [r["center_id"] for r in seeded.tables["practitioner_centers"]] == ["c2"]


@pytest.mark.asyncio
async def test_create_requires_both_sides(backend, notices, affiliations):
    assert await affiliations.create("", "c1") is False
    assert "count" not in " ".join(backend.calls)
