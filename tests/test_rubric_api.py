from conftest import impact_payload, register_and_login

from impact_tracker.data_readers.json_provider import get_rubric_taxonomy

CSE_STAFF_1_PREFIX = "Demonstrates in-depth understanding of the organizational"


def test_health_reports_rubric_size(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "data_provider": "memory", "rubric_expectations": 147}


def test_lookup_endpoints(client):
    families = client.get("/rubric/job-families").json()
    assert [f["name"] for f in families] == ["TPM", "PgM", "PjM", "BizOps"]
    assert families[0]["specific_skill"] == "Technical Domain Expertise"

    levels = client.get("/rubric/levels").json()
    assert [lv["name"] for lv in levels] == ["Manager", "Senior", "Staff", "Sr. Staff", "Principal", "Director", "VP"]

    skills = client.get("/rubric/skills", params={"job_family": "BizOps"}).json()
    assert [s["name"] for s in skills][-1] == "Solve Business Problems"
    assert len(skills) == 5

    r = client.get("/rubric/expectations", params={"job_family": "TPM", "skill": "Connect Strategy to Execution", "level": "Staff"})
    assert r.status_code == 200
    assert r.json()[0]["id"] == "cse-st-1"
    assert r.json()[0]["text"].startswith(CSE_STAFF_1_PREFIX)

    r = client.get("/rubric/expectations", params={"job_family": "TPM", "skill": "Solve Business Problems", "level": "Staff"})
    assert r.json() == []

    r = client.get("/rubric/expectations", params={"job_family": "TPM", "skill": "Lead Change", "level": "Intern"})
    assert r.status_code == 422


def test_coverage_from_logged_impacts(client):
    headers = register_and_login(client)
    text = client.get(
        "/rubric/expectations",
        params={"job_family": "TPM", "skill": "Connect Strategy to Execution", "level": "Staff"},
    ).json()[0]["text"]
    client.post("/impacts/", json=impact_payload(title=text, craft_skills=["Connect Strategy to Execution"]), headers=headers)

    r = client.get("/rubric/coverage", params={"job_family": "TPM", "level": "Staff"}, headers=headers)
    assert r.status_code == 200, r.text
    data = r.json()
    assert (data["covered"], data["total"], data["remaining"], data["coverage_percent"]) == (1, 15, 14, 7)
    cse = data["skills"][0]
    assert cse["skill"] == "Connect Strategy to Execution"
    assert (cse["covered"], cse["total"]) == (1, 3)
    assert cse["expectations"][0]["impact_count"] == 1

    # Same impact does not count under another job family
    r = client.get("/rubric/coverage", params={"job_family": "PgM", "level": "Staff"}, headers=headers)
    assert r.json()["covered"] == 0


def test_coverage_uses_stored_selection(client):
    headers = register_and_login(client, job_family="BizOps", level="VP")
    data = client.get("/rubric/coverage", headers=headers).json()
    assert (data["job_family"], data["level"]) == ("BizOps", "VP")
    assert data["skills"][-1]["skill"] == "Solve Business Problems"


def test_coverage_defaults_from_settings(client, monkeypatch):
    from impact_tracker.core.config import reset_settings_cache

    monkeypatch.setenv("DEFAULT_JOB_FAMILY", "PjM")
    monkeypatch.setenv("DEFAULT_LEVEL", "Senior")
    reset_settings_cache()
    headers = register_and_login(client)
    data = client.get("/rubric/coverage", headers=headers).json()
    assert (data["job_family"], data["level"]) == ("PjM", "Senior")


def test_coverage_with_injected_rubric(client, small_taxonomy):
    client.app.dependency_overrides[get_rubric_taxonomy] = lambda: small_taxonomy
    headers = register_and_login(client)
    client.post(
        "/impacts/",
        json=impact_payload(title="Leads change across teams", craft_skills=["Lead Change"]),
        headers=headers,
    )
    data = client.get("/rubric/coverage", params={"job_family": "TPM", "level": "Staff"}, headers=headers).json()
    assert (data["covered"], data["total"], data["coverage_percent"]) == (1, 3, 33)

    data = client.get("/rubric/coverage", params={"job_family": "TPM", "level": "VP"}, headers=headers).json()
    assert (data["total"], data["coverage_percent"]) == (0, 0)


def test_coverage_requires_auth(client):
    assert client.get("/rubric/coverage").status_code == 401


def test_trailing_whitespace_title_does_not_cover(client):
    headers = register_and_login(client)
    text = client.get(
        "/rubric/expectations",
        params={"job_family": "TPM", "skill": "Connect Strategy to Execution", "level": "Staff"},
    ).json()[0]["text"]
    r = client.post(
        "/impacts/",
        json=impact_payload(title=text + " ", craft_skills=["Connect Strategy to Execution"]),
        headers=headers,
    )
    assert r.status_code == 201
    assert r.json()["title"] == text + " "

    data = client.get("/rubric/coverage", params={"job_family": "TPM", "level": "Staff"}, headers=headers).json()
    assert data["covered"] == 0
