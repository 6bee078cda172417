"""
Pytest configuration and shared fixtures.

Adjusts sys.path so `from impact_tracker.api.main import app` works when tests
run from the repository root without an installed package, and resets every
process-wide cache between tests so env changes take effect.
"""
import sys
from datetime import date
from pathlib import Path

import pytest

# Repository root contains the 'impact_tracker' package
REPO_ROOT = Path(__file__).resolve().parents[1]
repo_root_str = str(REPO_ROOT)
if repo_root_str not in sys.path:
    sys.path.insert(0, repo_root_str)

from impact_tracker.core.config import reset_settings_cache  # noqa: E402
from impact_tracker.data_readers.json_provider import reset_dataset_cache  # noqa: E402
from impact_tracker.routers import auth as auth_router  # noqa: E402
from impact_tracker.rubric.enums import CraftSkill, Level  # noqa: E402
from impact_tracker.rubric.taxonomy import Expectation, RubricTaxonomy  # noqa: E402
from impact_tracker.services import impact_store  # noqa: E402

PASSWORD = "StrongPassw0rd!"


@pytest.fixture(autouse=True)
def memory_provider(monkeypatch):
    """Run every test against the in-memory provider unless it opts into sqlite."""
    monkeypatch.setenv("DATA_PROVIDER", "memory")
    for name in ("DB_PATH", "DATA_DIR", "RUBRIC_DATASET", "DEFAULT_JOB_FAMILY", "DEFAULT_LEVEL", "FISCAL_YEAR_START_MONTH"):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    reset_dataset_cache()
    auth_router.reset_auth_state()
    impact_store.reset_impact_state()
    yield
    reset_settings_cache()
    reset_dataset_cache()


@pytest.fixture
def sqlite_provider(monkeypatch, tmp_path):
    """Switch to a fresh sqlite database under tmp_path."""
    monkeypatch.setenv("DATA_PROVIDER", "sqlite")
    monkeypatch.setenv("DB_PATH", str(tmp_path / "test.db"))
    reset_settings_cache()
    return tmp_path / "test.db"


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from impact_tracker.api.main import app

    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, email: str = "user@example.com", **extra) -> dict:
    """Register a user and return Authorization headers for it."""
    r = client.post("/auth/register", json={"email": email, "password": PASSWORD, "full_name": "Test User", **extra})
    assert r.status_code == 201, r.text
    r = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


@pytest.fixture
def small_taxonomy():
    """Two Staff expectations for Lead Change and one for Technical Domain Expertise."""
    return RubricTaxonomy({
        (CraftSkill.LEAD_CHANGE, Level.STAFF): [
            Expectation(id="lc-1", text="Leads change across teams"),
            Expectation(id="lc-2", text="Builds a coalition for change"),
        ],
        (CraftSkill.TECHNICAL_DOMAIN_EXPERTISE, Level.STAFF): [
            Expectation(id="tde-1", text="Shapes system architecture"),
        ],
        (CraftSkill.DOMAIN_EXPERTISE, Level.STAFF): [
            Expectation(id="de-1", text="Knows the customer domain"),
        ],
    })


def impact_payload(**overrides) -> dict:
    payload = {
        "title": "Shipped the billing migration",
        "description": "Moved billing onto the new platform",
        "job_family": "TPM",
        "impact_category": "Launch Unblocked",
        "craft_skills": ["Execute with Rigor"],
        "quantified_value": 12,
        "quantified_unit": "days",
        "date": date.today().isoformat(),
    }
    payload.update(overrides)
    return payload
