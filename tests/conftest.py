"""
Shared pytest fixtures: a small catalog and an API client bound to it.
"""
import pytest
from fastapi.testclient import TestClient

from catalog import AdminRegistry, PolicyCatalog
from main import app, get_admin_registry, get_catalog
from schemas import Policy

SAMPLE_POLICIES = [
    {
        "name": "Endowment Plus",
        "minAge": 18,
        "maxAge": 60,
        "description": "Savings and protection.",
        "rateTable": {"10": 45, "20": 50, "30": 55},
        "bonus": "Loyalty addition",
    },
    {
        "name": "Child Future",
        "minAge": 0,
        "maxAge": 12,
        "description": "Informational only.",
    },
    {
        "name": "Senior Shield",
        "minAge": 45,
        "maxAge": 75,
        "rateTable": {"5": 80.5, "10": 70.25},
    },
]


@pytest.fixture
def policy():
    return Policy(
        id=1,
        name="Endowment Plus",
        min_age=18,
        max_age=60,
        rate_table={10: 45, 20: 50, 30: 55},
    )


@pytest.fixture
def quote_form():
    return {
        "userName": "Asha",
        "age": "35",
        "term": "20",
        "ppt": "15",
        "basicSumAssured": "500000",
    }


@pytest.fixture
def catalog():
    return PolicyCatalog(SAMPLE_POLICIES)


@pytest.fixture
def admins():
    return AdminRegistry()


@pytest.fixture
def client(catalog, admins):
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_admin_registry] = lambda: admins
    yield TestClient(app)
    app.dependency_overrides.clear()
