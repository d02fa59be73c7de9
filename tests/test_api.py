"""
API tests: catalog CRUD, eligibility, quoting and inquiry hand-off over HTTP.
"""
from urllib.parse import parse_qs, urlparse

import pytest

ADMIN = {"X-User-Role": "admin"}

NEW_POLICY = {
    "name": "Term Guard",
    "minAge": 21,
    "maxAge": 55,
    "description": "Pure term cover.",
    "rateTable": {"10": 5.0, "25": 7.5},
    "bonus": None,
}


def test_root(client):
    assert client.get("/").json() == {"message": "Policy Quote API running"}


def test_catalog_status(client):
    data = client.get("/test").json()
    assert data["policies"] == 3
    assert data["calculators"] == 2
    assert data["policyNames"][0] == "Endowment Plus"


# ============================================================================
# Catalog
# ============================================================================

class TestPolicies:
    def test_list(self, client):
        response = client.get("/api/policies")
        assert response.status_code == 200
        policies = response.json()
        assert [p["name"] for p in policies] == ["Endowment Plus", "Child Future", "Senior Shield"]
        first = policies[0]
        assert first["minAge"] == 18
        assert first["rateTable"] == {"10": 45.0, "20": 50.0, "30": 55.0}
        assert first["hasCalculator"] is True
        assert policies[1]["rateTable"] is None
        assert policies[1]["hasCalculator"] is False

    def test_get_missing(self, client):
        response = client.get("/api/policies/99")
        assert response.status_code == 404
        assert response.json()["error"] == "policy_not_found"

    def test_create_requires_admin(self, client):
        response = client.post("/api/policies", json=NEW_POLICY)
        assert response.status_code == 403
        assert response.json()["message"] == "Unauthorized: Admins only."
        response = client.post("/api/policies", json=NEW_POLICY, headers={"X-User-Role": "user"})
        assert response.status_code == 403

    def test_create(self, client):
        response = client.post("/api/policies", json=NEW_POLICY, headers=ADMIN)
        assert response.status_code == 201
        created = response.json()
        assert created["id"] == 4
        assert client.get("/api/policies/4").json()["name"] == "Term Guard"

    def test_create_rejects_bad_rate_table(self, client):
        bad = {**NEW_POLICY, "rateTable": {"ten": 5.0}}
        assert client.post("/api/policies", json=bad, headers=ADMIN).status_code == 422

    def test_create_rejects_inverted_ages(self, client):
        bad = {**NEW_POLICY, "minAge": 60, "maxAge": 20}
        assert client.post("/api/policies", json=bad, headers=ADMIN).status_code == 422

    def test_update(self, client):
        response = client.put("/api/policies/2", json=NEW_POLICY, headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["id"] == 2
        assert client.get("/api/policies/2").json()["hasCalculator"] is True

    def test_update_missing(self, client):
        assert client.put("/api/policies/42", json=NEW_POLICY, headers=ADMIN).status_code == 404

    def test_delete(self, client):
        response = client.delete("/api/policies/1", headers=ADMIN)
        assert response.status_code == 200
        assert response.json() == {"message": "Policy deleted successfully."}
        assert client.delete("/api/policies/1", headers=ADMIN).status_code == 404
        assert len(client.get("/api/policies").json()) == 2

    def test_delete_requires_admin(self, client):
        assert client.delete("/api/policies/1").status_code == 403

    def test_seed_does_not_duplicate(self, client):
        response = client.post("/seed", headers=ADMIN)
        assert response.json() == {"policies": 3, "seeded": False}

    def test_seed_empty_catalog(self, client, catalog):
        for policy in catalog.list_policies():
            catalog.delete(policy.id, role="admin")
        response = client.post("/seed", headers=ADMIN)
        assert response.json()["seeded"] is True
        assert response.json()["policies"] > 0


# ============================================================================
# Eligibility
# ============================================================================

class TestEligibility:
    def test_eligible(self, client):
        response = client.get("/api/policies/eligible", params={"age": 50})
        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Endowment Plus", "Senior Shield"]

    def test_none_eligible(self, client):
        response = client.get("/api/policies/eligible", params={"age": 90})
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.parametrize("age", ["abc", "-1", "101", "12.5"])
    def test_invalid_age(self, client, age):
        response = client.get("/api/policies/eligible", params={"age": age})
        assert response.status_code == 422
        assert response.json() == {
            "error": "invalid_input",
            "message": "Please enter a valid age.",
            "field": None,
        }


# ============================================================================
# Quotes
# ============================================================================

class TestQuote:
    def test_quote(self, client, quote_form):
        response = client.post("/api/policies/1/quote", json=quote_form)
        assert response.status_code == 200
        data = response.json()
        assert data["policyName"] == "Endowment Plus"
        assert data["request"]["term"] == 20
        quote = data["quote"]
        assert quote["usedTerm"] == 20
        assert quote["approximated"] is False
        assert quote["basePremium"] == pytest.approx(25000)
        assert quote["deathSumAssured"] == pytest.approx(625000)
        assert quote["firstYear"]["yearly"] == pytest.approx(26125)
        assert quote["renewal"]["yearly"] == pytest.approx(25562.5)
        assert data["display"]["firstYear"]["yearly"] == "₹26,125"
        assert data["display"]["approximationNote"] is None

    def test_approximated_quote(self, client, quote_form):
        quote_form.update(term="15", ppt="10")
        data = client.post("/api/policies/1/quote", json=quote_form).json()
        assert data["quote"]["usedTerm"] == 10
        assert data["quote"]["approximated"] is True
        assert "(10 years)" in data["display"]["approximationNote"]

    def test_numeric_json_values(self, client):
        form = {"userName": "Ravi", "age": 50, "term": 10, "ppt": 10, "basicSumAssured": 300000}
        data = client.post("/api/policies/3/quote", json=form).json()
        assert data["quote"]["basePremium"] == pytest.approx(300 * 70.25)

    def test_informational_policy(self, client, quote_form):
        response = client.post("/api/policies/2/quote", json=quote_form)
        assert response.status_code == 409
        assert response.json()["message"] == "Calculation is not available for this plan."

    def test_missing_policy(self, client, quote_form):
        assert client.post("/api/policies/9/quote", json=quote_form).status_code == 404

    def test_invalid_field(self, client, quote_form):
        quote_form["age"] = "thirty"
        response = client.post("/api/policies/1/quote", json=quote_form)
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_field"
        assert response.json()["field"] == "age"

    def test_wrong_type_field(self, client, quote_form):
        quote_form["age"] = [35]
        response = client.post("/api/policies/1/quote", json=quote_form)
        assert response.status_code == 422
        assert response.json() == {
            "error": "invalid_field",
            "message": "Please fill all required fields correctly.",
            "field": "age",
        }

    def test_huge_integer_field(self, client, quote_form):
        quote_form["basicSumAssured"] = 10 ** 400
        response = client.post("/api/policies/1/quote", json=quote_form)
        assert response.status_code == 422
        assert response.json()["field"] == "basicSumAssured"

    def test_ppt_exceeds_term(self, client, quote_form):
        quote_form["ppt"] = "25"
        response = client.post("/api/policies/1/quote", json=quote_form)
        assert response.status_code == 422
        assert response.json()["error"] == "ppt_exceeds_term"

    def test_sum_assured_too_low(self, client, quote_form):
        quote_form["basicSumAssured"] = "199999"
        response = client.post("/api/policies/1/quote", json=quote_form)
        assert response.status_code == 422
        assert response.json()["error"] == "sum_assured_too_low"


# ============================================================================
# Inquiries
# ============================================================================

class TestInquiries:
    def test_plan_interest_link(self, client):
        response = client.post("/api/inquiries", json={
            "kind": "plan_interest",
            "payload": {"planName": "Endowment Plus"},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["message"].startswith("Hi, I am interested in learning more about the *Endowment Plus* plan.")
        link = urlparse(data["link"])
        assert link.path == "/917095394483"
        assert parse_qs(link.query)["text"] == [data["message"]]

    def test_custom_destination(self, client):
        response = client.post("/api/inquiries", json={
            "kind": "contact_form",
            "payload": {"email": "a@b.in", "message": "Please call"},
            "destination": "911234567890",
        })
        assert "/911234567890?text=" in response.json()["link"]

    def test_missing_payload_field(self, client):
        response = client.post("/api/inquiries", json={"kind": "quote_details", "payload": {}})
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_field"

    def test_unknown_kind(self, client):
        response = client.post("/api/inquiries", json={"kind": "complaint", "payload": {}})
        assert response.status_code == 422
        assert response.json()["error"] == "invalid_field"
        assert response.json()["field"] == "kind"


# ============================================================================
# Admin accounts
# ============================================================================

class TestAdmins:
    def test_list_requires_admin(self, client):
        response = client.get("/api/admins")
        assert response.status_code == 403
        assert response.json()["error"] == "admin_required"

    def test_create_and_list(self, client):
        response = client.post("/api/admins", headers=ADMIN, json={
            "username": "priya",
            "email": "priya@example.com",
            "password": "hunter2",
        })
        assert response.status_code == 201
        created = response.json()
        assert created["id"] == 1
        assert created["role"] == "admin"
        assert "createdAt" in created
        assert "password" not in created

        admins = client.get("/api/admins", headers=ADMIN).json()
        assert [a["username"] for a in admins] == ["priya"]

    def test_add_admin_path(self, client):
        response = client.post("/api/add-admin", headers=ADMIN,
                               json={"username": "dev", "email": "dev@example.com"})
        assert response.status_code == 201

    def test_create_requires_admin(self, client):
        response = client.post("/api/admins", json={"username": "x", "email": "x@example.com"})
        assert response.status_code == 403

    def test_duplicate(self, client):
        body = {"username": "priya", "email": "priya@example.com"}
        client.post("/api/admins", headers=ADMIN, json=body)
        response = client.post("/api/admins", headers=ADMIN,
                               json={"username": "PRIYA", "email": "other@example.com"})
        assert response.status_code == 409
        assert response.json()["message"] == "Username or email may already be in use."

    def test_bad_email(self, client):
        response = client.post("/api/admins", headers=ADMIN, json={"username": "x", "email": "nope"})
        assert response.status_code == 422
        assert response.json()["field"] == "email"
