"""API tests for the portal endpoints with fake units of work."""
import json

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.exc import OperationalError

from shared.entrypoints import dependencies
from shared.entrypoints.dependencies import get_session_context
from shared.entrypoints.portal_api import app
from case.domain.model import CaseStatus
from case.entrypoints import case_api
from directory.entrypoints import directory_api
from supplies.entrypoints import supplies_api
from fakes import (
    FakeBlobStore,
    FakeCaseUnitOfWork,
    FakeDirectoryUnitOfWork,
    FakeSuppliesUnitOfWork,
    clinic_identity,
    clinic_session,
    lab_session,
    make_clinic,
    make_provider,
    make_user,
)


@pytest.fixture
def case_uow():
    return FakeCaseUnitOfWork(
        clinics=[make_clinic()],
        providers=[make_provider()],
        users=[make_user(), make_user(user_id="user-2", email="admin@clinic.test")],
    )


@pytest.fixture
def directory_uow():
    return FakeDirectoryUnitOfWork(clinics=[make_clinic()], providers=[make_provider()], users=[make_user()])


@pytest.fixture
def supplies_uow():
    return FakeSuppliesUnitOfWork(clinics=[make_clinic()])


@pytest.fixture
def portal(case_uow, directory_uow, supplies_uow):
    """Client whose caller session can be swapped through ``portal.as_session``."""
    state = {"session": clinic_session()}
    app.dependency_overrides[get_session_context] = lambda: state["session"]
    app.dependency_overrides[case_api.get_uow] = lambda: case_uow
    app.dependency_overrides[directory_api.get_uow] = lambda: directory_uow
    app.dependency_overrides[supplies_api.get_uow] = lambda: supplies_uow

    client = TestClient(app)
    client.as_session = lambda session: state.update(session=session)
    yield client

    app.dependency_overrides.clear()


def requisition_form(draft, **changes):
    data = {**draft.__dict__, **changes}
    return {"requisition": json.dumps(data)}


def create_case(case_uow, draft, status=CaseStatus.SAMPLES_RECEIVED):
    case = draft.to_case("clinic-1", "user-1")
    case.status = status.value
    case_uow.cases.add(case)
    case_uow.cases.seen.clear()
    return case


def test_health(portal):
    response = portal.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestRequisitions:

    def test_submit_without_partner(self, portal, draft, case_uow):
        form = requisition_form(draft, no_partner=True, sperm_source="donor")

        response = portal.post("/api/v1/requisitions", data=form)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "consent_pending"
        assert [c["signer_role"] for c in body["consents"]] == ["patient"]

    def test_pgt_sr_without_karyotype(self, portal, draft, case_uow):
        response = portal.post("/api/v1/requisitions", data=requisition_form(draft, tests_ordered=["pgt_sr"]))

        assert response.status_code == 400
        assert response.json()["detail"] == "Please upload the karyotype document for PGT-SR"
        assert case_uow.cases.list() == []

    def test_duplicate_partner_email(self, portal, draft):
        form = requisition_form(draft, partner_email="jane@example.com")

        response = portal.post("/api/v1/requisitions", data=form)

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Partner email must be different")

    def test_submit_with_karyotype(self, portal, draft, case_uow):
        form = requisition_form(draft, tests_ordered=["pgt_sr"], indication="pgt_sr")
        files = {"karyotype_file": ("karyotype.pdf", b"%PDF-1.4 karyotype", "application/pdf")}

        response = portal.post("/api/v1/requisitions", data=form, files=files)

        assert response.status_code == 201
        assert response.json()["karyotype_file_path"].endswith("_karyotype.pdf")
        assert len(case_uow.blobs.objects) == 1

    def test_malformed_requisition(self, portal):
        response = portal.post("/api/v1/requisitions", data={"requisition": "{not json"})

        assert response.status_code == 400

    def test_requisition_providers(self, portal):
        response = portal.get("/api/v1/requisitions/providers")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == ["provider-1"]


class TestCases:

    def test_change_status(self, portal, draft, case_uow):
        case = create_case(case_uow, draft, CaseStatus.REPORT_READY)
        portal.as_session(lab_session())

        response = portal.patch(f"/api/v1/cases/{case.id}/status", json={"status": "cancelled"})

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_change_status_forbidden_for_clinic(self, portal, draft, case_uow):
        case = create_case(case_uow, draft)

        response = portal.patch(f"/api/v1/cases/{case.id}/status", json={"status": "complete"})

        assert response.status_code == 403
        assert case.status == "samples_received"

    def test_change_status_invalid(self, portal, draft, case_uow):
        case = create_case(case_uow, draft)
        portal.as_session(lab_session())

        response = portal.patch(f"/api/v1/cases/{case.id}/status", json={"status": "lost"})

        assert response.status_code == 400

    def test_change_status_unknown_case(self, portal):
        portal.as_session(lab_session())

        response = portal.patch("/api/v1/cases/missing/status", json={"status": "complete"})

        assert response.status_code == 404

    def test_upload_report(self, portal, draft, case_uow):
        case = create_case(case_uow, draft)
        portal.as_session(lab_session())

        response = portal.post(f"/api/v1/cases/{case.id}/report",
                               files={"file": ("results.pdf", b"%PDF-1.7", "application/pdf")})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "report_ready"
        assert body["report_file_name"] == "results.pdf"
        assert sorted(body["notified_users"]) == ["admin@clinic.test", "nurse@clinic.test"]

    def test_upload_report_storage_failure(self, portal, draft, case_uow):
        case = create_case(case_uow, draft)
        case_uow.blobs = FakeBlobStore(fail=True)
        portal.as_session(lab_session())

        response = portal.post(f"/api/v1/cases/{case.id}/report",
                               files={"file": ("results.pdf", b"%PDF-1.7", "application/pdf")})

        assert response.status_code == 502
        assert case.status == "samples_received"

    def test_database_outage(self, portal, draft, case_uow):
        case = create_case(case_uow, draft)

        def lost_connection():
            raise OperationalError("COMMIT", {}, Exception("server closed the connection"))

        case_uow._commit = lost_connection
        portal.as_session(lab_session())

        response = portal.patch(f"/api/v1/cases/{case.id}/status", json={"status": "complete"})

        assert response.status_code == 503
        assert response.json()["detail"] == "Database unavailable, please try again"

    def test_list_and_get_cases(self, portal, draft, case_uow):
        case = create_case(case_uow, draft)

        listed = portal.get("/api/v1/cases").json()
        detail = portal.get(f"/api/v1/cases/{case.id}").json()

        assert listed["total_count"] == 1
        assert detail["case_number"] == case.case_number
        assert detail["clinic_name"] == "Sunrise Fertility"

    def test_other_clinic_cannot_see_case(self, portal, draft, case_uow):
        case = create_case(case_uow, draft)
        portal.as_session(clinic_session(clinic_id="clinic-2", user_id="user-9"))

        assert portal.get(f"/api/v1/cases/{case.id}").status_code == 404
        assert portal.get("/api/v1/cases").json()["total_count"] == 0

    def test_consents_and_signing(self, portal, draft, case_uow):
        case = create_case(case_uow, draft, CaseStatus.CONSENT_PENDING)
        for consent in draft.consents_for(case):
            case_uow.consents.add(consent)

        summary = portal.get(f"/api/v1/cases/{case.id}/consents").json()
        assert summary["all_signed"] is False

        portal.as_session(lab_session())
        for consent in summary["consents"]:
            response = portal.post(f"/api/v1/consents/{consent['id']}/signed")
            assert response.status_code == 200

        assert portal.get(f"/api/v1/cases/{case.id}/consents").json()["all_signed"] is True


class TestDirectory:

    def test_lab_lists_clinics(self, portal):
        portal.as_session(lab_session())

        response = portal.get("/api/v1/clinics")

        assert response.status_code == 200
        assert response.json()[0]["name"] == "Sunrise Fertility"

    def test_clinic_user_cannot_list_clinics(self, portal):
        assert portal.get("/api/v1/clinics").status_code == 403

    def test_create_user(self, portal, directory_uow):
        portal.as_session(lab_session())

        response = portal.post("/api/v1/users", json={
            "email": "nia.new@sunrisefertility.com", "first_name": "Nia", "last_name": "New",
            "clinic_id": "clinic-1",
        })

        assert response.status_code == 201
        assert response.json()["role"] == "clinic_user"
        assert directory_uow.auth.resets == ["nia.new@sunrisefertility.com"]

    def test_add_and_toggle_provider(self, portal):
        portal.as_session(lab_session())

        created = portal.post("/api/v1/clinics/clinic-1/providers",
                              json={"first_name": "Omar", "last_name": "Ortiz"}).json()
        toggled = portal.post(f"/api/v1/providers/{created['id']}/toggle-active").json()

        assert toggled["is_active"] is False

    def test_impersonation(self, portal):
        portal.as_session(lab_session())

        response = portal.post("/api/v1/impersonation", json={"user_id": "user-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["effective_user"]["user_id"] == "user-1"
        assert body["real_user"]["user_id"] == "staff-1"

    def test_clinic_user_cannot_impersonate(self, portal):
        assert portal.post("/api/v1/impersonation", json={"user_id": "user-1"}).status_code == 403

    def test_me_while_impersonating(self, portal):
        portal.as_session(lab_session().impersonate(clinic_identity()))

        body = portal.get("/api/v1/me").json()

        assert body["impersonating"] is True
        assert body["is_lab_staff"] is True
        assert body["effective_user"]["clinic_id"] == "clinic-1"


class TestKitOrders:

    def test_place_order(self, portal, supplies_uow):
        response = portal.post("/api/v1/kit-orders", json={"biopsy_collection_kits": 3})

        assert response.status_code == 201
        assert response.json()["items"]["biopsy_collection_kits"] == 3
        assert supplies_uow.notifier.calls[0][0] == "send-order-notification"

    def test_empty_order(self, portal):
        assert portal.post("/api/v1/kit-orders", json={}).status_code == 400


class TestAuthentication:

    def test_missing_token(self):
        client = TestClient(app)
        assert client.get("/api/v1/cases").status_code == 401

    def test_token_resolved_to_session(self, monkeypatch):
        seen = {}

        def fake_load_session(auth_id, uow, impersonate_user_id=None):
            seen.update(auth_id=auth_id, impersonate=impersonate_user_id)
            return lab_session()

        monkeypatch.setattr(dependencies.directory_views, "load_session", fake_load_session)
        monkeypatch.setattr(dependencies, "SqlAlchemyUnitOfWork", lambda: None)
        token = jwt.encode({"sub": "auth-staff-1", "aud": "authenticated"}, "dev-jwt-secret", algorithm="HS256")

        session = get_session_context(authorization=f"Bearer {token}", x_impersonate_user="user-1")

        assert session.real_user.user_id == "staff-1"
        assert seen == {"auth_id": "auth-staff-1", "impersonate": "user-1"}
