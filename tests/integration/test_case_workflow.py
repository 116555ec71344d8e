"""
Integration tests for the case workflow against SQLite.

Tests verify that:
1. A requisition commits the case and its consents together
2. Status changes and report uploads persist
3. Views read back what the handlers wrote
"""
from dataclasses import replace

import pytest

from case import views
from case.domain import commands
from case.domain import model
from case.domain.exceptions import CaseNotFound
from case.service_layer import messagebus
from case.service_layer.unit_of_work import SqlAlchemyUnitOfWork
from fakes import (
    FakeBlobStore,
    FakeNotifier,
    clinic_session,
    lab_session,
    make_clinic,
    make_provider,
    make_user,
)


@pytest.fixture
def seeded_session_factory(sqlite_session_factory):
    session = sqlite_session_factory()
    session.add_all([
        make_clinic(),
        make_clinic("clinic-2", name="Lakeside IVF"),
        make_provider(),
        make_user(),
        make_user(user_id="user-2", email="admin@clinic.test"),
        make_user(user_id="user-3", clinic_id="clinic-2", email="other@clinic.test"),
    ])
    session.commit()
    session.close()
    return sqlite_session_factory


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def uow_factory(seeded_session_factory, notifier):
    blobs = FakeBlobStore()

    def make():
        return SqlAlchemyUnitOfWork(seeded_session_factory, blob_store_impl=blobs, notifier_impl=notifier)

    return make


def submit(draft, uow, session=None):
    cmd = commands.SubmitRequisition(session=session or clinic_session(), draft=draft)
    return messagebus.handle(cmd, uow)[0]


def test_requisition_persists_case_and_consents(draft, uow_factory, seeded_session_factory):
    result = submit(draft, uow_factory())

    session = seeded_session_factory()
    case = session.query(model.Case).filter_by(id=result["id"]).one()
    consents = session.query(model.Consent).filter_by(case_id=case.id).all()
    assert case.status == "consent_pending"
    assert case.tests_ordered == ["pgt_a"]
    assert case.case_number == result["case_number"]
    assert sorted(c.signer_role for c in consents) == ["partner", "patient"]
    session.close()


def test_patient_only_requisition(draft, uow_factory):
    result = submit(replace(draft, no_partner=True, sperm_source="donor"), uow_factory())

    summary = views.consent_summary(result["id"], clinic_session(), uow_factory())
    assert [c["signer_role"] for c in summary["consents"]] == ["patient"]


class FailingCommitUnitOfWork(SqlAlchemyUnitOfWork):
    def _commit(self):
        self.session.flush()
        raise RuntimeError("connection lost")


def test_failed_commit_leaves_no_case_or_consents(draft, seeded_session_factory):
    uow = FailingCommitUnitOfWork(seeded_session_factory, blob_store_impl=FakeBlobStore(),
                                  notifier_impl=FakeNotifier())

    with pytest.raises(RuntimeError):
        submit(draft, uow)

    session = seeded_session_factory()
    assert session.query(model.Case).count() == 0
    assert session.query(model.Consent).count() == 0
    session.close()


def test_status_change_persists(draft, uow_factory):
    case_id = submit(draft, uow_factory())["id"]

    messagebus.handle(commands.ChangeCaseStatus(session=lab_session(), case_id=case_id, status="cancelled"),
                      uow_factory())

    assert views.get_case(case_id, lab_session(), uow_factory())["status"] == "cancelled"


def test_report_upload_persists_and_notifies(draft, uow_factory, notifier):
    case_id = submit(draft, uow_factory())["id"]
    messagebus.handle(
        commands.ChangeCaseStatus(session=lab_session(), case_id=case_id, status="samples_received"),
        uow_factory(),
    )

    result = messagebus.handle(
        commands.UploadReport(session=lab_session(), case_id=case_id, filename="final.pdf", content=b"%PDF"),
        uow_factory(),
    )[0]

    case = views.get_case(case_id, clinic_session(), uow_factory())
    assert case["status"] == "report_ready"
    assert case["report_file_name"] == "final.pdf"
    assert case["report_file_url"] == result["report_file_url"]
    assert case["report_uploaded_at"] is not None
    assert sorted(result["notified_users"]) == ["admin@clinic.test", "nurse@clinic.test"]
    assert notifier.calls[0][0] == "send-report-notification"


def test_get_case_includes_clinic_provider_and_consents(draft, uow_factory):
    case_id = submit(draft, uow_factory())["id"]

    case = views.get_case(case_id, clinic_session(), uow_factory())

    assert case["clinic_name"] == "Sunrise Fertility"
    assert case["ordering_provider"]["last_name"] == "Physician"
    assert len(case["consents"]) == 2


def test_clinic_users_cannot_read_other_clinics_cases(draft, uow_factory):
    case_id = submit(draft, uow_factory())["id"]

    with pytest.raises(CaseNotFound):
        views.get_case(case_id, clinic_session(clinic_id="clinic-2", user_id="user-3"), uow_factory())


def test_list_cases_scoping_and_search(draft, uow_factory):
    submit(draft, uow_factory())
    submit(replace(draft, patient_first_name="Maria", patient_last_name="Lopez",
                   patient_email="maria@example.com"), uow_factory())

    assert len(views.list_cases(lab_session(), uow_factory())) == 2
    assert len(views.list_cases(clinic_session(), uow_factory())) == 2
    assert views.list_cases(clinic_session(clinic_id="clinic-2", user_id="user-3"), uow_factory()) == []

    found = views.list_cases(lab_session(), uow_factory(), search="lope")
    assert [c["patient_last_name"] for c in found] == ["Lopez"]
    assert found[0]["clinic_name"] == "Sunrise Fertility"

    assert views.list_cases(lab_session(), uow_factory(), status="report_ready") == []


def test_consent_summary_all_signed(draft, uow_factory):
    case_id = submit(draft, uow_factory())["id"]
    summary = views.consent_summary(case_id, lab_session(), uow_factory())
    assert summary["all_signed"] is False

    for consent in summary["consents"]:
        messagebus.handle(commands.RecordConsentSigned(session=lab_session(), consent_id=consent["id"]),
                          uow_factory())

    summary = views.consent_summary(case_id, lab_session(), uow_factory())
    assert summary["all_signed"] is True
    assert summary["status"] == "consent_pending"


def test_list_active_providers(uow_factory):
    providers = views.list_active_providers("clinic-1", clinic_session(), uow_factory())

    assert providers[0]["display_name"] == "Paula Physician, MD"
