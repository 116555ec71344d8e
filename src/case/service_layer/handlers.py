import logging
from datetime import datetime, timezone

import config
from shared.adapters import redis_adapter
from shared.adapters.notifications import NotificationError
from shared.domain.exceptions import PortalError, StorageError
from case.domain import commands, events
from case.domain.exceptions import (
    CaseNotFound,
    ConsentNotFound,
    InvalidStatus,
    RequisitionValidationError,
)
from case.domain.model import CaseStatus
from case.domain.requisition import KaryotypeUpload, validate_requisition
from case.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

REPORT_NOTIFICATION_FUNCTION = "send-report-notification"
CASES_CHANNEL = "portal:cases"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def _extension(filename: str, default: str) -> str:
    if "." not in filename:
        return default
    return filename.rsplit(".", 1)[1].lower() or default


def submit_requisition(command: commands.SubmitRequisition, uow: AbstractUnitOfWork) -> dict:
    """
    Create a case and its consents from a clinic requisition.

    The draft is validated before anything is written and only the first
    violation is reported. The karyotype document is uploaded first; the
    case and consent rows then commit together, so a failed commit leaves
    at most an orphaned karyotype object.

    Args:
        command: SubmitRequisition with the draft and optional karyotype file
        uow: Unit of work for transaction management

    Returns:
        The created case, including its consents
    """
    draft = command.draft
    violations = validate_requisition(draft, command.karyotype)
    if violations:
        logger.info(f"Rejected requisition: {violations[0].code}")
        raise RequisitionValidationError(violations[0])

    submitter = command.session.effective_user
    clinic_id = command.session.require_clinic()
    now = _now()

    with uow:
        provider = uow.providers.get(draft.ordering_provider_id)
        if provider is None or provider.clinic_id != clinic_id or not provider.is_active:
            raise PortalError("Please select an active ordering provider from your clinic")

        karyotype_path = None
        if command.karyotype is not None:
            karyotype_path = _upload_karyotype(clinic_id, command.karyotype, now, uow)

        case = draft.to_case(clinic_id, submitter.user_id, karyotype_path)
        case.form_completed_date = now
        uow.cases.add(case)

        consents = draft.consents_for(case)
        for consent in consents:
            uow.consents.add(consent)
        case.submitted(consents)

        try:
            uow.commit()
        except Exception:
            if karyotype_path:
                logger.error(f"Case insert failed, karyotype object {karyotype_path} is orphaned")
            raise

        logger.info(f"Created case {case.case_number} with {len(consents)} consent(s) for clinic {clinic_id}")
        result = case.to_dict()
        result["consents"] = [consent.to_dict() for consent in consents]

    return result


def _upload_karyotype(clinic_id: str, karyotype: KaryotypeUpload, now: datetime,
                      uow: AbstractUnitOfWork) -> str:
    bucket = config.get_minio_config()["case_files_bucket"]
    key = f"{clinic_id}/{_timestamp_ms(now)}_karyotype.{karyotype.extension}"
    try:
        return uow.blobs.put(bucket, key, karyotype.content, karyotype.content_type)
    except StorageError as e:
        raise StorageError(f"Failed to upload karyotype file: {e.message}") from e


def change_case_status(command: commands.ChangeCaseStatus, uow: AbstractUnitOfWork) -> dict:
    """Set a case to any status; progression is deliberately not enforced."""
    command.session.require_lab_staff()
    try:
        new_status = CaseStatus(command.status)
    except ValueError:
        raise InvalidStatus(f"Invalid case status: {command.status}")

    with uow:
        case = uow.cases.get(command.case_id)
        if case is None:
            raise CaseNotFound(f"Case {command.case_id} not found")

        old_status = case.status
        case.change_status(new_status)
        uow.commit()
        logger.info(f"Case {case.case_number} status {old_status} -> {new_status.value}")
        return case.to_dict()


def upload_report(command: commands.UploadReport, uow: AbstractUnitOfWork) -> dict:
    """
    Attach a report file to a case and mark it ready for the clinic.

    The file is stored before the case is touched: a failed upload leaves
    the case as it was. A failed case update after a successful upload
    leaves an orphaned report object, which is logged.

    Returns:
        The updated case plus ``notified_users``, the emails of the clinic's
        active users
    """
    command.session.require_lab_staff()
    if not command.content:
        raise ValueError("Report file is empty")

    with uow:
        case = uow.cases.get(command.case_id)
        if case is None:
            raise CaseNotFound(f"Case {command.case_id} not found")

        now = _now()
        bucket = config.get_minio_config()["case_documents_bucket"]
        ext = _extension(command.filename, "pdf")
        key = f"reports/{case.clinic_id}/{case.case_number}_report_{_timestamp_ms(now)}.{ext}"
        uow.blobs.put(bucket, key, command.content, command.content_type)

        try:
            case.attach_report(uow.blobs.public_url(bucket, key), command.filename, now)
            recipients = [user.email for user in uow.users.list_active_for_clinic(case.clinic_id)]
            case.report_ready(recipients)
            uow.commit()
        except Exception:
            logger.error(f"Failed to record report for case {case.case_number}, object {bucket}/{key} is orphaned")
            raise

        logger.info(f"Report {command.filename} uploaded for case {case.case_number}")
        result = case.to_dict()
        result["notified_users"] = recipients

    return result


def record_consent_signed(command: commands.RecordConsentSigned, uow: AbstractUnitOfWork) -> dict:
    command.session.require_lab_staff()
    with uow:
        consent = uow.consents.get(command.consent_id)
        if consent is None:
            raise ConsentNotFound(f"Consent {command.consent_id} not found")

        if consent.sign(command.signed_at):
            uow.commit()
            logger.info(f"Consent {consent.id} ({consent.signer_role}) signed for case {consent.case_id}")
        else:
            logger.info(f"Consent {consent.id} was already signed")
        return consent.to_dict()


def notify_report_ready(event: events.ReportUploaded, uow: AbstractUnitOfWork):
    """Ask the notification function to tell the clinic a report is ready."""
    if not event.recipients:
        logger.info(f"No active users to notify for case {event.case_number}")
        return

    payload = {
        "to": event.recipients,
        "case_id": event.case_id,
        "case_number": event.case_number,
        "report_file_name": event.report_file_name,
    }
    try:
        uow.notifier.invoke(REPORT_NOTIFICATION_FUNCTION, payload)
        logger.info(f"Report notification sent for case {event.case_number} to {len(event.recipients)} user(s)")
    except NotificationError as e:
        logger.error(f"Failed to send report notification for case {event.case_number}: {e}")


def publish_case_event(event, uow: AbstractUnitOfWork):
    """
    Publish case events to Redis for consumers outside the portal.

    Publishing failures are logged and never undo the primary write.
    """
    logger.info(f"Publishing {event.message_type} for case {event.case_id}")
    try:
        redis_adapter.publish(CASES_CHANNEL, event)
    except Exception as e:
        logger.error(f"Failed to publish {event.message_type} for case {event.case_id}: {e}")
