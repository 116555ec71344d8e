"""Message bus for the case service."""

from __future__ import annotations
from typing import Dict, Callable, Type, List, TYPE_CHECKING

from shared.domain.commands import Command, Event
from shared.service_layer.messagebus import MessageBus
from case.domain import commands, events
from case.service_layer import handlers

if TYPE_CHECKING:
    from case.service_layer.unit_of_work import AbstractUnitOfWork


EVENT_HANDLERS = {
    events.RequisitionSubmitted: [handlers.publish_case_event],
    events.CaseStatusChanged: [handlers.publish_case_event],
    events.ReportUploaded: [handlers.notify_report_ready, handlers.publish_case_event],
    events.ConsentSigned: [handlers.publish_case_event],
}  # type: Dict[Type[Event], List[Callable]]

COMMAND_HANDLERS = {
    commands.SubmitRequisition: handlers.submit_requisition,
    commands.ChangeCaseStatus: handlers.change_case_status,
    commands.UploadReport: handlers.upload_report,
    commands.RecordConsentSigned: handlers.record_consent_signed,
}  # type: Dict[Type[Command], Callable]

bus = MessageBus(COMMAND_HANDLERS, EVENT_HANDLERS)


def handle(message, uow: AbstractUnitOfWork):
    """Handle message (command or event) with the appropriate handler."""
    return bus.handle(message, uow)
