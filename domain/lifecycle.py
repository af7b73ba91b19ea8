"""Status state machines for FOI requests and reports.

Every status change goes through ``check_request_transition`` or
``check_report_transition``. Writing the current status again is allowed so a
repeated click is harmless.
"""
from typing import Dict, FrozenSet, Type, TypeVar, Union

from domain.errors import InvalidStatusError, InvalidTransitionError
from domain.models.foi_request import RequestStatus
from domain.models.report import ReportStatus

S = TypeVar("S", RequestStatus, ReportStatus)

REQUEST_TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    # Any status may be set directly; only a return to pending is refused
    RequestStatus.PENDING: frozenset(
        {RequestStatus.IN_REVIEW, RequestStatus.RESOLVED, RequestStatus.REJECTED}
    ),
    RequestStatus.IN_REVIEW: frozenset({RequestStatus.RESOLVED, RequestStatus.REJECTED}),
    RequestStatus.RESOLVED: frozenset({RequestStatus.REJECTED, RequestStatus.IN_REVIEW}),
    RequestStatus.REJECTED: frozenset({RequestStatus.RESOLVED, RequestStatus.IN_REVIEW}),
}

REPORT_TRANSITIONS: Dict[ReportStatus, FrozenSet[ReportStatus]] = {
    ReportStatus.DRAFT: frozenset({ReportStatus.PUBLISHED, ReportStatus.ARCHIVED}),
    ReportStatus.PUBLISHED: frozenset({ReportStatus.ARCHIVED}),
    ReportStatus.ARCHIVED: frozenset(),
}


def parse_status(enum_cls: Type[S], value: Union[str, S], resource: str) -> S:
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidStatusError(resource, value) from None


def _check(table, enum_cls, resource, current, requested):
    current = parse_status(enum_cls, current, resource)
    requested = parse_status(enum_cls, requested, resource)
    if requested != current and requested not in table[current]:
        raise InvalidTransitionError(resource, current.value, requested.value)
    return requested


def check_request_transition(
    current: Union[str, RequestStatus], requested: Union[str, RequestStatus]
) -> RequestStatus:
    """Return the requested status or raise InvalidTransitionError."""
    return _check(REQUEST_TRANSITIONS, RequestStatus, "request", current, requested)


def check_report_transition(
    current: Union[str, ReportStatus], requested: Union[str, ReportStatus]
) -> ReportStatus:
    return _check(REPORT_TRANSITIONS, ReportStatus, "report", current, requested)
