"""Domain errors raised by the services and mapped to HTTP responses in main.py."""


class FoiPortalError(Exception):
    """Base class for domain errors"""


class RecordNotFoundError(FoiPortalError):
    def __init__(self, resource: str, record_id: object):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"{resource} {record_id} not found")


class InvalidStatusError(FoiPortalError):
    def __init__(self, resource: str, status: object):
        self.resource = resource
        self.status = status
        super().__init__(f"'{status}' is not a valid {resource} status")


class InvalidTransitionError(FoiPortalError):
    def __init__(self, resource: str, current: str, requested: str):
        self.resource = resource
        self.current = current
        self.requested = requested
        super().__init__(f"{resource} cannot move from '{current}' to '{requested}'")


class ReferralError(FoiPortalError):
    """Referral rejected before reaching the store"""
