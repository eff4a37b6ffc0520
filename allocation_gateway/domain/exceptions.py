"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidRequest(DomainException):
    """Request is structurally malformed (bad total, party count, rule type, bounds)"""

    pass


class ReconciliationError(DomainException):
    """Computed amounts failed to reconcile to the total - indicates an engine bug"""

    pass
