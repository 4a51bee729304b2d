"""Domain-specific exceptions

Every message is user-facing (Portuguese) and tells the analyst what to do.
"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class MalformedInputError(DomainException):
    """Uploaded document could not be parsed"""

    pass


class UnsupportedFormatError(DomainException):
    """Uploaded file extension is not .xml or .rem"""

    pass


class MissingFieldError(DomainException):
    """Required request field absent or invalid"""

    pass


class EmptyBatchError(DomainException):
    """No usable note left after extraction or normalization"""

    pass


class UpstreamFetchError(DomainException):
    """Bureau, revenue or payment-history source unavailable"""

    pass


class IneligibleClientError(DomainException):
    """Batch upload attempted without an approved eligibility result"""

    pass


class ValidationPendingError(DomainException):
    """Final decision attempted before a batch was validated"""

    pass


class IncompleteChecklistError(DomainException):
    """Approval attempted with release checklist items still open"""

    pass


class SessionNotFoundError(DomainException):
    """Analysis session id unknown to the store"""

    pass


class SessionConflictError(DomainException):
    """Session changed while a request based on its previous state was running"""

    pass
