"""Error taxonomy shared by the document model and its stores"""


class DocblocksError(Exception):
    """Base class for every error raised by the document model."""
    retryable = False


class ValidationError(DocblocksError):
    """Input has the wrong shape (non-positive size, empty title, ...)."""


class NotFoundError(DocblocksError):
    """Unknown document, block or version id for the caller."""


class AuthorizationError(DocblocksError):
    """Caller is neither the owner nor an authorized reader."""


class StorageError(DocblocksError):
    """The persistence store failed; safe to retry the same call."""
    retryable = True
