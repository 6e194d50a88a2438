"""Domain errors (typed) for the chat pipeline.

Every failure that can end a request is a DomainError subclass so the
interface layer can render it as "<ClassName>: <detail>" without leaking
infrastructure types.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ValidationError(DomainError):
    """Invalid input/domain state."""


class EmptyQuery(ValidationError):
    """No query text could be resolved from the request (client error)."""


class EmbeddingFailure(DomainError):
    """Embedding backend failed or is misconfigured."""


class RetrievalFailure(DomainError):
    """Similarity search failed (backend error, permissions, unknown procedure)."""


class SynthesisFailure(DomainError):
    """Completion backend failed (timeout, quota, malformed response)."""


class DeadlineExceeded(DomainError):
    """The request deadline expired before the pipeline finished."""


class ConfigurationError(DomainError):
    """Required settings are missing; raised by the composition root."""
