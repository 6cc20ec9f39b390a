class NetlogError(Exception):
    """Base for errors the web layer turns into inline messages."""


class InputValidationError(NetlogError, ValueError):
    pass


class MissingCredentialError(NetlogError):
    """A feature was used without its credential configured. Raised before any network call."""


class ExternalServiceError(NetlogError):
    """The model endpoint or the history database failed."""


class MalformedResponseError(ExternalServiceError):
    """The model answered, but not with data matching the output schema."""
