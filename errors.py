class BackendError(Exception):
    """A call into the backend data client failed."""


class ContactValidationError(ValueError):
    """Contact details were submitted with a missing phone or address."""


class DeletionRefusedError(Exception):
    """A donated book cannot be removed while requests for it are pending."""


class AuthError(Exception):
    """Sign-up or sign-in was rejected."""


class BookNotFoundError(LookupError):
    """No donated book with that id belongs to the caller."""


class RequestNotFoundError(LookupError):
    """No book request exists for a contact exchange."""


class ExchangeAccessError(PermissionError):
    """The caller is not the participant of the request in the role they claim."""
