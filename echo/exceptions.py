from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import EchoRequest, EchoResponse


class EchoException(Exception):
    detail: str = "Echo error."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.detail
        super().__init__(self.detail)


# =============================================================================
# Configuration errors
# =============================================================================
class InvalidArgumentError(EchoException):
    detail = "Invalid argument."


# =============================================================================
# Accessor errors
# =============================================================================
class PreconditionFailedError(EchoException):
    detail = "Precondition failed."


# =============================================================================
# Request failures
# =============================================================================
class EchoError(EchoException):
    """A request that did not produce a successful response.

    Raised for transport failures, body serialization failures and responses
    with a non-2xx status. The underlying exception, if any, is chained as
    ``__cause__``.
    """

    detail = "Request failed."

    def __init__(
        self,
        detail: str | None = None,
        request: "EchoRequest | None" = None,
        response: "EchoResponse | None" = None,
    ):
        super().__init__(detail)
        self.request = request
        self.response = response

    @property
    def status_code(self) -> int | None:
        if self.response is None:
            return None
        return self.response.status_code
