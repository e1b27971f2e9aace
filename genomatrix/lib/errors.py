__all__ = [
    "GenomatrixError",
    "ConfigError",
    "InvalidRequest",
    "InvalidRegion",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "UpstreamUnavailable",
    "InternalError"
]

################################################################################

class GenomatrixError(Exception):
    """
    Base class for all errors which end up as an error response. The
    `status` is used as the HTTP-like status of the service response.
    """
    status = 500
    public_message = None

    def __init__(self, message=""):
        super().__init__(message)
        self.message = message

    def response_message(self):
        if self.public_message is not None:
            return self.public_message
        return self.message


class ConfigError(GenomatrixError):
    pass


class InvalidRequest(GenomatrixError):
    status = 400


class InvalidRegion(InvalidRequest):
    pass


class Unauthorized(GenomatrixError):
    status = 401


class Forbidden(GenomatrixError):
    status = 403


class NotFound(GenomatrixError):
    status = 404


class UpstreamUnavailable(GenomatrixError):
    status = 503


class InternalError(GenomatrixError):
    # the detailed message is only logged
    public_message = "Server error during genotype search."
