import http


class QuoteError(Exception):
    """Base for quote failures that end up in the {status, errorMessage} envelope."""

    status = "ERROR"
    http_status = http.HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, http_status: int = None, status: str = None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status
        if status is not None:
            self.status = status


class QuoteValidationError(QuoteError):
    status = "ERROR"
    http_status = http.HTTPStatus.BAD_REQUEST


class UpstreamFailure(QuoteError):
    status = "FAIL"


class NoServiceAvailable(QuoteError):
    status = "FAIL"
    http_status = http.HTTPStatus.BAD_REQUEST
