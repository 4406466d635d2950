"""Error taxonomy shared by the checkout and reconciliation paths.

Each error carries the HTTP status the API layer answers with. Only
``UpstreamFailure`` and ``ProcessingFailure`` are meant to make Stripe
redeliver a webhook; everything else is terminal for the request.
"""


class GiftPageError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(GiftPageError):
    status_code = 400


class NotFound(GiftPageError):
    status_code = 404


class VerificationError(GiftPageError):
    status_code = 400


class InvalidMetadata(GiftPageError):
    status_code = 422

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class UpstreamFailure(GiftPageError):
    status_code = 500


class ProcessingFailure(GiftPageError):
    status_code = 500
