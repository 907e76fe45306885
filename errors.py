class LeadCaptureError(Exception):
    """Base class for failures while capturing a lead."""


class ValidationError(LeadCaptureError):
    """The submitted form is missing one or more required fields."""

    def __init__(self, missing_fields):
        self.missing_fields = list(missing_fields)
        super().__init__(f"Missing required fields: {', '.join(self.missing_fields)}")


class AuthError(LeadCaptureError):
    """The service-account token exchange failed."""

    def __init__(self, detail):
        self.detail = detail
        super().__init__(f"Token request failed: {detail}")


class SheetWriteError(LeadCaptureError):
    """The Sheets append call failed."""

    def __init__(self, detail, status_code=None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(f"Sheets append failed: {detail}")
