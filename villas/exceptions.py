from django.core.exceptions import ValidationError


class FeedUrlError(Exception):
    """URL de feed rechazada antes de hacer ninguna petición."""

    status_code = 400
    code = "invalid_url"

    def __init__(self, message, code=None):
        super().__init__(message)
        if code:
            self.code = code


class InvalidFeedUrl(FeedUrlError):
    pass


class HostNotAllowed(FeedUrlError):
    status_code = 403
    code = "host_not_allowed"


class OverlapsExternalBlock(ValidationError):
    """Un bloqueo manual no puede pisar una ocupación sincronizada por iCal."""

    def __init__(self, external_range):
        self.external_range = external_range
        super().__init__(
            f"Las fechas se solapan con una ocupación del calendario externo "
            f"({external_range.start.isoformat()} → {external_range.end.isoformat()}).",
            code="overlaps_external_block",
        )
