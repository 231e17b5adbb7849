from typing import Optional


class TowingGuideError(Exception):
    """Base class for every failure raised by the towing lookup."""


class InvalidQuery(TowingGuideError):
    pass


class BackendUnavailable(TowingGuideError):
    pass


class MalformedResponse(TowingGuideError):
    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class UnrecognizedVehicle(TowingGuideError):
    pass


class ExtractionNotFound(TowingGuideError):
    """An image was processed fine but held nothing usable (no VIN, no plate, no vehicle)."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
