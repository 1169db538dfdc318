"""Error taxonomy shared by the analysis service and the HTTP layer."""

from __future__ import annotations


class InspectionError(Exception):
    """Base class; carries the HTTP status and a machine-readable code."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> dict[str, str]:
        return {"error": self.message, "error_code": self.error_code}


class InspectionInputError(InspectionError):
    """Bad user input (missing, oversized or non-image upload)."""

    status_code = 400
    error_code = "INVALID_INPUT"


class ConfigurationError(InspectionError):
    """Server misconfiguration, e.g. a missing provider credential."""

    status_code = 500
    error_code = "CONFIGURATION_ERROR"


class UpstreamError(InspectionError):
    """The external vision provider failed (network, quota, auth)."""

    status_code = 500
    error_code = "UPSTREAM_ERROR"
