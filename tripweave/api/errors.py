# tripweave/api/errors.py
"""Exception types shared by the geocoding, enrichment and generation layers.

The routes map each class to an HTTP status; inside the enrichment pipeline
only ``BatchTransportError`` is allowed to abort a whole batch.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class TripweaveError(Exception):
    """Base class for every error raised by tripweave."""

    code = "SERVER_ERROR"

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": str(self)}


class ConfigurationError(TripweaveError):
    """A required credential or endpoint is not configured."""

    def __init__(self, setting: str):
        super().__init__(f"{setting} is not set")
        self.setting = setting
        self.code = f"MISSING_{setting}"


class GeocodeError(TripweaveError):
    """Base class for single-item resolver failures."""


class GeocodeInputError(GeocodeError, ValueError):
    """The geocode request itself is malformed (e.g. an empty query)."""

    code = "INVALID_REQUEST"


class GeocodeFailed(GeocodeError):
    """The HTTP exchange with the geocoding provider did not succeed."""

    code = "GEOCODE_FAILED"

    def __init__(self, detail: str, status: Optional[int] = None):
        super().__init__(detail)
        self.status = status
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "status": self.status, "detail": self.detail}


class BatchTransportError(TripweaveError):
    """The batch resolution backend could not be reached at all."""

    code = "BATCH_TRANSPORT_FAILED"


class GenerationError(TripweaveError):
    """The text-generation collaborator failed or returned unusable text."""

    code = "GENERATION_FAILED"

    def __init__(self, detail: str, sample: Optional[str] = None):
        super().__init__(detail)
        self.sample = sample

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": str(self), "sample": self.sample}


class PlanShapeError(TripweaveError, ValueError):
    """Generated JSON parsed fine but does not match the expected structure."""

    code = "INVALID_SHAPE"

    def __init__(self, what: str, issues: List[Dict[str, Any]]):
        super().__init__(f"{what} does not match the expected shape")
        self.issues = issues

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": str(self), "issues": self.issues}


class InvalidRequestError(TripweaveError, ValueError):
    """An inbound HTTP body failed validation."""

    code = "INVALID_REQUEST"

    def __init__(self, issues: List[Dict[str, Any]]):
        super().__init__("request body is invalid")
        self.issues = issues

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": str(self), "issues": self.issues}


class PlanEditError(TripweaveError, ValueError):
    """A structural plan edit referenced a day or item that does not exist."""

    code = "INVALID_EDIT"


__all__ = [
    "TripweaveError",
    "ConfigurationError",
    "GeocodeError",
    "GeocodeInputError",
    "GeocodeFailed",
    "BatchTransportError",
    "GenerationError",
    "PlanShapeError",
    "InvalidRequestError",
    "PlanEditError",
]
