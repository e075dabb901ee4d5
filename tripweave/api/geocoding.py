# tripweave/api/geocoding.py
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import quote

import requests
from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, ValidationError

from tripweave.api.config import get_mapbox_config
from tripweave.api.errors import ConfigurationError, GeocodeFailed, GeocodeInputError

logger = logging.getLogger(__name__)

# Provider responses are cached by nobody: coordinates must reflect live data.
NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}

Number = Union[StrictInt, StrictFloat]


class MapboxFeature(BaseModel):
    """The part of a Mapbox feature we consult. ``center`` is ``[lng, lat]``."""

    model_config = ConfigDict(extra="ignore")

    center: Tuple[Number, Number]
    text: Optional[str] = None
    place_name: Optional[str] = None


class MapboxResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    features: List[Any]


@dataclass(frozen=True)
class GeocodeResult:
    """Outcome of a single lookup. ``resolved=False`` means "no match", not an error."""

    resolved: bool
    lat: Optional[float] = None
    lng: Optional[float] = None
    name: Optional[str] = None
    display_name: Optional[str] = None

    @classmethod
    def unresolved(cls) -> "GeocodeResult":
        return cls(resolved=False)

    def to_dict(self) -> Dict[str, Any]:
        if not self.resolved:
            return {"ok": False}
        return {
            "ok": True,
            "lat": self.lat,
            "lng": self.lng,
            "name": self.name,
            "place_name": self.display_name,
        }


def format_proximity(proximity: Sequence[float]) -> str:
    """Encode a ``(lng, lat)`` pair the way Mapbox expects it: longitude first."""
    try:
        lng, lat = proximity
        lng, lat = float(lng), float(lat)
    except (TypeError, ValueError) as exc:
        raise GeocodeInputError("proximity must be a (lng, lat) pair") from exc
    if not (-180 <= lng <= 180 and -90 <= lat <= 90):
        raise GeocodeInputError(f"proximity out of range: {proximity!r}")
    return f"{lng},{lat}"


def parse_geocode_response(payload: Any) -> GeocodeResult:
    """Turn a decoded provider body into a result; anything unexpected is a miss."""
    try:
        response = MapboxResponse.model_validate(payload)
        if not response.features:
            return GeocodeResult.unresolved()
        feature = MapboxFeature.model_validate(response.features[0])
    except ValidationError as exc:
        logger.debug(f"Unusable geocoding response: {exc.error_count()} validation errors")
        return GeocodeResult.unresolved()

    lng, lat = feature.center
    if not (-180 <= lng <= 180 and -90 <= lat <= 90):
        logger.debug(f"Discarding out-of-range center {feature.center}")
        return GeocodeResult.unresolved()

    return GeocodeResult(
        resolved=True,
        lat=float(lat),
        lng=float(lng),
        name=feature.text,
        display_name=feature.place_name,
    )


class GeocodeResolver:
    """Resolves free-text place queries via the Mapbox Geocoding API."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        cfg = get_mapbox_config()
        self.access_token = cfg["access_token"] if access_token is None else access_token
        self.base_url = (base_url or cfg["base_url"]).rstrip("/")
        self.timeout = cfg["timeout"] if timeout is None else timeout
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The injected session, else one per thread; Session is not thread-safe."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def ensure_configured(self) -> None:
        if not self.access_token:
            raise ConfigurationError("MAPBOX_TOKEN")

    def build_request(
        self,
        query: str,
        language: Optional[str] = None,
        proximity: Optional[Sequence[float]] = None,
    ) -> Tuple[str, Dict[str, str]]:
        """Return ``(url, params)`` for a lookup. Validates input first."""
        if not query or not query.strip():
            raise GeocodeInputError("query must not be empty")
        self.ensure_configured()

        params = {"access_token": self.access_token, "limit": "1"}
        if language:
            params["language"] = language
        if proximity is not None:
            params["proximity"] = format_proximity(proximity)

        url = f"{self.base_url}/{quote(query.strip(), safe='')}.json"
        return url, params

    def resolve(
        self,
        query: str,
        language: Optional[str] = None,
        proximity: Optional[Sequence[float]] = None,
    ) -> GeocodeResult:
        """Resolve ``query`` to coordinates.

        Args:
            query: Free-text place description
            language: Optional language code for result labels
            proximity: Optional ``(lng, lat)`` bias point

        Returns:
            GeocodeResult; ``resolved`` is False when the provider found nothing

        Raises:
            GeocodeInputError: Empty query or malformed proximity
            ConfigurationError: No access token configured
            GeocodeFailed: HTTP exchange failed or the body was not JSON
        """
        url, params = self.build_request(query, language, proximity)
        logger.debug(f"Geocoding query: {query!r}")

        try:
            response = self.session.get(url, params=params, headers=NO_CACHE_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Geocoding request failed for {query!r}: {e}")
            raise GeocodeFailed(str(e)) from e

        if not response.ok:
            detail = (response.text or "")[:500]
            logger.error(f"Geocoding provider returned {response.status_code} for {query!r}")
            raise GeocodeFailed(detail, status=response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise GeocodeFailed("INVALID_JSON_RESPONSE", status=response.status_code) from e

        result = parse_geocode_response(payload)
        if result.resolved:
            logger.debug(f"Geocoded {query!r} to {result.lat}, {result.lng}")
        else:
            logger.info(f"No geocoding match for {query!r}")
        return result


_resolver: GeocodeResolver | None = None


def get_resolver() -> GeocodeResolver:
    """Return a process-wide resolver built from the environment."""
    global _resolver
    if _resolver is None:
        _resolver = GeocodeResolver()
    return _resolver


__all__ = [
    "GeocodeResolver",
    "GeocodeResult",
    "MapboxFeature",
    "format_proximity",
    "parse_geocode_response",
    "get_resolver",
]
