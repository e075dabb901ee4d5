"""Fake collaborators for the geocoding and HTTP layers."""

import json
import threading
from unittest.mock import Mock

from tripweave.api.errors import ConfigurationError
from tripweave.api.geocoding import GeocodeResult


class FakeResolver:
    """Stands in for GeocodeResolver. ``answers`` maps query -> result or exception."""

    def __init__(self, answers=None, configured=True):
        self.answers = answers or {}
        self.configured = configured
        self.calls = []
        self._lock = threading.Lock()

    def ensure_configured(self):
        if not self.configured:
            raise ConfigurationError("MAPBOX_TOKEN")

    def resolve(self, query, language=None, proximity=None):
        with self._lock:
            self.calls.append((query, language))
        answer = self.answers.get(query, GeocodeResult.unresolved())
        if isinstance(answer, Exception):
            raise answer
        return answer


def hit(lat, lng, display_name=None):
    return GeocodeResult(resolved=True, lat=lat, lng=lng, name=None, display_name=display_name)


def make_response(status=200, payload=None, text=None, json_error=False):
    """Build a Mock shaped like a requests.Response."""
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.text = text if text is not None else json.dumps(payload)
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


