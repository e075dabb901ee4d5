# tripweave/routes/base.py
"""Request parsing and error mapping shared by the blueprints."""

import json
import logging
from typing import Type, TypeVar

from flask import jsonify, request
from pydantic import BaseModel, ValidationError

from tripweave.api.errors import (
    BatchTransportError,
    ConfigurationError,
    GenerationError,
    GeocodeFailed,
    GeocodeInputError,
    InvalidRequestError,
    PlanEditError,
    PlanShapeError,
    TripweaveError,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# First match wins, so subclasses must come before their bases.
STATUS_BY_ERROR = (
    (GeocodeInputError, 400),
    (InvalidRequestError, 400),
    (PlanEditError, 400),
    (PlanShapeError, 422),
    (ConfigurationError, 500),
    (GeocodeFailed, 502),
    (BatchTransportError, 502),
    (GenerationError, 502),
)


def parse_body(model: Type[M]) -> M:
    """Validate the JSON body of the current request against ``model``."""
    data = request.get_json(silent=True)
    if data is None:
        raise InvalidRequestError([{"msg": "body must be a JSON object"}])
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise InvalidRequestError(json.loads(exc.json(include_url=False))) from exc


def status_for(error: TripweaveError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 500


def register_error_handlers(app):
    """Map tripweave errors to JSON responses."""

    @app.errorhandler(TripweaveError)
    def _handle_tripweave_error(error):
        status = status_for(error)
        if status >= 500:
            logger.error(f"{error.code}: {error}")
        else:
            logger.info(f"Rejected request with {error.code}: {error}")
        return jsonify(error.to_dict()), status


__all__ = ["parse_body", "register_error_handlers", "status_for"]
