"""
tripweave – main application entry point

* Flask app exposing the generation, geocoding and enrichment endpoints.
* Run locally with ``python main.py``; in production point a WSGI server at
  ``main:app``.
"""

import logging

from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from tripweave.api.config import get_port  # noqa: E402
from tripweave.app import create_app  # noqa: E402

app = create_app()

# --------------------------------------------------------------------------- #
# Local development runner
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting tripweave on http://localhost:%d", port)
    app.run(host="0.0.0.0", port=port, debug=False)

__all__ = ["app"]
