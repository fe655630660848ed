from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http_utils import error_response, json_body
from ..container import Container
from ..core.exceptions import ValidationError
from .extractor import ExtractorUnavailableError, FaceExtractionError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/descriptor/extract", methods=["POST"], endpoint="descriptor_extract")
    def descriptor_extract():
        if container.extractor is None:
            return error_response("Face extraction is disabled", 503)
        try:
            payload = json_body(request)
            descriptor = container.extractor.extract_descriptor(payload.get("image") or "")
        except ValidationError as e:
            return error_response(str(e), 400)
        except ExtractorUnavailableError as e:
            app.logger.warning("Descriptor extraction unavailable: %s", e)
            return error_response("Face extraction is not available on this server", 503)
        except FaceExtractionError as e:
            return error_response(str(e), 422)

        return jsonify({"success": True, "descriptor": descriptor}), 200
