"""Server-side face descriptor extraction.

The browser normally computes descriptors itself; this adapter covers clients
that upload a frame instead. It wraps the ``face_recognition`` library (dlib),
which ships as the optional ``vision`` extra, so the rest of the service runs
without it.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Any, Optional, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..core.constants import DESCRIPTOR_LENGTH
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class FaceExtractionError(Exception):
    """Base error for images that cannot yield exactly one descriptor."""


class NoFaceDetectedError(FaceExtractionError):
    pass


class MultipleFacesError(FaceExtractionError):
    pass


class ExtractorUnavailableError(FaceExtractionError):
    """The face_recognition backend is not installed."""


def decode_image(image: Union[bytes, str]) -> np.ndarray:
    """Decode raw bytes, base64 or a ``data:image/...;base64,`` URL into an RGB array."""
    if isinstance(image, str):
        payload = image
        if image.startswith("data:"):
            _, sep, payload = image.partition(",")
            if not sep:
                raise ValidationError("image is not valid base64")
        try:
            image = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("image is not valid base64") from None
    if not isinstance(image, (bytes, bytearray)) or not image:
        raise ValidationError("image is required")

    try:
        img = Image.open(io.BytesIO(image)).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError("image could not be decoded") from None
    return np.ascontiguousarray(np.asarray(img), dtype=np.uint8)


class DescriptorExtractor:
    def __init__(self, face_module: Optional[Any] = None, *, detection_model: str = "hog"):
        self._face = face_module
        self._detection_model = detection_model

    def _backend(self):
        if self._face is None:
            try:
                import face_recognition
            except ImportError as e:
                raise ExtractorUnavailableError(
                    "face_recognition is not installed (pip install school-attendance[vision])"
                ) from e
            self._face = face_recognition
        return self._face

    @property
    def available(self) -> bool:
        try:
            self._backend()
        except ExtractorUnavailableError:
            return False
        return True

    def extract_descriptor(self, image: Union[bytes, str]) -> list[float]:
        face = self._backend()
        rgb = decode_image(image)

        boxes = face.face_locations(rgb, model=self._detection_model)
        if not boxes:
            raise NoFaceDetectedError("No face detected in the image")
        if len(boxes) > 1:
            raise MultipleFacesError(f"Multiple faces detected ({len(boxes)}); exactly one is required")

        encodings = face.face_encodings(rgb, boxes)
        if not encodings or len(encodings[0]) != DESCRIPTOR_LENGTH:
            raise NoFaceDetectedError("Face could not be encoded")

        logger.debug("Extracted descriptor from %sx%s image", rgb.shape[1], rgb.shape[0])
        return [float(v) for v in encodings[0]]
