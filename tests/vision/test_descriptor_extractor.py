from __future__ import annotations

import base64
import io
import sys

import numpy as np
import pytest
from PIL import Image

from src.school_attendance.school_attendance.core.exceptions import ValidationError
from src.school_attendance.school_attendance.vision.extractor import (
    DescriptorExtractor,
    ExtractorUnavailableError,
    MultipleFacesError,
    NoFaceDetectedError,
    decode_image,
)


class FakeFaceModule:
    def __init__(self, boxes):
        self._boxes = boxes
        self.seen_shape = None

    def face_locations(self, rgb, model="hog"):
        self.seen_shape = rgb.shape
        return list(self._boxes)

    def face_encodings(self, rgb, boxes):
        return [np.full(128, 0.25) for _ in boxes]


def _png_data_url(width=8, height=6, mode="RGBA"):
    buf = io.BytesIO()
    Image.new(mode, (width, height)).save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def test_decode_image_converts_to_rgb():
    rgb = decode_image(_png_data_url(width=8, height=6, mode="RGBA"))
    assert rgb.shape == (6, 8, 3)
    assert rgb.dtype == np.uint8


@pytest.mark.parametrize("bad", ["data:image/png;base64,!!!", "data:image/png;base64", "", b"not an image"])
def test_decode_image_rejects_garbage(bad):
    with pytest.raises(ValidationError):
        decode_image(bad)


def test_single_face_yields_a_descriptor():
    face = FakeFaceModule(boxes=[(0, 4, 4, 0)])
    descriptor = DescriptorExtractor(face).extract_descriptor(_png_data_url())

    assert len(descriptor) == 128
    assert descriptor[0] == 0.25
    assert face.seen_shape == (6, 8, 3)


def test_no_face_is_reported():
    with pytest.raises(NoFaceDetectedError):
        DescriptorExtractor(FakeFaceModule(boxes=[])).extract_descriptor(_png_data_url())


def test_more_than_one_face_is_reported():
    face = FakeFaceModule(boxes=[(0, 4, 4, 0), (1, 5, 5, 1)])
    with pytest.raises(MultipleFacesError):
        DescriptorExtractor(face).extract_descriptor(_png_data_url())


def test_missing_backend_is_unavailable(monkeypatch):
    monkeypatch.setitem(sys.modules, "face_recognition", None)
    extractor = DescriptorExtractor()

    assert extractor.available is False
    with pytest.raises(ExtractorUnavailableError):
        extractor.extract_descriptor(_png_data_url())
