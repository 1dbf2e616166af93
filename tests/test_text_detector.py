import numpy as np
import pytest
from PIL import Image

from conftest import FailingEngine, StubEngine, det_output
from rect_ocr import DetectorConfig, EngineError, MissingOutputError, Rect, TextDetector


def make_detector(respond, **config):
    engine = StubEngine(respond)
    return TextDetector.from_engine(engine, DetectorConfig(**config)), engine


def test_find_text_rect_feeds_padded_tensor_named_x():
    image = Image.new("RGB", (40, 30), (255, 255, 255))
    detector, engine = make_detector({"out": det_output(40, 30, [(10, 5, 30, 15)])})

    rects = detector.find_text_rect(image)

    (feed,) = engine.calls
    assert list(feed) == ["x"]
    assert feed["x"].shape == (1, 3, 32, 64)
    assert feed["x"].dtype == np.float32
    # box x 10..29, y 5..14 grown by 8 and clipped to the 40x30 image
    assert rects == [Rect(2, 0, 35, 25)]


def test_border_size_is_configurable():
    image = Image.new("RGB", (64, 64))
    detector, _ = make_detector(
        {"out": det_output(64, 64, [(20, 20, 40, 40)])}, rect_border_size=2
    )
    assert detector.find_text_rect(image) == [Rect(18, 18, 23, 23)]


def test_find_text_img_returns_crops():
    image = Image.new("RGB", (100, 60), (0, 0, 0))
    boxes = [(10, 10, 40, 20), (50, 30, 90, 45)]
    detector, _ = make_detector({"out": det_output(100, 60, boxes)})

    crops = detector.find_text_img(image)
    rects = detector.find_text_rect(image)

    assert len(crops) == 2
    assert sorted(c.size for c in crops) == sorted((r.width, r.height) for r in rects)


def test_accepts_rgba_arrays():
    pixels = np.zeros((32, 32, 4), dtype=np.uint8)
    detector, engine = make_detector({"out": det_output(32, 32, [])})

    assert detector.find_text_rect(pixels) == []
    assert engine.calls[0]["x"].shape == (1, 3, 32, 32)


def test_rects_always_fit_the_image():
    image = Image.new("RGB", (70, 45))
    boxes = [(0, 0, 15, 10), (55, 30, 70, 45), (30, 10, 45, 40)]
    detector, _ = make_detector({"out": det_output(70, 45, boxes)})

    for r in detector.find_text_rect(image):
        assert r.left >= 0 and r.top >= 0
        assert r.right <= 70 and r.bottom <= 45


def test_no_output_is_missing_output():
    detector, _ = make_detector({})
    with pytest.raises(MissingOutputError):
        detector.find_text_rect(Image.new("RGB", (32, 32)))


def test_wrong_dtype_is_missing_output():
    pred = det_output(32, 32, []).astype(np.float64)
    detector, _ = make_detector({"out": pred})
    with pytest.raises(MissingOutputError):
        detector.find_text_rect(Image.new("RGB", (32, 32)))


def test_engine_errors_propagate():
    detector = TextDetector.from_engine(FailingEngine(EngineError("boom")))
    with pytest.raises(EngineError, match="boom"):
        detector.find_text_rect(Image.new("RGB", (32, 32)))


def test_missing_model_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        TextDetector(tmp_path / "det.onnx")


def test_wide_dtype_array_is_rejected_before_inference():
    detector, engine = make_detector({"out": det_output(32, 32, [])})
    white16 = np.full((32, 32, 3), 256, dtype=np.uint16)

    with pytest.raises(ValueError, match="uint8"):
        detector.find_text_rect(white16)
    assert engine.calls == []
