import numpy as np
import pytest
from PIL import Image

from conftest import FailingEngine, StubEngine, rec_output
from rect_ocr import EngineError, MissingOutputError, RecognizerConfig, TextRecognizer

VOCAB = ["h", "e", "l", "o"]  # table: " ", h, e, l, o, " "


def make_recognizer(respond, **config):
    engine = StubEngine(respond)
    recognizer = TextRecognizer.from_engine(engine, VOCAB, RecognizerConfig(**config))
    return recognizer, engine


def test_character_table_has_blank_sentinels():
    recognizer, _ = make_recognizer({})
    assert recognizer.character == (" ", "h", "e", "l", "o", " ")


def test_predict_str_keeps_repeats():
    preds = rec_output([1, 0, 2, 3, 0, 3, 4, 0], num_classes=6)
    recognizer, engine = make_recognizer({"out": preds})

    assert recognizer.predict_str(Image.new("RGB", (120, 32))) == "hello"
    assert engine.calls[0]["x"].shape == (1, 3, 48, 120)


def test_predict_char_score_filters_low_confidence():
    preds = rec_output([1, 2, 3], num_classes=6)
    preds[0, 1, 2] = 0.5
    recognizer, _ = make_recognizer({"out": preds})

    result = recognizer.predict_char_score(Image.new("RGB", (40, 20)))

    assert [c for c, _ in result] == ["h", "l"]
    assert all(score > 0.8 for _, score in result)


def test_min_score_is_configurable():
    preds = rec_output([1, 2, 3], num_classes=6, score=0.6)
    recognizer, _ = make_recognizer({"out": preds}, min_score=0.5)
    assert recognizer.predict_str(Image.new("RGB", (40, 20))) == "hel"


def test_tall_image_is_resized_to_48_rows():
    recognizer, engine = make_recognizer({"out": rec_output([], num_classes=6)})

    assert recognizer.predict_str(Image.new("RGB", (200, 100))) == ""
    assert engine.calls[0]["x"].shape == (1, 3, 48, 200)


def test_short_image_is_zero_padded():
    recognizer, engine = make_recognizer({"out": rec_output([], num_classes=6)})

    recognizer.predict_str(Image.new("RGB", (30, 10), (255, 255, 255)))

    tensor = engine.calls[0]["x"]
    assert np.all(tensor[:, :, :10, :] == 1.0)
    assert np.all(tensor[:, :, 10:, :] == 0.0)


def test_no_output_is_missing_output():
    recognizer, _ = make_recognizer({})
    with pytest.raises(MissingOutputError, match="no output"):
        recognizer.predict_str(Image.new("RGB", (10, 10)))


def test_wrong_dtype_is_missing_output():
    preds = rec_output([1], num_classes=6).astype(np.float16)
    recognizer, _ = make_recognizer({"out": preds})
    with pytest.raises(MissingOutputError):
        recognizer.predict_str(Image.new("RGB", (10, 10)))


def test_engine_errors_propagate():
    recognizer = TextRecognizer.from_engine(FailingEngine(EngineError("rec failed")), VOCAB)
    with pytest.raises(EngineError):
        recognizer.predict_char_score(Image.new("RGB", (10, 10)))


def test_missing_dictionary_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        TextRecognizer(tmp_path / "rec.onnx", tmp_path / "keys.txt")


def test_preprocess_logs_source_size(caplog):
    recognizer, _ = make_recognizer({"out": rec_output([], num_classes=6)})

    with caplog.at_level("DEBUG", logger="rect_ocr.text_recognizer"):
        recognizer.predict_str(Image.new("RGB", (200, 100)))

    assert "Text line 200x100 -> tensor (3, 48, 200)" in caplog.text
