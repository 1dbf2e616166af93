"""Exceptions raised by the OCR stages."""


class OCRError(Exception):
    """Base class for errors raised by rect_ocr."""
    pass


class EngineError(OCRError):
    """Exception raised when ONNX Runtime fails to build or run a session."""
    pass


class MissingOutputError(OCRError):
    """Inference produced no usable float32 output tensor."""
    pass


class NoOutputError(MissingOutputError):
    """Inference returned no tensors at all."""
    pass


class OutputTypeError(MissingOutputError):
    """The output tensor is not a float32 array."""
    pass
