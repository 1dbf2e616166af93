"""
Rectangle-based ONNX OCR

Two independent stages:
- TextDetector: Finds axis-aligned text rectangles in images
- TextRecognizer: Converts cropped text lines to strings

High-level interface:
- OCRPipeline: detection + recognition in one call
"""

from .config import DetectorConfig, RecognizerConfig
from .errors import EngineError, MissingOutputError, NoOutputError, OCRError, OutputTypeError
from .onnx_base import InferenceEngine, ONNXInferenceBase
from .pipeline import OCRPipeline
from .text_detector import TextDetector
from .text_recognizer import TextRecognizer
from .utils import Rect

__version__ = "0.1.0"
__all__ = [
    "TextDetector",
    "TextRecognizer",
    "DetectorConfig",
    "RecognizerConfig",
    "OCRPipeline",
    "Rect",
    "InferenceEngine",
    "ONNXInferenceBase",
    "OCRError",
    "EngineError",
    "MissingOutputError",
    "NoOutputError",
    "OutputTypeError",
]
