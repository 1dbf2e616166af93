"""
High-level OCR Pipeline
Combines detection and recognition into a single call
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .config import DetectorConfig, RecognizerConfig
from .text_detector import TextDetector
from .text_recognizer import TextRecognizer
from .utils import ImageLike, Rect, crop_image, to_pil

logger = logging.getLogger(__name__)


class OCRPipeline:
    """
    Complete OCR pipeline: detect text rectangles, crop them, recognize each.

    Usage:
        ocr = OCRPipeline("det.onnx", "rec.onnx", "keys.txt")
        for rect, text in ocr.ocr(image):
            ...
    """

    def __init__(
        self,
        det_model_path: Union[str, Path],
        rec_model_path: Union[str, Path],
        char_dict_path: Union[str, Path],
        det_config: Optional[DetectorConfig] = None,
        rec_config: Optional[RecognizerConfig] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize OCR pipeline

        Args:
            det_model_path: Path to detection model
            rec_model_path: Path to recognition model
            char_dict_path: Path to character dictionary
            det_config: Detector configuration (defaults if None)
            rec_config: Recognizer configuration (defaults if None)
            max_workers: Threads used to recognize regions; None or 1 runs
                them one after another on the calling thread
        """
        for path, name in [
            (det_model_path, "detection model"),
            (rec_model_path, "recognition model"),
            (char_dict_path, "character dictionary"),
        ]:
            if not Path(path).exists():
                raise FileNotFoundError(f"Required {name} not found at: {path}")

        self.text_detector = TextDetector(det_model_path, det_config)
        self.text_recognizer = TextRecognizer(rec_model_path, char_dict_path, rec_config)
        self.max_workers = max_workers

    @classmethod
    def from_components(
        cls,
        text_detector: TextDetector,
        text_recognizer: TextRecognizer,
        max_workers: Optional[int] = None,
    ) -> "OCRPipeline":
        """Assemble a pipeline from already built stages."""
        pipeline = cls.__new__(cls)
        pipeline.text_detector = text_detector
        pipeline.text_recognizer = text_recognizer
        pipeline.max_workers = max_workers
        return pipeline

    def ocr(self, img: ImageLike) -> List[Tuple[Rect, str]]:
        """
        Perform OCR on image

        Args:
            img: Input image (PIL image or RGB array)

        Returns:
            List of (rectangle, text) pairs in detection order. Regions whose
            text comes out empty are kept.
        """
        image = to_pil(img)
        rects = self.text_detector.find_text_rect(image)
        if not rects:
            return []

        crops = [crop_image(image, rect) for rect in rects]

        if self.max_workers is not None and self.max_workers > 1 and len(crops) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                texts = list(executor.map(self.text_recognizer.predict_str, crops))
        else:
            texts = [self.text_recognizer.predict_str(crop) for crop in crops]

        logger.debug("Recognized %d regions", len(texts))
        return list(zip(rects, texts))

    def __call__(self, img: ImageLike) -> List[Tuple[Rect, str]]:
        return self.ocr(img)

    def __repr__(self):
        return (
            f"OCRPipeline(\n"
            f"  detector={self.text_detector},\n"
            f"  recognizer={self.text_recognizer}\n"
            f")"
        )
