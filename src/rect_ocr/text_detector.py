"""
Text Detection Module - Stage 1 of OCR Pipeline

Finds text regions in an image as padded, axis-aligned rectangles.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
from PIL import Image

from .config import DetectorConfig
from .onnx_base import InferenceEngine, ONNXInferenceBase, first_output
from .postprocess import RectPostProcess, probability_map_to_gray
from .preprocess import det_operators, transform
from .utils import ImageLike, Rect, crop_image, to_pil, to_rgb_array

logger = logging.getLogger(__name__)

INPUT_NAME = "x"


class TextDetector:
    """Text detection module.

    Takes one image per call and returns the text rectangles found in it.
    Instances hold no per-call state and may be shared between threads as
    long as the underlying engine allows concurrent runs.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        config: Optional[DetectorConfig] = None,
    ):
        """Initialize text detector.

        Args:
            model_path: Path to detection ONNX model (det.onnx)
            config: Detector configuration (uses defaults if None)
        """
        if config is None:
            config = DetectorConfig()

        session = ONNXInferenceBase(
            model_path,
            use_gpu=config.use_gpu,
            use_tensorrt=config.use_tensorrt,
        )
        self._setup(session, config)

    @classmethod
    def from_engine(
        cls,
        engine: InferenceEngine,
        config: Optional[DetectorConfig] = None,
    ) -> "TextDetector":
        """Build a detector around an already constructed inference engine."""
        detector = cls.__new__(cls)
        detector._setup(engine, config if config is not None else DetectorConfig())
        return detector

    def _setup(self, session: InferenceEngine, config: DetectorConfig):
        self.config = config
        self.session = session
        self.preprocess_ops = det_operators()
        self.postprocess_op = RectPostProcess(
            border=config.rect_border_size,
            threshold=config.threshold,
            min_side=config.min_box_side,
        )

    def preprocess(self, image: ImageLike) -> np.ndarray:
        """Build the (1, 3, pad_h, pad_w) float32 input tensor for ``image``."""
        data = {"image": to_rgb_array(image)}
        (img,) = transform(data, self.preprocess_ops)
        return np.expand_dims(img, axis=0)

    def run_model(self, input_tensor: np.ndarray, width: int, height: int) -> np.ndarray:
        """Run detection and return the gray probability map, (height, width) uint8."""
        outputs = self.session.run({INPUT_NAME: input_tensor})
        pred = first_output(outputs)
        return probability_map_to_gray(pred, width, height)

    def find_text_rect(self, image: ImageLike) -> List[Rect]:
        """Detect text regions.

        Args:
            image: PIL image or (H, W, 3|4) RGB array

        Returns:
            Rectangles inside the image bounds, in contour extraction order
        """
        img = to_rgb_array(image)
        height, width = img.shape[:2]

        input_tensor = self.preprocess(img)
        gray = self.run_model(input_tensor, width, height)
        rects = self.postprocess_op(gray)

        logger.debug(
            "Detected %d regions in %dx%d image (tensor %s)",
            len(rects), width, height, input_tensor.shape,
        )
        return rects

    def find_text_img(self, image: ImageLike) -> List[Image.Image]:
        """Detect text regions and return them as cropped images."""
        img = to_pil(image)
        return [crop_image(img, rect) for rect in self.find_text_rect(img)]

    def __call__(self, image: ImageLike) -> List[Rect]:
        return self.find_text_rect(image)

    def __repr__(self):
        return f"TextDetector(session={self.session!r}, config={self.config})"
