"""
Text Recognition Module - Stage 2 of OCR Pipeline

Recognizes the characters on a single cropped text line.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import RecognizerConfig
from .onnx_base import InferenceEngine, ONNXInferenceBase, first_output
from .postprocess import GreedyCharDecode, build_character_table, load_character_table
from .preprocess import rec_operators, transform
from .utils import ImageLike, to_rgb_array

logger = logging.getLogger(__name__)

INPUT_NAME = "x"


class TextRecognizer:
    """Text recognition module.

    One text line per call. The character table and configuration are fixed
    at construction, so a recognizer can be shared between threads.
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        char_dict_path: Union[str, Path],
        config: Optional[RecognizerConfig] = None,
    ):
        """Initialize text recognizer.

        Args:
            model_path: Path to recognition ONNX model (rec.onnx)
            char_dict_path: Path to character dictionary file
            config: Recognizer configuration (uses defaults if None)
        """
        if config is None:
            config = RecognizerConfig()

        character = load_character_table(char_dict_path)
        session = ONNXInferenceBase(
            model_path,
            use_gpu=config.use_gpu,
            use_tensorrt=config.use_tensorrt,
        )
        self._setup(session, character, config)

    @classmethod
    def from_engine(
        cls,
        engine: InferenceEngine,
        vocab: Sequence[str],
        config: Optional[RecognizerConfig] = None,
    ) -> "TextRecognizer":
        """Build a recognizer around an inference engine and a raw vocabulary.

        ``vocab`` is the dictionary as loaded, without blank sentinels.
        """
        recognizer = cls.__new__(cls)
        recognizer._setup(
            engine,
            build_character_table(vocab),
            config if config is not None else RecognizerConfig(),
        )
        return recognizer

    def _setup(self, session: InferenceEngine, character: List[str], config: RecognizerConfig):
        self.config = config
        self.session = session
        self.character = tuple(character)
        self.preprocess_ops = rec_operators(config.image_height)
        self.postprocess_op = GreedyCharDecode(self.character, config.min_score)

    def preprocess(self, image: ImageLike) -> np.ndarray:
        """Build the (1, 3, 48, width) float32 input tensor for ``image``."""
        data = {"image": to_rgb_array(image)}
        img, src_shape = transform(data, self.preprocess_ops)
        logger.debug(
            "Text line %dx%d -> tensor %s", src_shape[1], src_shape[0], img.shape
        )
        return np.expand_dims(img, axis=0)

    def run_model(self, input_tensor: np.ndarray) -> List[Tuple[str, float]]:
        outputs = self.session.run({INPUT_NAME: input_tensor})
        preds = first_output(outputs)
        return self.postprocess_op(preds)

    def predict_char_score(self, image: ImageLike) -> List[Tuple[str, float]]:
        """Recognize characters with their confidence.

        Args:
            image: Cropped text line (PIL image or RGB array)

        Returns:
            List of (character, confidence) tuples in reading order
        """
        input_tensor = self.preprocess(image)
        result = self.run_model(input_tensor)
        logger.debug("Tensor %s decoded to %d characters", input_tensor.shape, len(result))
        return result

    def predict_str(self, image: ImageLike) -> str:
        """Recognize a text line as a plain string."""
        return "".join(char for char, _ in self.predict_char_score(image))

    def __call__(self, image: ImageLike) -> str:
        return self.predict_str(image)

    def __repr__(self):
        return (
            f"TextRecognizer(session={self.session!r}, "
            f"characters={len(self.character)}, config={self.config})"
        )
