"""Postprocessing modules for OCR outputs."""

import logging
from pathlib import Path
from typing import List, Sequence, Tuple, Union

import cv2
import numpy as np

from .errors import MissingOutputError
from .utils import Rect, bounding_rect, expand_rect, get_pad_length, transposed_index

logger = logging.getLogger(__name__)

BLANK = " "


def probability_map_to_gray(pred: np.ndarray, width: int, height: int) -> np.ndarray:
    """Turn the detector output into an 8-bit map the size of the source image.

    The output covers the padded canvas. It is read back through its
    transposed, flattened layout: pixel (x, y) lives at ``x * pad_h + y``.
    Values are scaled by 255, clipped to [0, 255] and truncated; NaN
    saturates to 255.

    Args:
        pred: Raw detector output, laid out (1, 1, pad_h, pad_w)
        width: Original (unpadded) image width
        height: Original (unpadded) image height

    Returns:
        uint8 array of shape (height, width)
    """
    pad_h = get_pad_length(height)
    pad_w = get_pad_length(width)

    flat = np.ascontiguousarray(np.asarray(pred).T).ravel()
    if flat.size < pad_h * pad_w:
        raise MissingOutputError(
            f"detector output has {flat.size} values, expected {pad_h * pad_w} "
            f"for a {pad_w}x{pad_h} canvas"
        )

    ys, xs = np.mgrid[0:height, 0:width]
    values = flat[transposed_index(xs, ys, pad_h)] * np.float32(255.0)
    values = np.nan_to_num(values, nan=255.0, posinf=255.0, neginf=0.0)
    return np.clip(values, 0, 255).astype(np.uint8)


class RectPostProcess:
    """Post-processing for text detection.

    Converts an 8-bit probability map into padded, axis-aligned boxes.
    """

    def __init__(self, border=8, threshold=200, min_side=5):
        """Initialize rectangle post-processor.

        Args:
            border: Pixels added around each box before clipping to the image
            threshold: Gray level at or above which a pixel counts as text
            min_side: Boxes with width or height <= this are dropped
        """
        self.border = border
        self.threshold = threshold
        self.min_side = min_side

    def __call__(self, gray: np.ndarray) -> List[Rect]:
        """Extract text rectangles from a gray probability map.

        Only outer contours count; holes and anything nested inside them are
        ignored. Rectangles follow contour extraction order, not reading order.
        """
        height, width = gray.shape[:2]
        contours = self.outer_contours(gray)

        rects = []
        for contour in contours:
            box = bounding_rect(contour, self.min_side)
            if box is None:
                continue
            rects.append(expand_rect(box, self.border, width, height))

        logger.debug(
            "%d outer contours, %d rectangles kept", len(contours), len(rects)
        )
        return rects

    def outer_contours(self, gray: np.ndarray) -> List[np.ndarray]:
        """Return contours of the thresholded map that have no parent."""
        bitmap = (gray >= self.threshold).astype(np.uint8) * 255

        outs = cv2.findContours(bitmap, cv2.RETR_TREE, cv2.CHAIN_APPROX_SIMPLE)
        if len(outs) == 3:
            contours, hierarchy = outs[1], outs[2]
        else:
            contours, hierarchy = outs

        if hierarchy is None:
            return []

        # hierarchy rows are [next, previous, first_child, parent]
        return [
            contour.reshape(-1, 2)
            for contour, node in zip(contours, hierarchy[0])
            if node[3] == -1
        ]


def build_character_table(vocab: Sequence[str]) -> List[str]:
    """Wrap a vocabulary with the blank sentinel at both ends.

    Index 0 is the blank the recognizer emits for "no character".
    """
    return [BLANK] + list(vocab) + [BLANK]


def load_character_table(character_dict_path: Union[str, Path]) -> List[str]:
    """Read a one-symbol-per-line dictionary file into a character table."""
    vocab = []
    with open(character_dict_path, "rb") as fin:
        for line in fin.readlines():
            vocab.append(line.decode("utf-8").rstrip("\r\n"))
    return build_character_table(vocab)


class GreedyCharDecode:
    """Greedy per-step decoding for text recognition.

    Every time step is decoded on its own: the highest-scoring class wins
    (lowest index on ties) and its raw score is the confidence. Blank steps
    and steps scoring at or below ``min_score`` are dropped. Repeated
    characters are not collapsed.
    """

    def __init__(self, character: Sequence[str], min_score: float = 0.8):
        """Initialize greedy decoder.

        Args:
            character: Character table, index 0 being the blank
            min_score: Scores must be strictly greater than this to survive
        """
        self.character = list(character)
        self.min_score = min_score

    def __call__(self, preds: np.ndarray) -> List[Tuple[str, float]]:
        """Decode recognizer output.

        Args:
            preds: Prediction array [1, time, num_classes]

        Returns:
            List of (character, confidence) tuples in time order
        """
        preds = np.asarray(preds)
        if preds.ndim != 3:
            raise MissingOutputError(
                f"recognizer output must be (batch, time, classes), got shape {preds.shape}"
            )
        preds = preds[0]
        if preds.shape[0] == 0 or preds.shape[1] == 0:
            return []

        preds_idx = preds.argmax(axis=1)
        preds_prob = preds[np.arange(preds.shape[0]), preds_idx]

        # Threshold at the tensor precision; equal scores must not pass
        min_score = np.asarray(self.min_score, dtype=preds.dtype)
        selection = (preds_idx != 0) & (preds_prob > min_score)
        selection &= preds_idx < len(self.character)

        return [
            (self.character[idx], float(score))
            for idx, score in zip(preds_idx[selection], preds_prob[selection])
        ]
