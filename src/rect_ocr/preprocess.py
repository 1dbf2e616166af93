"""Preprocessing operations for OCR."""

import numpy as np
from PIL import Image
from typing import Dict, List, Tuple

from .utils import get_pad_length

DET_MEAN = [0.485, 0.456, 0.406]
DET_STD = [0.229, 0.224, 0.225]
REC_MEAN = [0.5, 0.5, 0.5]
REC_STD = [0.5, 0.5, 0.5]


class RecResizeImage:
    """Shrink tall text lines to the recognizer height, keeping the width."""

    def __init__(self, image_height=48, **kwargs):
        self.image_height = image_height

    def __call__(self, data: Dict) -> Dict:
        img = data['image']
        src_h, src_w = img.shape[:2]

        if src_h > self.image_height:
            # Bicubic (Catmull-Rom family), width untouched
            resized = Image.fromarray(img).resize(
                (src_w, self.image_height), Image.BICUBIC
            )
            img = np.asarray(resized, dtype=np.uint8)

        data['image'] = img
        data['shape'] = np.array([src_h, src_w])
        return data


class NormalizeImage:
    """Map uint8 RGB to float32 with ``(raw / 255 - mean) / std`` per channel."""

    def __init__(self, mean=DET_MEAN, std=DET_STD, **kwargs):
        self.mean = np.array(mean).reshape((1, 1, 3)).astype('float32')
        self.std = np.array(std).reshape((1, 1, 3)).astype('float32')

    def __call__(self, data: Dict) -> Dict:
        img = data['image'].astype('float32') / np.float32(255.0)
        data['image'] = (img - self.mean) / self.std
        return data


class ToCHWImage:
    """Convert image from HWC to CHW format."""

    def __call__(self, data: Dict) -> Dict:
        img = data['image']
        data['image'] = np.ascontiguousarray(img.transpose((2, 0, 1)))
        return data


class PadImage:
    """Place a CHW image in the top-left corner of a zero-filled canvas.

    With ``align_to_32`` both sides are rounded up to a multiple of 32;
    with ``image_height`` the canvas gets that fixed height and the
    image's own width. Canvas cells outside the image stay exactly 0.
    """

    def __init__(self, align_to_32=False, image_height=None, **kwargs):
        self.align_to_32 = align_to_32
        self.image_height = image_height

    def __call__(self, data: Dict) -> Dict:
        img = data['image']
        c, h, w = img.shape

        if self.align_to_32:
            pad_h, pad_w = get_pad_length(h), get_pad_length(w)
        else:
            pad_h = self.image_height if self.image_height is not None else h
            pad_w = w

        padding_im = np.zeros((c, pad_h, pad_w), dtype=np.float32)
        padding_im[:, 0:h, 0:w] = img
        data['image'] = padding_im
        return data


class KeepKeys:
    """Keep only specified keys in data dict."""

    def __init__(self, keep_keys: List[str], **kwargs):
        self.keep_keys = keep_keys

    def __call__(self, data: Dict) -> Tuple:
        return tuple(data[key] for key in self.keep_keys)


OPERATORS = {
    "RecResizeImage": RecResizeImage,
    "NormalizeImage": NormalizeImage,
    "ToCHWImage": ToCHWImage,
    "PadImage": PadImage,
    "KeepKeys": KeepKeys,
}


def create_operators(op_param_list: List[Dict]):
    """Create preprocessing operators from config list.

    Args:
        op_param_list: List of dicts like [{"OpName": {params}}]

    Returns:
        List of operator instances
    """
    ops = []
    for operator in op_param_list:
        if not isinstance(operator, dict) or len(operator) != 1:
            raise ValueError(f"Operator spec must be a single-key dict, got {operator!r}")
        op_name = list(operator)[0]
        if op_name not in OPERATORS:
            raise ValueError(f"Unknown preprocessing operator: {op_name}")
        param = {} if operator[op_name] is None else operator[op_name]
        ops.append(OPERATORS[op_name](**param))
    return ops


def transform(data: Dict, ops: List):
    """Apply preprocessing operators sequentially.

    Args:
        data: Dictionary containing 'image' key
        ops: List of operator instances

    Returns:
        Output of the last operator (a tuple when it is KeepKeys)
    """
    for op in ops:
        data = op(data)
    return data


def det_operators() -> List:
    """Normalize with ImageNet statistics and zero-pad to multiples of 32."""
    return create_operators([
        {"NormalizeImage": {"mean": DET_MEAN, "std": DET_STD}},
        {"ToCHWImage": None},
        {"PadImage": {"align_to_32": True}},
        {"KeepKeys": {"keep_keys": ["image"]}},
    ])


def rec_operators(image_height: int = 48) -> List:
    """Fit a text line to ``image_height`` rows and map pixels to [-1, 1]."""
    return create_operators([
        {"RecResizeImage": {"image_height": image_height}},
        {"NormalizeImage": {"mean": REC_MEAN, "std": REC_STD}},
        {"ToCHWImage": None},
        {"PadImage": {"image_height": image_height}},
        {"KeepKeys": {"keep_keys": ["image", "shape"]}},
    ])
