"""Test helpers: scripted inference engines and synthetic model outputs."""

import numpy as np


class StubEngine:
    """InferenceEngine that records its inputs and returns scripted outputs."""

    def __init__(self, respond):
        self.respond = respond
        self.calls = []

    def run(self, input_data):
        self.calls.append(input_data)
        if callable(self.respond):
            return self.respond(input_data)
        return self.respond


class FailingEngine:
    def __init__(self, error):
        self.error = error

    def run(self, input_data):
        raise self.error


def det_output(width, height, boxes, value=1.0):
    """Detector output for a width x height image with probability ``value``
    inside each (x0, y0, x1, y1) box, end-exclusive."""
    pad_h = height + (-height % 32)
    pad_w = width + (-width % 32)
    pred = np.zeros((1, 1, pad_h, pad_w), dtype=np.float32)
    for x0, y0, x1, y1 in boxes:
        pred[0, 0, y0:y1, x0:x1] = value
    return pred


def rec_output(steps, num_classes, score=0.95):
    """Recognizer output where step ``t`` peaks at class ``steps[t]``."""
    preds = np.full((1, len(steps), num_classes), 0.01, dtype=np.float32)
    for t, idx in enumerate(steps):
        preds[0, t, idx] = score
    return preds
