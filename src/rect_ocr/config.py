"""Configuration classes for OCR modules."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DetectorConfig:
    """Configuration for text detection stage."""
    rect_border_size: int = 8  # Pixels added around each detected box
    threshold: int = 200  # Gray level at or above which a pixel is text
    min_box_side: int = 5  # Boxes with a side <= this are dropped as noise
    use_gpu: bool = False  # Enable CUDA GPU acceleration
    use_tensorrt: bool = False  # Enable TensorRT acceleration

    def __post_init__(self):
        if self.rect_border_size < 0:
            raise ValueError(f"rect_border_size must be >= 0, got {self.rect_border_size}")
        if not 0 <= self.threshold <= 255:
            raise ValueError(f"threshold must be in [0, 255], got {self.threshold}")
        if self.min_box_side < 0:
            raise ValueError(f"min_box_side must be >= 0, got {self.min_box_side}")


@dataclass(frozen=True)
class RecognizerConfig:
    """Configuration for text recognition stage."""
    min_score: float = 0.8  # Characters must score strictly above this
    image_height: int = 48  # Input height expected by the recognition model
    use_gpu: bool = False  # Enable CUDA GPU acceleration
    use_tensorrt: bool = False  # Enable TensorRT acceleration

    def __post_init__(self):
        if self.image_height <= 0:
            raise ValueError(f"image_height must be positive, got {self.image_height}")
