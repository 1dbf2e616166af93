"""Base class for ONNX Runtime inference with GPU/TensorRT support."""

import logging
from pathlib import Path
from typing import Dict, List, Protocol, Union

import numpy as np
import onnxruntime

from .errors import EngineError, NoOutputError, OutputTypeError

logger = logging.getLogger(__name__)


class InferenceEngine(Protocol):
    """Anything that maps named float32 inputs to named outputs."""

    def run(self, input_data: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        ...


class ONNXInferenceBase:
    """Base class for ONNX inference with hardware acceleration."""

    def __init__(
        self,
        model_path: Union[str, Path],
        use_gpu: bool = False,
        use_tensorrt: bool = False,
    ):
        """Initialize ONNX Runtime session.

        Args:
            model_path: Path to ONNX model file
            use_gpu: Enable CUDA GPU acceleration
            use_tensorrt: Enable TensorRT acceleration (requires TensorRT)

        Raises:
            FileNotFoundError: If the model file does not exist
            EngineError: If ONNX Runtime cannot build a session from it
        """
        self.model_path = Path(model_path)
        if not self.model_path.exists():
            raise FileNotFoundError(f"Model not found: {model_path}")

        # Setup providers (TensorRT > CUDA > CPU)
        providers = self._get_providers(use_gpu, use_tensorrt)

        try:
            self.session = onnxruntime.InferenceSession(
                str(self.model_path),
                None,
                providers=providers
            )
        except Exception as e:
            raise EngineError(f"Failed to load {self.model_path}: {e}") from e

        # Cache input/output names
        self.input_names = [node.name for node in self.session.get_inputs()]
        self.output_names = [node.name for node in self.session.get_outputs()]
        logger.info(
            "Loaded %s (inputs=%s, outputs=%s)",
            self.model_path.name, self.input_names, self.output_names,
        )

    def _get_providers(self, use_gpu: bool, use_tensorrt: bool) -> List:
        """Get execution providers based on hardware availability.

        Priority: TensorRT > CUDA > CPU
        """
        available_providers = onnxruntime.get_available_providers()
        providers = []

        if use_tensorrt and "TensorrtExecutionProvider" in available_providers:
            providers.append(('TensorrtExecutionProvider', {}))

        if use_gpu and "CUDAExecutionProvider" in available_providers:
            providers.append((
                'CUDAExecutionProvider',
                {"cudnn_conv_algo_search": "DEFAULT"}
            ))

        # CPU (always available as fallback)
        providers.append('CPUExecutionProvider')

        return providers

    def run(self, input_data: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """Run inference on input data.

        Args:
            input_data: Dictionary mapping input names to numpy arrays

        Returns:
            Dictionary mapping output names to arrays, in model order
        """
        try:
            outputs = self.session.run(self.output_names, input_feed=input_data)
        except Exception as e:
            raise EngineError(f"Inference failed for {self.model_path.name}: {e}") from e
        return dict(zip(self.output_names, outputs))

    def __repr__(self):
        return f"ONNXInferenceBase(model={self.model_path.name})"


def first_output(outputs: Dict[str, np.ndarray]) -> np.ndarray:
    """Return the first output tensor, which must be float32."""
    if not outputs:
        raise NoOutputError("no output")
    name, tensor = next(iter(outputs.items()))
    if not isinstance(tensor, np.ndarray) or tensor.dtype != np.float32:
        found = getattr(tensor, "dtype", type(tensor).__name__)
        raise OutputTypeError(f"output '{name}' is not a float32 tensor (got {found})")
    return tensor
