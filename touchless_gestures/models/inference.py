"""
Inference engines for the gesture classifier.

Every engine exposes the same small surface:

    engine.input_width      features expected per sample
    engine.output_width     number of output classes
    engine.predict_proba(v) probabilities, shape (output_width,)
    engine.close()

Backends:
    numpy    .npz dense MLP (weight_0, bias_0, ..., weight_k, bias_k)
    pytorch  .pth/.pt GestureNet checkpoint (optional torch extra)
"""

import os
import logging

import numpy as np

logger = logging.getLogger(__name__)

BACKEND_EXTENSIONS = {
    ".npz": "numpy",
    ".pth": "pytorch",
    ".pt": "pytorch",
}


def softmax(logits):
    """Numerically stable softmax over a 1-D array."""
    exp_l = np.exp(logits - np.max(logits))
    return exp_l / exp_l.sum()


class NumpyMLPEngine:
    """Dense ReLU network whose weights and layer shapes live in an .npz.

    Weight ``i`` has shape (in_i, out_i) and must chain into layer i + 1.
    The output layer is softmaxed unless the archive stores
    ``output_activation="none"``, meaning the model already emits
    probabilities.
    """

    def __init__(self, model_path):
        if not os.path.isfile(model_path):
            raise FileNotFoundError("Model not found: %s" % model_path)

        with np.load(model_path, allow_pickle=False) as archive:
            self._weights, self._biases = self._read_layers(archive)
            activation = archive["output_activation"] if "output_activation" in archive.files else "softmax"
            self._output_activation = str(activation)

        self._model_path = model_path
        logger.info("Numpy MLP loaded: %s (%s)", model_path,
                    " -> ".join(str(w.shape[0]) for w in self._weights) + " -> %d" % self.output_width)

    @staticmethod
    def _read_layers(archive):
        weights, biases = [], []
        i = 0
        while "weight_%d" % i in archive.files:
            weight = np.asarray(archive["weight_%d" % i], dtype=np.float32)
            bias = np.asarray(archive["bias_%d" % i], dtype=np.float32).ravel()
            if weight.ndim != 2 or bias.shape[0] != weight.shape[1]:
                raise ValueError("Layer %d: weight %s does not match bias %s"
                                 % (i, weight.shape, bias.shape))
            if weights and weights[-1].shape[1] != weight.shape[0]:
                raise ValueError("Layer %d: input width %d does not chain from %d"
                                 % (i, weight.shape[0], weights[-1].shape[1]))
            weights.append(weight)
            biases.append(bias)
            i += 1

        if not weights:
            raise ValueError("No layers found (expected weight_0/bias_0 ...)")
        return weights, biases

    @property
    def input_width(self):
        return int(self._weights[0].shape[0])

    @property
    def output_width(self):
        return int(self._weights[-1].shape[1])

    def predict_proba(self, features):
        """Probabilities for one feature vector of length input_width."""
        x = np.asarray(features, dtype=np.float32).reshape(self.input_width)
        last = len(self._weights) - 1
        for i, (weight, bias) in enumerate(zip(self._weights, self._biases)):
            x = x @ weight + bias
            if i < last:
                x = np.maximum(x, 0.0)

        if self._output_activation == "none":
            return x
        return softmax(x)

    def close(self):
        self._weights = []
        self._biases = []


class TorchEngine:
    """GestureNet checkpoint on CPU (or CUDA when available)."""

    def __init__(self, model_path, num_threads=4):
        from touchless_gestures.models.gesture_net import GestureNet, TORCH_AVAILABLE
        if not TORCH_AVAILABLE:
            raise RuntimeError("PyTorch backend requested but torch is not installed")
        if not os.path.isfile(model_path):
            raise FileNotFoundError("Model not found: %s" % model_path)

        import torch
        self._torch = torch
        if num_threads:
            torch.set_num_threads(num_threads)
        self._device = "cuda" if torch.cuda.is_available() else "cpu"
        self._model = GestureNet.load_checkpoint(model_path, device=self._device)
        logger.info("PyTorch engine on %s: %s", self._device, model_path)

    @property
    def input_width(self):
        return int(self._model.input_dim)

    @property
    def output_width(self):
        return int(self._model.num_classes)

    def predict_proba(self, features):
        tensor = self._torch.from_numpy(
            np.asarray(features, dtype=np.float32).reshape(1, self.input_width)
        ).to(self._device)
        probs = self._model.predict_proba(tensor)
        return probs.cpu().numpy().squeeze(0)

    def close(self):
        self._model = None


def resolve_backend(model_path, backend="auto"):
    """Pick a backend name, by file extension when ``backend`` is "auto"."""
    if backend != "auto":
        return backend
    ext = os.path.splitext(model_path)[1].lower()
    if ext not in BACKEND_EXTENSIONS:
        raise ValueError("Cannot infer backend for model file: %s" % model_path)
    return BACKEND_EXTENSIONS[ext]


def load_engine(model_path, backend="auto", num_threads=4):
    """Create the inference engine for a model file.

    Raises:
        ValueError: unknown backend or malformed model
        FileNotFoundError: missing model file
        RuntimeError: backend library not installed
    """
    backend = resolve_backend(model_path, backend)
    if backend == "numpy":
        return NumpyMLPEngine(model_path)
    if backend == "pytorch":
        return TorchEngine(model_path, num_threads=num_threads)
    raise ValueError("Unknown inference backend: %s" % backend)
