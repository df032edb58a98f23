"""
GestureNet: lightweight MLP over flattened hand landmarks.

Architecture:
    Input  : 63 features (21 landmarks x 3, after normalization)
    FC1    : 128 units, BatchNorm, ReLU, Dropout(0.3)
    FC2    : 64 units, BatchNorm, ReLU, Dropout(0.2)
    FC3    : 32 units, ReLU
    Output : num_classes logits (softmax applied in predict_proba)

Only inference is supported here; checkpoints come from an external
training notebook.
"""

import logging

from touchless_gestures.core.types import HAND_FEATURES, HandGestureType

logger = logging.getLogger(__name__)

try:
    import torch
    import torch.nn as nn
    TORCH_AVAILABLE = True
except ImportError:
    TORCH_AVAILABLE = False
    logger.info("PyTorch not available; GestureNet disabled")

DEFAULT_GESTURE_CLASSES = [g.value for g in HandGestureType if g is not HandGestureType.NONE]

NUM_DEFAULT_CLASSES = len(DEFAULT_GESTURE_CLASSES)


def _check_torch():
    if not TORCH_AVAILABLE:
        raise RuntimeError(
            "PyTorch is required for GestureNet. "
            "Install with: pip install touchless-gestures[torch]"
        )


if TORCH_AVAILABLE:

    class GestureNet(nn.Module):
        """Small MLP mapping one landmark feature vector to class logits."""

        def __init__(self, input_dim=HAND_FEATURES, num_classes=NUM_DEFAULT_CLASSES,
                     dropout1=0.3, dropout2=0.2):
            super().__init__()
            self.input_dim = input_dim
            self.num_classes = num_classes

            self.features = nn.Sequential(
                nn.Linear(input_dim, 128),
                nn.BatchNorm1d(128),
                nn.ReLU(inplace=True),
                nn.Dropout(dropout1),

                nn.Linear(128, 64),
                nn.BatchNorm1d(64),
                nn.ReLU(inplace=True),
                nn.Dropout(dropout2),

                nn.Linear(64, 32),
                nn.ReLU(inplace=True),
            )

            self.classifier = nn.Linear(32, num_classes)

        def forward(self, x):
            """Forward pass: (batch, input_dim) -> (batch, num_classes) logits."""
            x = self.features(x)
            return self.classifier(x)

        def predict_proba(self, x):
            """Softmax probabilities, shape (batch, num_classes)."""
            self.eval()
            with torch.no_grad():
                return torch.softmax(self.forward(x), dim=1)

        @classmethod
        def load_checkpoint(cls, path, device="cpu"):
            """Load a trained model from checkpoint.

            Accepts either a full checkpoint dict
            (``model_state_dict``, ``num_classes``, ``input_dim``) or a raw
            state_dict, in which case the shapes are read off the weights.

            Returns:
                Loaded GestureNet model in eval mode
            """
            _check_torch()
            checkpoint = torch.load(path, map_location=device)

            if isinstance(checkpoint, dict) and "model_state_dict" in checkpoint:
                state_dict = checkpoint["model_state_dict"]
                num_classes = checkpoint.get("num_classes", NUM_DEFAULT_CLASSES)
                input_dim = checkpoint.get("input_dim", HAND_FEATURES)
            else:
                state_dict = checkpoint
                num_classes = state_dict["classifier.weight"].shape[0]
                input_dim = state_dict["features.0.weight"].shape[1]

            model = cls(input_dim=input_dim, num_classes=num_classes)
            model.load_state_dict(state_dict)
            model.to(device)
            model.eval()
            logger.info("Loaded GestureNet (%d inputs, %d classes) from %s",
                        input_dim, num_classes, path)
            return model

else:

    class GestureNet:
        """Placeholder that fails loudly when PyTorch is not installed."""

        def __init__(self, *args, **kwargs):
            _check_torch()

        @classmethod
        def load_checkpoint(cls, path, device="cpu"):
            _check_torch()
