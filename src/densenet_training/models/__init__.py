"""Classification model implementations."""

from densenet_training.models.base import BaseClassificationModel
from densenet_training.models.blocks import ConvBlock, DenseBlock, TransitionBlock
from densenet_training.models.densenet import (
    DenseNet,
    DenseNetClassificationModel,
    build_features,
    initialize_weights,
)

__all__ = [
    "BaseClassificationModel",
    "ConvBlock",
    "DenseBlock",
    "DenseNet",
    "DenseNetClassificationModel",
    "TransitionBlock",
    "build_features",
    "initialize_weights",
]
