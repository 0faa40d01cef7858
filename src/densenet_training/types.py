"""Type aliases and TypedDicts for densenet_training inter-module contracts."""

from typing import TypedDict

import torch


class ClassificationBatch(TypedDict):
    """A single batch from a flowers DataLoader.

    images: Float tensor of shape (B, C, H, W), normalized with ImageNet stats.
    labels: Long tensor of shape (B,), integer class indices (-100 = no label).
    paths: Source image path for each sample, in batch order.
    """

    images: torch.Tensor
    labels: torch.Tensor
    paths: list[str]
