"""DenseNet network and its LightningModule wrapper."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

import torch
import torch.nn.functional as F
from torch import nn

from densenet_training.models.base import BaseClassificationModel
from densenet_training.models.blocks import DenseBlock, TransitionBlock
from densenet_training.utils.hydra import register

DEFAULT_GROWTH_RATE = 32
DEFAULT_NUM_CONVS: tuple[int, ...] = (4, 4, 4, 4)


def build_features(
    num_convs_in_dense_blocks: Sequence[int] = DEFAULT_NUM_CONVS,
    growth_rate: int = DEFAULT_GROWTH_RATE,
    in_channels: int = 3,
    stem_channels: int = 64,
) -> tuple[nn.Sequential, int]:
    """Assemble the feature stack and return it with its output channel count.

    Stem (7x7/2 conv, BN, ReLU, 3x3/2 max-pool), then dense blocks with a
    transition block between each pair, then a final BN.  Transitions halve
    the channel count with truncation, so an odd count loses one channel.
    """
    features = nn.Sequential(
        nn.Conv2d(in_channels, stem_channels, kernel_size=7, stride=2, padding=3),
        nn.BatchNorm2d(stem_channels),
        nn.ReLU(),
        nn.MaxPool2d(kernel_size=3, stride=2, padding=1),
    )

    num_channels = stem_channels
    last = len(num_convs_in_dense_blocks) - 1
    for i, num_convs in enumerate(num_convs_in_dense_blocks):
        features.append(DenseBlock(num_convs, num_channels, growth_rate))
        num_channels += num_convs * growth_rate
        if i != last:
            halved = int(num_channels / 2.0)
            features.append(TransitionBlock(num_channels, halved))
            num_channels = halved

    features.append(nn.BatchNorm2d(num_channels))
    return features, num_channels


def _init_conv(module: nn.Conv2d) -> None:
    nn.init.kaiming_normal_(module.weight)


def _init_norm(module: nn.BatchNorm2d) -> None:
    nn.init.constant_(module.weight, 1)
    nn.init.constant_(module.bias, 0)


def _init_linear(module: nn.Linear) -> None:
    # Weight keeps torch's default init.
    if module.bias is not None:
        nn.init.constant_(module.bias, 0)


# Closed set of layer kinds that carry an initialization policy.
LAYER_INITIALIZERS: dict[type[nn.Module], Callable[[Any], None]] = {
    nn.Conv2d: _init_conv,
    nn.BatchNorm2d: _init_norm,
    nn.Linear: _init_linear,
}


def initialize_weights(network: nn.Module) -> None:
    """Apply the per-kind initializer to every submodule of ``network``."""
    for module in network.modules():
        initializer = LAYER_INITIALIZERS.get(type(module))
        if initializer is not None:
            initializer(module)


class DenseNet(nn.Module):
    """DenseNet classifier: ``[N, 3, H, W]`` images -> ``[N, num_classes]`` logits.

    With the defaults (growth rate 32, four dense blocks of four convs) the
    feature stack ends at 248 channels.
    """

    def __init__(
        self,
        num_classes: int,
        growth_rate: int = DEFAULT_GROWTH_RATE,
        num_convs_in_dense_blocks: Sequence[int] = DEFAULT_NUM_CONVS,
        in_channels: int = 3,
        stem_channels: int = 64,
    ) -> None:
        super().__init__()
        self.features, self.out_channels = build_features(
            num_convs_in_dense_blocks,
            growth_rate=growth_rate,
            in_channels=in_channels,
            stem_channels=stem_channels,
        )
        self.classifier = nn.Linear(self.out_channels, num_classes)
        initialize_weights(self)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        features = self.features(x)
        out = F.relu(features)
        out = F.adaptive_avg_pool2d(out, (1, 1))
        out = torch.flatten(out, 1)
        return self.classifier(out)  # type: ignore[no-any-return]


@register(group="model", name="densenet")
class DenseNetClassificationModel(BaseClassificationModel):
    """DenseNet trained from scratch (no pretrained weights exist for it).

    Defaults follow the flowers setup: 17 classes, growth rate 32, four dense
    blocks of four convolutions.
    """

    def __init__(
        self,
        num_classes: int = 17,
        growth_rate: int = DEFAULT_GROWTH_RATE,
        num_convs_in_dense_blocks: Sequence[int] = DEFAULT_NUM_CONVS,
        **kwargs: Any,
    ) -> None:
        super().__init__(num_classes=num_classes, **kwargs)
        self.model = DenseNet(
            num_classes,
            growth_rate=growth_rate,
            num_convs_in_dense_blocks=list(num_convs_in_dense_blocks),
        )

    def forward(self, images: torch.Tensor) -> torch.Tensor:
        return self.model(images)  # type: ignore[no-any-return]
