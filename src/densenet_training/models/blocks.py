"""Building blocks of the DenseNet feature stack."""

from __future__ import annotations

import torch
from torch import nn


class ConvBlock(nn.Sequential):
    """BN -> ReLU -> 3x3 conv whose output is concatenated onto its input.

    ``[N, C, H, W] -> [N, C + num_channels, H, W]``.
    """

    def __init__(self, input_channels: int, num_channels: int) -> None:
        super().__init__(
            nn.BatchNorm2d(input_channels),
            nn.ReLU(),
            nn.Conv2d(input_channels, num_channels, kernel_size=3, padding=1),
        )
        self.input_channels = input_channels
        self.num_channels = num_channels

    @property
    def out_channels(self) -> int:
        return self.input_channels + self.num_channels

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        y = super().forward(x)
        return torch.cat((x, y), dim=1)


class DenseBlock(nn.Sequential):
    """Chain of ``num_convs`` ConvBlocks sharing one growth rate.

    Block ``i`` sees ``input_channels + i * growth_rate`` channels, so the
    block emits ``input_channels + num_convs * growth_rate`` channels.
    ``num_convs == 0`` is the identity.
    """

    def __init__(
        self, num_convs: int, input_channels: int, growth_rate: int
    ) -> None:
        super().__init__(
            *(
                ConvBlock(input_channels + i * growth_rate, growth_rate)
                for i in range(num_convs)
            )
        )
        self.input_channels = input_channels
        self.growth_rate = growth_rate
        self.num_convs = num_convs

    @property
    def out_channels(self) -> int:
        return self.input_channels + self.num_convs * self.growth_rate


class TransitionBlock(nn.Sequential):
    """BN -> ReLU -> 1x1 conv -> 2x2 average pool.

    Maps channels to exactly ``num_channels`` and floors H and W by half.
    """

    def __init__(self, input_channels: int, num_channels: int) -> None:
        super().__init__(
            nn.BatchNorm2d(input_channels),
            nn.ReLU(),
            nn.Conv2d(input_channels, num_channels, kernel_size=1),
            nn.AvgPool2d(kernel_size=2, stride=2),
        )
        self.out_channels = num_channels
