"""Result schemas."""

from densenet_training.schemas.report import TestReport

__all__ = ["TestReport"]
