"""Training callbacks for densenet_training."""

from densenet_training.callbacks.model_info import ModelInfoCallback
from densenet_training.callbacks.plotting import TrainingHistoryCallback
from densenet_training.callbacks.report import (
    FirstBatchLabelsCallback,
    TestReportCallback,
)

__all__ = [
    "FirstBatchLabelsCallback",
    "ModelInfoCallback",
    "TestReportCallback",
    "TrainingHistoryCallback",
]
