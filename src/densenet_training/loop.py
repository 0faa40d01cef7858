"""Train -> validate -> test orchestration over a single Lightning Trainer."""

from __future__ import annotations

from typing import Any

import lightning as L
from lightning.pytorch.accelerators import CUDAAccelerator, MPSAccelerator
from loguru import logger

from densenet_training.callbacks import (
    FirstBatchLabelsCallback,
    ModelInfoCallback,
    TestReportCallback,
    TrainingHistoryCallback,
)
from densenet_training.config import TrainingLoopConfig
from densenet_training.models.base import BaseClassificationModel
from densenet_training.schemas.report import TestReport


def describe_device(trainer: L.Trainer) -> str:
    """Startup message for the device the trainer resolved for this run."""
    if isinstance(trainer.accelerator, CUDAAccelerator):
        return "CUDA available. Training on GPU."
    if isinstance(trainer.accelerator, MPSAccelerator):
        return "MPS available. Training on Apple GPU."
    return "Training on CPU."


class TrainingLoop:
    """Fixed-length training run: ``max_epochs`` epochs, then one test pass.

    Validation runs every ``val_every_n_epochs`` epochs (epochs 5, 10, ... by
    default).  No checkpointing, early stopping or resumption: the loop runs
    to completion or an exception propagates out of :meth:`run`.

    Args:
        config: Loop settings; defaults match the flowers setup.
        callbacks: Extra callbacks appended after the built-in ones.
    """

    def __init__(
        self,
        config: TrainingLoopConfig | None = None,
        callbacks: list[L.Callback] | None = None,
    ) -> None:
        self.config = config or TrainingLoopConfig()
        self._extra_callbacks = list(callbacks or [])

    def build_callbacks(self) -> list[L.Callback]:
        cfg = self.config
        callbacks: list[L.Callback] = [
            ModelInfoCallback(output_dir=cfg.output_dir),
            TestReportCallback(),
        ]
        if cfg.plot:
            callbacks.append(TrainingHistoryCallback(output_dir=cfg.output_dir))
        if cfg.verbose:
            callbacks.append(FirstBatchLabelsCallback())
        return callbacks + self._extra_callbacks

    def build_trainer(self, **overrides: Any) -> L.Trainer:
        cfg = self.config
        trainer_kwargs: dict[str, Any] = {
            "max_epochs": cfg.max_epochs,
            "accelerator": cfg.accelerator,
            "devices": cfg.devices,
            "check_val_every_n_epoch": cfg.val_every_n_epochs,
            "num_sanity_val_steps": 0,
            "limit_val_batches": None if cfg.run_validation else 0,
            "enable_checkpointing": False,
            "enable_progress_bar": cfg.enable_progress_bar,
            "enable_model_summary": False,
            "logger": False,
            "default_root_dir": cfg.output_dir,
            "callbacks": self.build_callbacks(),
        }
        trainer_kwargs.update(overrides)
        return L.Trainer(**trainer_kwargs)

    def run(
        self,
        model: BaseClassificationModel,
        datamodule: L.LightningDataModule,
        **trainer_overrides: Any,
    ) -> TestReport | None:
        """Fit ``model`` on ``datamodule`` then evaluate it on the test split.

        Returns the test report, or ``None`` when testing is disabled.
        """
        L.seed_everything(self.config.seed, workers=True)

        trainer = self.build_trainer(**trainer_overrides)
        logger.info(describe_device(trainer))
        logger.info("--------------- Training --------------------")
        trainer.fit(model, datamodule=datamodule)

        if not self.config.run_test:
            return None

        logger.info("--------------- Test --------------------")
        trainer.test(model, datamodule=datamodule, verbose=False)
        return model.test_report
