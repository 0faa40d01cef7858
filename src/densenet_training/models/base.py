"""Base LightningModule for the flowers classification models."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import lightning as L
import torch
import torch.nn.functional as F
from loguru import logger
from torchmetrics.classification import MulticlassAccuracy

from densenet_training.schemas.report import TestReport
from densenet_training.types import ClassificationBatch

IGNORE_INDEX = -100


class BaseClassificationModel(L.LightningModule):
    """Train / validate / test steps shared by all classification networks.

    Subclasses must set ``self.model`` (nn.Module backbone) in ``__init__``
    and implement ``forward()`` returning raw logits.

    The loss is ``NLLLoss(log_softmax(logits))``; samples labelled
    ``ignore_index`` contribute zero loss and are left out of every accuracy
    tally.  Call :meth:`set_class_names` after the datamodule has read the
    class-name file so the test report is keyed by name.
    """

    def __init__(
        self,
        num_classes: int,
        learning_rate: float = 1e-4,
        betas: Sequence[float] = (0.5, 0.999),
        ignore_index: int = IGNORE_INDEX,
        class_names: Sequence[str] | None = None,
    ) -> None:
        super().__init__()
        self.save_hyperparameters(ignore=["class_names"])

        self.class_names: list[str] = (
            list(class_names)
            if class_names is not None
            else [str(i) for i in range(num_classes)]
        )
        self.loss_fn = torch.nn.NLLLoss(ignore_index=ignore_index, reduction="mean")

        self.val_top1 = MulticlassAccuracy(
            num_classes=num_classes, top_k=1, average="micro", ignore_index=ignore_index
        )

        self.train_loss_history: list[float] = []
        self.test_report: TestReport | None = None
        self._epoch_loss_sum = 0.0
        self._epoch_batches = 0
        self._epoch_recorded = False
        self._reset_test_tallies()

    def set_class_names(self, class_names: Sequence[str]) -> None:
        """Attach the ordered class names read from the class-name file."""
        if len(class_names) != self.hparams["num_classes"]:
            msg = (
                f"Expected {self.hparams['num_classes']} class names, "
                f"got {len(class_names)}"
            )
            raise ValueError(msg)
        self.class_names = list(class_names)

    def compute_loss(
        self, logits: torch.Tensor, labels: torch.Tensor
    ) -> torch.Tensor:
        """Mean negative log-likelihood of ``labels`` under ``log_softmax(logits)``."""
        return self.loss_fn(F.log_softmax(logits, dim=1), labels)  # type: ignore[no-any-return]

    # ------------------------------------------------------------------
    # Train
    # ------------------------------------------------------------------

    def on_train_epoch_start(self) -> None:
        self._epoch_loss_sum = 0.0
        self._epoch_batches = 0
        self._epoch_recorded = False

    def training_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> torch.Tensor:
        images, labels = batch["images"], batch["labels"]
        logits = self(images)
        loss = self.compute_loss(logits, labels)
        self.log("train/loss", loss, on_step=True, on_epoch=True, prog_bar=True)
        self._epoch_loss_sum += loss.item()
        self._epoch_batches += 1
        return loss

    def _record_epoch_loss(self) -> None:
        """Record and print the epoch average once, before any validation output."""
        if self._epoch_recorded or self._epoch_batches == 0:
            return
        self._epoch_recorded = True
        avg_loss = self._epoch_loss_sum / max(1, self._epoch_batches)
        self.train_loss_history.append(avg_loss)
        logger.info(
            f"epoch: {self.current_epoch + 1}/{self.trainer.max_epochs}, "
            f"avg_loss: {avg_loss:.6f}"
        )

    def on_train_epoch_end(self) -> None:
        self._record_epoch_loss()

    # ------------------------------------------------------------------
    # Validate
    # ------------------------------------------------------------------

    def validation_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> None:
        images, labels = batch["images"], batch["labels"]
        logits = self(images)
        loss = self.compute_loss(logits, labels)
        self.log("val/loss", loss, on_step=False, on_epoch=True, prog_bar=True)
        self.val_top1.update(logits, labels)

    def on_validation_epoch_start(self) -> None:
        # Validation runs before on_train_epoch_end; the epoch loss is final here.
        self._record_epoch_loss()

    def on_validation_epoch_end(self) -> None:
        accuracy = self.val_top1.compute()
        self.val_top1.reset()
        self.log("val/acc_top1", accuracy, prog_bar=True)
        logger.info(f"Validation accuracy: {accuracy.item():.4f}")

    # ------------------------------------------------------------------
    # Test
    # ------------------------------------------------------------------

    def _reset_test_tallies(self) -> None:
        num_classes = self.hparams["num_classes"]
        self._class_match = torch.zeros(num_classes, dtype=torch.long)
        self._class_counter = torch.zeros(num_classes, dtype=torch.long)
        self._test_loss_sum = 0.0
        self._test_batches = 0

    def on_test_epoch_start(self) -> None:
        self._reset_test_tallies()
        self.test_report = None

    def test_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> None:
        images, labels = batch["images"], batch["labels"]
        logits = self(images)

        labelled = labels != self.hparams["ignore_index"]
        if not labelled.any():
            return

        loss = self.compute_loss(logits, labels)
        self.log("test/loss", loss, on_step=False, on_epoch=True)
        self._test_loss_sum += loss.item()
        self._test_batches += 1

        num_classes = self.hparams["num_classes"]
        answers = labels[labelled].cpu()
        responses = logits.argmax(dim=1)[labelled].cpu()
        self._class_counter += torch.bincount(answers, minlength=num_classes)
        self._class_match += torch.bincount(
            answers[responses == answers], minlength=num_classes
        )

    def on_test_epoch_end(self) -> None:
        report = TestReport.from_counts(
            self.class_names,
            self._class_match.tolist(),
            self._class_counter.tolist(),
            loss=self._test_loss_sum / max(1, self._test_batches),
        )
        self.test_report = report

        self.log("test/acc_top1", report.accuracy)
        for i, acc in enumerate(report.per_class.values()):
            self.log(f"test/acc_class_{i}", acc)

        for name, acc in report.per_class.items():
            logger.info(f"{name}: {acc:.4f}")
        logger.info(f"Test accuracy: {report.accuracy:.4f}")

    # ------------------------------------------------------------------
    # Optimization
    # ------------------------------------------------------------------

    def configure_optimizers(self) -> torch.optim.Optimizer:
        return torch.optim.Adam(
            self.parameters(),
            lr=self.hparams["learning_rate"],
            betas=tuple(self.hparams["betas"]),
        )
