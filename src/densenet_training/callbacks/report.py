"""Console callbacks for the train and test phases."""

from __future__ import annotations

import math
from typing import Any

import lightning as L
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table

from densenet_training.schemas.report import TestReport


class FirstBatchLabelsCallback(L.Callback):
    """Log the labels of the first training and validation batch of every epoch."""

    def on_train_batch_start(
        self,
        trainer: L.Trainer,
        pl_module: L.LightningModule,
        batch: Any,
        batch_idx: int,
    ) -> None:
        if batch_idx == 0:
            labels = batch["labels"].tolist()
            logger.info(f"epoch {trainer.current_epoch + 1} first batch labels: {labels}")

    def on_validation_batch_start(
        self,
        trainer: L.Trainer,
        pl_module: L.LightningModule,
        batch: Any,
        batch_idx: int,
        dataloader_idx: int = 0,
    ) -> None:
        if batch_idx == 0:
            labels = batch["labels"].tolist()
            logger.info(
                f"epoch {trainer.current_epoch + 1} first validation batch labels: "
                f"{labels}"
            )


class TestReportCallback(L.Callback):
    """Render ``pl_module.test_report`` as a per-class accuracy table."""

    __test__ = False  # not a pytest test class

    def on_test_end(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        report: TestReport | None = getattr(pl_module, "test_report", None)
        if report is None:
            logger.warning("No test report produced")
            return
        Console().print(self.build_table(report))

    @staticmethod
    def build_table(report: TestReport) -> Table:
        table = Table(
            title="Test accuracy",
            header_style="bold magenta",
            box=box.SQUARE,
        )
        table.add_column("Class", style="cyan")
        table.add_column("Correct", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Accuracy", justify="right", style="green")

        for (name, acc), match, count in zip(
            report.per_class.items(),
            report.class_match,
            report.class_counter,
            strict=True,
        ):
            shown = "n/a" if math.isnan(acc) else f"{acc:.4f}"
            table.add_row(name, str(match), str(count), shown)

        table.add_section()
        table.add_row(
            "overall",
            str(sum(report.class_match)),
            str(report.num_samples),
            f"{report.accuracy:.4f}",
        )
        return table
