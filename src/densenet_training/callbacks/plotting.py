"""Training history callback: saves the training-loss curve at the end of fit."""

from __future__ import annotations

from pathlib import Path

import lightning as L
import matplotlib
import matplotlib.pyplot as plt
from loguru import logger


class TrainingHistoryCallback(L.Callback):
    """Plot average training loss per epoch to ``loss_history.png``.

    Reads ``pl_module.train_loss_history`` (one mean loss per finished
    epoch) once fitting ends.  Plotting failures are logged and never abort
    the run.

    Args:
        output_dir: Root directory for saved plots.
    """

    def __init__(self, output_dir: str = "outputs") -> None:
        super().__init__()
        self.output_dir = Path(output_dir) / "training_history"

    def on_fit_end(self, trainer: L.Trainer, pl_module: L.LightningModule) -> None:
        history: list[float] = list(getattr(pl_module, "train_loss_history", []))
        if not history:
            logger.warning("No training loss recorded; skipping loss plot")
            return

        try:
            self.plot(history)
        except Exception as e:
            logger.error(f"Failed to plot training history: {e}")

    def plot(self, history: list[float]) -> Path:
        """Draw ``history`` against epochs 1..N and save the PNG."""
        matplotlib.use("Agg")
        self.output_dir.mkdir(parents=True, exist_ok=True)

        epochs = list(range(1, len(history) + 1))
        fig, ax = plt.subplots(figsize=(6, 5))
        ax.plot(epochs, history, "b", label="Train loss")
        ax.set_xlabel("epoch")
        ax.set_ylabel("loss")
        ax.legend()
        ax.grid(True, linestyle="--", alpha=0.7)
        fig.tight_layout()

        save_path = self.output_dir / "loss_history.png"
        fig.savefig(save_path, dpi=150)
        plt.close(fig)

        logger.info(f"Training loss plot saved to {save_path}")
        return save_path
