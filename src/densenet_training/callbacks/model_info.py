"""Model info callback: reports parameter counts and writes labels_mapping.json."""

from __future__ import annotations

from pathlib import Path

import lightning as L
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table


class ModelInfoCallback(L.Callback):
    """Print a parameter/size table when fitting starts.

    Also reports the width of the feature stack when the wrapped network
    exposes ``out_channels``, and asks the datamodule (if it can) to write
    ``labels_mapping.json``.

    Args:
        output_dir: Directory for saved artifacts (labels_mapping.json).
    """

    def __init__(self, output_dir: str = "outputs") -> None:
        super().__init__()
        self.output_dir = Path(output_dir)

    def on_fit_start(
        self, trainer: L.Trainer, pl_module: L.LightningModule
    ) -> None:
        params = list(pl_module.parameters())
        total_params = sum(p.numel() for p in params)
        trainable_params = sum(p.numel() for p in params if p.requires_grad)
        size_bytes = sum(p.numel() * p.element_size() for p in params) + sum(
            b.numel() * b.element_size() for b in pl_module.buffers()
        )
        model_size_mb = size_bytes / (1024 * 1024)

        table = Table(
            title="Model Information",
            header_style="bold magenta",
            box=box.SQUARE,
            show_lines=True,
        )
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Model Class", type(pl_module).__name__)
        table.add_row("Total Parameters", f"{total_params / 1e6:.2f} M")
        table.add_row("Trainable Parameters", f"{trainable_params / 1e6:.2f} M")
        table.add_row("Model Size", f"{model_size_mb:.2f} MB")

        network = getattr(pl_module, "model", None)
        out_channels = getattr(network, "out_channels", None)
        if out_channels is not None:
            table.add_row("Feature Channels", str(out_channels))

        Console().print(table)
        logger.info(
            f"Model: {type(pl_module).__name__} | "
            f"Params: {total_params:,} ({trainable_params:,} trainable) | "
            f"Size: {model_size_mb:.2f} MB"
        )

        datamodule = getattr(trainer, "datamodule", None)
        if datamodule is None or not hasattr(datamodule, "save_labels_mapping"):
            logger.info("No datamodule with save_labels_mapping; skipping it.")
            return
        try:
            datamodule.save_labels_mapping(self.output_dir / "labels_mapping.json")
        except OSError as e:
            logger.warning(f"Failed to write labels_mapping.json: {e}")
