"""Training entrypoint for densenet_training.

Usage:
    densenet-train                                  # defaults
    densenet-train loop.max_epochs=10               # override epochs
    densenet-train data.batch_size=16               # override batch size
    densenet-train model.growth_rate=16             # narrower network
"""

import sys

import hydra
import lightning as L
import torch
from loguru import logger
from omegaconf import DictConfig, OmegaConf

# CRITICAL: import models to trigger @register decorators BEFORE Hydra parses config
import densenet_training.models  # noqa: F401
from densenet_training.config import TrainingLoopConfig
from densenet_training.data.class_names import load_category_names
from densenet_training.data.datamodule import FlowersDataModule
from densenet_training.loop import TrainingLoop
from densenet_training.models.base import BaseClassificationModel


@hydra.main(version_base=None, config_path="conf", config_name="train_flowers_densenet")
def main(cfg: DictConfig) -> None:
    """Run training with the given Hydra config."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))

    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    loop_cfg = TrainingLoopConfig(**OmegaConf.to_container(cfg.loop, resolve=True))
    L.seed_everything(loop_cfg.seed, workers=True)

    if cfg.get("category_names_file"):
        categories = load_category_names(cfg.category_names_file)
        logger.info(f"Category names: {categories}")

    # Fatal (exit 1) if the class-name file is unreadable or has the wrong count.
    datamodule: FlowersDataModule = hydra.utils.instantiate(cfg.data)

    model: BaseClassificationModel = hydra.utils.instantiate(
        cfg.model, num_classes=datamodule.num_classes
    )
    model.set_class_names(datamodule.class_names)

    image_size = datamodule.config.image_size
    with torch.no_grad():
        model.eval()
        output = model(torch.randn(1, 3, image_size, image_size))
    logger.info(f"Forward check: {tuple(output.shape)}")

    TrainingLoop(loop_cfg).run(model, datamodule)
    logger.info("Done!")


if __name__ == "__main__":
    main()
