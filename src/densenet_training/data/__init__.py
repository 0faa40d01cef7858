"""Data pipeline for densenet_training."""

from densenet_training.data.class_names import load_category_names, load_class_names
from densenet_training.data.datamodule import FlowersDataModule
from densenet_training.data.dataset import ImageFolderWithPaths

__all__ = [
    "FlowersDataModule",
    "ImageFolderWithPaths",
    "load_category_names",
    "load_class_names",
]
