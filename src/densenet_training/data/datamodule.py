"""LightningDataModule for the 17-category flowers dataset."""

import json
from pathlib import Path
from typing import Any

import lightning as L
import torch
from loguru import logger
from torch.utils.data import DataLoader
from torchvision.transforms import v2

from densenet_training.config import DataModuleConfig
from densenet_training.data.class_names import load_class_names
from densenet_training.data.dataset import ImageFolderWithPaths
from densenet_training.types import ClassificationBatch

IMAGENET_MEAN: list[float] = [0.485, 0.456, 0.406]
IMAGENET_STD: list[float] = [0.229, 0.224, 0.225]


class FlowersDataModule(L.LightningDataModule):
    """DataModule over ``data_root/{train,valid,test}/<class_name>/<image>``.

    Class names are read from the class-name file at construction; a file
    that cannot be read or whose count differs from ``num_classes`` ends the
    process (see :func:`load_class_names`).

    Every split uses the same deterministic pipeline: resize to
    ``image_size x image_size``, scale to ``[0, 1]``, ImageNet normalize.
    Validation and test default to batch size 1, as the test report is
    tallied per sample.

    Args:
        config: DataModuleConfig frozen model with all DataLoader parameters.
            If provided, flat kwargs are ignored.
        data_root: Path to dataset root (used when config is None, e.g. Hydra).
        class_names_file: Text file with one class name per line.
        **kwargs: Remaining DataModuleConfig fields, plus extra Hydra-injected
            keys (_target_, _recursive_, etc.) which are dropped.
    """

    def __init__(
        self,
        config: DataModuleConfig | None = None,
        *,
        data_root: str = "",
        class_names_file: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__()
        if config is not None:
            self._config = config
        else:
            fields = {
                k: v for k, v in kwargs.items() if k in DataModuleConfig.model_fields
            }
            self._config = DataModuleConfig(
                data_root=data_root, class_names_file=class_names_file, **fields
            )
        self._data_root = Path(self._config.data_root)

        num_workers = self._config.num_workers
        if torch.backends.mps.is_available() and num_workers > 0:
            logger.warning(
                "MPS detected: setting num_workers=0 to avoid multiprocessing "
                "crash. Use linux-64 / CUDA for multi-worker DataLoading."
            )
            num_workers = 0
        self._num_workers = num_workers
        self._persistent_workers = self._config.persistent_workers and num_workers > 0

        self.class_names = load_class_names(
            self._config.class_names_file, self._config.num_classes
        )
        self._transforms = self._build_transforms()

        self._train_dataset: ImageFolderWithPaths | None = None
        self._val_dataset: ImageFolderWithPaths | None = None
        self._test_dataset: ImageFolderWithPaths | None = None

    @property
    def config(self) -> DataModuleConfig:
        return self._config

    @property
    def num_classes(self) -> int:
        return len(self.class_names)

    def _build_transforms(self) -> v2.Compose:
        size = self._config.image_size
        return v2.Compose([
            v2.Resize((size, size)),
            v2.ToImage(),
            v2.ToDtype(torch.float32, scale=True),
            v2.Normalize(mean=IMAGENET_MEAN, std=IMAGENET_STD),
        ])

    # ------------------------------------------------------------------
    # LightningDataModule lifecycle
    # ------------------------------------------------------------------

    def setup(self, stage: str | None = None) -> None:
        """Instantiate datasets for the given stage.

        Args:
            stage: "fit", "validate", "test", or None (all stages).
        """
        if stage in ("fit", "validate", None):
            self._train_dataset = self._make_dataset("train")
            self._val_dataset = self._make_dataset("valid")
            logger.info(f"total training images : {len(self._train_dataset)}")
            logger.info(f"total validation images : {len(self._val_dataset)}")

        if stage in ("test", None):
            self._test_dataset = self._make_dataset("test")
            logger.info(f"total test images : {len(self._test_dataset)}")

    def _make_dataset(self, split: str) -> ImageFolderWithPaths:
        return ImageFolderWithPaths(
            root=self._data_root / split,
            class_names=self.class_names,
            transform=self._transforms,
        )

    @staticmethod
    def _collate_fn(
        batch: list[tuple[torch.Tensor, int, str]],
    ) -> ClassificationBatch:
        """Collate (image, label, path) triples into a ClassificationBatch."""
        images = torch.stack([item[0] for item in batch])
        labels = torch.tensor([item[1] for item in batch], dtype=torch.long)
        paths = [item[2] for item in batch]
        return {"images": images, "labels": labels, "paths": paths}

    def _loader(
        self,
        dataset: ImageFolderWithPaths | None,
        batch_size: int,
        shuffle: bool,
        stage: str,
    ) -> DataLoader[tuple[torch.Tensor, int, str]]:
        if dataset is None:
            raise RuntimeError(f"Call setup('{stage}') first")
        return DataLoader(
            dataset,
            batch_size=batch_size,
            shuffle=shuffle,
            num_workers=self._num_workers,
            pin_memory=self._config.pin_memory,
            persistent_workers=self._persistent_workers,
            collate_fn=self._collate_fn,
        )

    def train_dataloader(self) -> DataLoader[tuple[torch.Tensor, int, str]]:
        return self._loader(
            self._train_dataset,
            self._config.batch_size,
            self._config.train_shuffle,
            "fit",
        )

    def val_dataloader(self) -> DataLoader[tuple[torch.Tensor, int, str]]:
        return self._loader(
            self._val_dataset,
            self._config.valid_batch_size,
            self._config.valid_shuffle,
            "fit",
        )

    def test_dataloader(self) -> DataLoader[tuple[torch.Tensor, int, str]]:
        return self._loader(
            self._test_dataset, self._config.test_batch_size, False, "test"
        )

    # ------------------------------------------------------------------
    # labels_mapping.json serialization
    # ------------------------------------------------------------------

    def save_labels_mapping(self, save_path: Path) -> None:
        """Persist class names and normalization stats as labels_mapping.json."""
        mapping = {
            "num_classes": self.num_classes,
            "idx_to_class": {str(i): name for i, name in enumerate(self.class_names)},
            "image_size": self._config.image_size,
            "normalization": {
                "mean": IMAGENET_MEAN,
                "std": IMAGENET_STD,
            },
        }
        save_path.parent.mkdir(parents=True, exist_ok=True)
        with open(save_path, "w") as f:
            json.dump(mapping, f, indent=2)
        logger.info(f"Saved labels_mapping.json to {save_path}")
