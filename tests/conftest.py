"""Shared pytest fixtures for densenet_training tests."""

from pathlib import Path

import pytest
from PIL import Image

from densenet_training.config import DataModuleConfig
from densenet_training.models import DenseNetClassificationModel

CLASS_NAMES = ["daisy", "tulip"]
# Solid colours keep the two classes trivially separable.
CLASS_COLORS = [(220, 30, 30), (30, 30, 220)]
IMAGES_PER_CLASS = 4
IMAGE_SIZE = 64


@pytest.fixture()
def flowers_dir(tmp_path: Path) -> Path:
    """Minimal class-per-folder dataset plus its class-name file.

    3 splits x 2 classes x 4 images = 24 images total.  The class-name file
    has a blank line and a two-character line, both of which are skipped.
    """
    root = tmp_path / "17_flowers"
    for split in ("train", "valid", "test"):
        for cls, color in zip(CLASS_NAMES, CLASS_COLORS, strict=True):
            class_dir = root / split / cls
            class_dir.mkdir(parents=True)
            for i in range(IMAGES_PER_CLASS):
                img = Image.new("RGB", (80, 80), color=color)
                img.save(class_dir / f"img_{i:02d}.jpg")

    (tmp_path / "class_names.txt").write_text("daisy\n\nab\ntulip\n")
    return root


@pytest.fixture()
def class_names_file(flowers_dir: Path) -> Path:
    return flowers_dir.parent / "class_names.txt"


@pytest.fixture()
def data_config(flowers_dir: Path, class_names_file: Path) -> DataModuleConfig:
    return DataModuleConfig(
        data_root=str(flowers_dir),
        class_names_file=str(class_names_file),
        num_classes=len(CLASS_NAMES),
        batch_size=4,
        valid_batch_size=4,
        num_workers=0,
        pin_memory=False,
        image_size=IMAGE_SIZE,
    )


@pytest.fixture()
def tiny_model() -> DenseNetClassificationModel:
    """Narrow 2-class DenseNet that trains in well under a second per epoch."""
    return DenseNetClassificationModel(
        num_classes=len(CLASS_NAMES),
        growth_rate=4,
        num_convs_in_dense_blocks=[1, 1, 1, 1],
        learning_rate=1e-3,
    )
