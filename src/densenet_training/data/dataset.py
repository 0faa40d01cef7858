"""Class-per-folder image dataset that also reports each sample's path."""

from collections.abc import Callable, Sequence
from pathlib import Path

import torch
from loguru import logger
from PIL import Image
from torch.utils.data import Dataset

from densenet_training.data.utils import IMAGE_EXTENSIONS, get_files


class ImageFolderWithPaths(Dataset[tuple[torch.Tensor, int, str]]):
    """Images laid out as ``root/<class_name>/<image>``.

    Labels come from the position of ``<class_name>`` in ``class_names``
    (the order of the class-name file), not from directory sort order.
    Subdirectories whose name is not a known class are skipped with a
    warning; known classes with no folder simply contribute no samples.

    Args:
        root: Split directory (e.g. ``data/17_flowers/train``).
        class_names: Ordered class names; index = label.
        transform: Optional callable applied to PIL Image, returns torch.Tensor.
    """

    def __init__(
        self,
        root: Path,
        class_names: Sequence[str],
        transform: Callable[[Image.Image], torch.Tensor] | None = None,
    ) -> None:
        self.root = root
        self.class_names = list(class_names)
        self.class_to_idx = {name: i for i, name in enumerate(self.class_names)}
        self.transform = transform
        self.samples: list[tuple[Path, int]] = []

        skipped: list[str] = []
        for class_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            label = self.class_to_idx.get(class_dir.name)
            if label is None:
                skipped.append(class_dir.name)
                continue
            for img_path in get_files(class_dir, IMAGE_EXTENSIONS):
                self.samples.append((img_path, label))
        if skipped:
            logger.warning(f"Skipped unknown class folder(s) {skipped} under {root}")

        logger.debug(
            f"ImageFolderWithPaths: loaded {len(self.samples)} samples "
            f"from {root}"
        )

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, idx: int) -> tuple[torch.Tensor, int, str]:
        img_path, label = self.samples[idx]
        img = Image.open(img_path).convert("RGB")
        if self.transform is not None:
            img = self.transform(img)  # type: ignore[assignment]
        return img, label, str(img_path)  # type: ignore[return-value]
