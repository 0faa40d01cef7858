"""Tests for Hydra config composition and component instantiation."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import hydra.utils
import pytest
from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra
from omegaconf import DictConfig, OmegaConf

# Trigger @register decorators before model instantiation tests
import densenet_training.models  # noqa: F401
from densenet_training.config import TrainingLoopConfig
from densenet_training.data.datamodule import FlowersDataModule
from densenet_training.models.densenet import DenseNetClassificationModel

CONF_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "src", "densenet_training", "conf")
)
CONFIG_NAME = "train_flowers_densenet"


@pytest.fixture()
def hydra_compose() -> Iterator[Callable[[list[str]], DictConfig]]:
    """Factory fixture for composing the root config with overrides."""

    def _compose(overrides: list[str]) -> DictConfig:
        GlobalHydra.instance().clear()
        with initialize_config_dir(config_dir=CONF_DIR, version_base=None):
            return compose(config_name=CONFIG_NAME, overrides=overrides)

    yield _compose
    GlobalHydra.instance().clear()


def test_config_composes(hydra_compose: Callable[[list[str]], DictConfig]) -> None:
    cfg = hydra_compose([])
    for key in ("model", "data", "loop"):
        assert key in cfg
    assert cfg.seed == 42
    assert cfg.log_level == "INFO"


def test_flowers_defaults(hydra_compose: Callable[[list[str]], DictConfig]) -> None:
    cfg = hydra_compose([])
    assert cfg.data.num_classes == 17
    assert cfg.data.batch_size == 32
    assert cfg.data.valid_batch_size == 1
    assert cfg.data.num_workers == 2
    assert cfg.data.image_size == 224
    assert cfg.model.num_classes == 17
    assert cfg.model.growth_rate == 32
    assert list(cfg.model.num_convs_in_dense_blocks) == [4, 4, 4, 4]
    assert cfg.model.ignore_index == -100


def test_loop_config_validates(hydra_compose: Callable[[list[str]], DictConfig]) -> None:
    cfg = hydra_compose([])
    loop_cfg = TrainingLoopConfig(**OmegaConf.to_container(cfg.loop, resolve=True))  # type: ignore[arg-type]
    assert loop_cfg.max_epochs == 20
    assert loop_cfg.val_every_n_epochs == 5
    assert loop_cfg.seed == 42


def test_model_instantiates(hydra_compose: Callable[[list[str]], DictConfig]) -> None:
    cfg = hydra_compose(["model.growth_rate=4", "model.num_convs_in_dense_blocks=[1,1]"])
    model = hydra.utils.instantiate(cfg.model)
    assert isinstance(model, DenseNetClassificationModel)
    assert model.hparams["num_classes"] == 17


def test_epoch_override(hydra_compose: Callable[[list[str]], DictConfig]) -> None:
    cfg = hydra_compose(["loop.max_epochs=3"])
    assert cfg.loop.max_epochs == 3


def test_data_instantiates(
    hydra_compose: Callable[[list[str]], DictConfig],
    flowers_dir: Path,
    class_names_file: Path,
) -> None:
    cfg = hydra_compose(
        [
            f"data.data_root='{flowers_dir}'",
            f"data.class_names_file='{class_names_file}'",
            "data.num_classes=2",
            "data.num_workers=0",
        ]
    )
    dm = hydra.utils.instantiate(cfg.data)
    assert isinstance(dm, FlowersDataModule)
    assert dm.class_names == ["daisy", "tulip"]
    assert cfg.model.num_classes == 2


def test_missing_class_file_is_fatal(
    hydra_compose: Callable[[list[str]], DictConfig], tmp_path: Path
) -> None:
    missing = tmp_path / "missing.txt"
    cfg = hydra_compose([f"data.class_names_file='{missing}'"])
    with pytest.raises(SystemExit) as exc_info:
        hydra.utils.instantiate(cfg.data)
    assert exc_info.value.code == 1
