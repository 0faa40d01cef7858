"""Pydantic frozen configuration models for densenet_training."""

from pydantic import BaseModel, Field, model_validator


class DataModuleConfig(BaseModel, frozen=True):
    """Configuration for FlowersDataModule.

    All fields are validated at construction time. Frozen: no mutation after creation.
    """

    data_root: str
    class_names_file: str
    num_classes: int = Field(default=17, gt=0)
    batch_size: int = Field(default=32, gt=0)
    valid_batch_size: int = Field(default=1, gt=0)
    test_batch_size: int = Field(default=1, gt=0)
    num_workers: int = Field(default=2, ge=0)
    train_shuffle: bool = True
    valid_shuffle: bool = True
    pin_memory: bool = True
    persistent_workers: bool = True
    image_size: int = Field(default=224, gt=0)

    @model_validator(mode="after")
    def _persistent_workers_requires_workers(self) -> "DataModuleConfig":
        """persistent_workers=True with num_workers=0 silently does nothing."""
        if self.persistent_workers and self.num_workers == 0:
            # Use object.__setattr__ because model is frozen
            object.__setattr__(self, "persistent_workers", False)
        return self


class TrainingLoopConfig(BaseModel, frozen=True):
    """Configuration for TrainingLoop.

    Epoch count, validation cadence and device target are fixed for the run.
    """

    max_epochs: int = Field(default=20, gt=0)
    val_every_n_epochs: int = Field(default=5, gt=0)
    accelerator: str = "auto"
    devices: int | str = "auto"
    run_validation: bool = True
    run_test: bool = True
    verbose: bool = False
    seed: int = 42
    output_dir: str = "outputs"
    plot: bool = True
    enable_progress_bar: bool = False
