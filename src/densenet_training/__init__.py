"""DenseNet image classification training on the 17-category flowers dataset."""

__version__ = "0.1.0"
