"""Readers for the class-name text file and the category-name JSON file.

Both files are configuration: a missing file or a class count that does not
match the configured one stops the process with exit status 1.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from loguru import logger

# Lines this short (after stripping) are blank or stray separators.
MIN_CLASS_NAME_LENGTH = 3


def load_class_names(path: str | Path, class_num: int) -> list[str]:
    """Read ``class_num`` class names, one per line, in file order.

    Lines of two characters or fewer are skipped.  Exits the process with
    status 1 if the file cannot be read or the number of names differs
    from ``class_num``.
    """
    try:
        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error : can't open the class name file. ({path}: {e})")
        sys.exit(1)

    class_names = [
        line.strip() for line in lines if len(line.strip()) >= MIN_CLASS_NAME_LENGTH
    ]
    if len(class_names) != class_num:
        logger.error(
            "Error : The number of classes does not match the number of lines "
            f"in the class name file. (expected {class_num}, "
            f"found {len(class_names)} in {path})"
        )
        sys.exit(1)

    logger.info(f"Loaded {len(class_names)} class names from {path}")
    return class_names


def load_category_names(path: str | Path) -> dict[int, str]:
    """Read the category-index -> display-name JSON mapping.

    Keys are stored as strings in the file (``{"1": "daffodil", ...}``) and
    returned as ints.  Exits with status 1 if the file cannot be read.
    """
    try:
        with open(path, encoding="utf-8") as f:
            raw: dict[str, str] = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error : can't read the category name file. ({path}: {e})")
        sys.exit(1)

    categories = {int(k): v for k, v in raw.items()}
    logger.debug(f"Loaded {len(categories)} category names from {path}")
    return categories
