"""Held-out test set evaluation summary."""

from __future__ import annotations

import math
from collections.abc import Sequence

from loguru import logger
from pydantic import BaseModel


class TestReport(BaseModel, frozen=True):
    """Loss, overall accuracy and per-class accuracy on the test split.

    A class with no test samples has accuracy ``nan`` in ``per_class``;
    it is reported, not dropped.
    """

    __test__ = False  # not a pytest test class

    loss: float
    accuracy: float
    per_class: dict[str, float]
    class_match: list[int]
    class_counter: list[int]

    @classmethod
    def from_counts(
        cls,
        class_names: Sequence[str],
        class_match: Sequence[int],
        class_counter: Sequence[int],
        loss: float,
    ) -> TestReport:
        """Build a report from per-class match/total tallies."""
        if not (len(class_names) == len(class_match) == len(class_counter)):
            msg = (
                f"Tally length mismatch: {len(class_names)} names, "
                f"{len(class_match)} matches, {len(class_counter)} counts"
            )
            raise ValueError(msg)

        per_class: dict[str, float] = {}
        for name, match, count in zip(
            class_names, class_match, class_counter, strict=True
        ):
            if count == 0:
                logger.warning(f"No test samples for class '{name}'; accuracy is nan")
                per_class[name] = math.nan
            else:
                per_class[name] = match / count

        total = sum(class_counter)
        accuracy = sum(class_match) / total if total else math.nan
        return cls(
            loss=loss,
            accuracy=accuracy,
            per_class=per_class,
            class_match=list(class_match),
            class_counter=list(class_counter),
        )

    @property
    def num_samples(self) -> int:
        return sum(self.class_counter)
