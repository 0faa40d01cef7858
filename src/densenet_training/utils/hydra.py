"""Hydra ConfigStore registration for network definitions."""

from __future__ import annotations

from typing import Any

from hydra.core.config_store import ConfigStore
from loguru import logger


def register(
    cls: type[Any] | None = None,
    *,
    group: str | None = None,
    name: str | None = None,
    **defaults: Any,
) -> type[Any] | Any:
    """Store ``cls`` in Hydra's ConfigStore under ``group/name``.

    The stored node is ``{"_target_": "<module>.<ClassName>", **defaults}`` so
    ``hydra.utils.instantiate(cfg.model)`` builds the class directly.  When
    ``group`` is omitted it is taken from the parent package of the class
    module (``densenet_training.models.densenet`` -> ``models``).

    Arguments:
        cls: The class to register (bare decorator usage).
        group: ConfigStore group, e.g. ``"model"``.
        name: Config name; defaults to the class name.
        **defaults: Default constructor arguments written into the node.
    """

    def _store(target_cls: type[Any]) -> type[Any]:
        module_parts = target_cls.__module__.split(".")
        config_group = group if group is not None else module_parts[-2]
        config_name = name or target_cls.__name__

        node: dict[str, Any] = {
            "_target_": f"{target_cls.__module__}.{target_cls.__name__}"
        }
        node.update(defaults)

        logger.debug(
            f"Registering {target_cls.__name__} as '{config_name}' "
            f"in group '{config_group}'"
        )
        ConfigStore.instance().store(
            group=config_group, name=config_name, node=node
        )
        return target_cls

    if cls is None:
        return _store
    return _store(cls)
