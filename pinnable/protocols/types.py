# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from ._concepts import (
    Iteration,
    ModelLike,
    Observable,
    SupportsIterate,
    is_model_like,
)
from .generic import (
    Action,
    ActionLog,
    Collection,
    DirtyTracker,
    Emitter,
    Enumerable,
    ItemChange,
    Model,
)

__all__ = (
    "Action",
    "ActionLog",
    "Collection",
    "DirtyTracker",
    "Emitter",
    "Enumerable",
    "ItemChange",
    "Iteration",
    "Model",
    "ModelLike",
    "Observable",
    "SupportsIterate",
    "is_model_like",
)
