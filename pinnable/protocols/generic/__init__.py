# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .collection import Collection
from .element import Model
from .emitter import Emitter
from .enumerable import Enumerable
from .event import ItemChange
from .tracking import Action, ActionLog, DirtyTracker

__all__ = (
    "Action",
    "ActionLog",
    "Collection",
    "DirtyTracker",
    "Emitter",
    "Enumerable",
    "ItemChange",
    "Model",
)
