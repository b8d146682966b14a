# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging

from ._errors import (
    IndexOutOfRangeError,
    PinnableError,
    ReplayError,
    TypeCoercionError,
)
from .config import settings
from .protocols.types import (
    Collection,
    Emitter,
    Enumerable,
    ItemChange,
    Iteration,
    Model,
    ModelLike,
)
from .version import __version__

logger = logging.getLogger(__name__)
logger.setLevel(settings.PINNABLE_LOG_LEVEL)

__all__ = (
    "Collection",
    "Emitter",
    "Enumerable",
    "IndexOutOfRangeError",
    "ItemChange",
    "Iteration",
    "Model",
    "ModelLike",
    "PinnableError",
    "ReplayError",
    "TypeCoercionError",
    "__version__",
    "settings",
)
