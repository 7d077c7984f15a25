"""Plugin configuration decoding shared by the built-in processors."""

from __future__ import annotations

import json
from typing import Type, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def parse_plugin_config(config: bytes | None, model: Type[M]) -> M:
    """
    Decode raw JSON plugin config into ``model``.

    Missing (empty or ``null``) config decodes to the model defaults.
    Decoding and validation errors propagate to the caller.
    """
    data = json.loads(config) if config else None
    return model.model_validate(data or {})
