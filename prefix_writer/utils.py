import enum
import pathlib
import re
from typing import Any, Type, TypeVar

import rich.markup
import yaml
from pydantic import BaseModel

from prefix_writer import __version__

T = TypeVar('T', bound=BaseModel)
APP_NAME = 'prefix-writer'


def get_version() -> str:
    return __version__.__version__


def escape_markup(s: str) -> str:
    return rich.markup.escape(s, _escape=re.compile(r'(\\*)(\[)').sub)


def model_to_yaml(model: BaseModel, exclude_unset: bool = True, **kwargs) -> str:
    """Convert model to a YAML string.

    Enums are dumped by value and paths as plain strings, so the result can be
    read back with `model_from_yaml`.
    """
    data = model.model_dump(exclude_unset=exclude_unset, exclude_none=True)
    return yaml.safe_dump(
        _ensure_yaml_serializable(data), sort_keys=False, allow_unicode=True, **kwargs
    )


def _ensure_yaml_serializable(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _ensure_yaml_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple, set)):
        return [_ensure_yaml_serializable(item) for item in obj]
    elif isinstance(obj, enum.Enum):
        return obj.value
    elif isinstance(obj, (str, int, float, bool)) or obj is None:
        return obj
    elif isinstance(obj, pathlib.Path):
        return str(obj)
    else:
        return str(obj)


def model_from_yaml(model: Type[T], s: str) -> T:
    # An empty document stands for a model with every field defaulted.
    return model(**(yaml.safe_load(s) or {}))
