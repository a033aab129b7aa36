# -*- coding: utf-8 -*-
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet


class EnumWithDefault(Enum):
    @classmethod
    def _missing_(cls, value):
        return cls(cls.__default__)  # type: ignore


class CellType(EnumWithDefault):
    CODE = "code"
    MARKDOWN = "markdown"
    RAW = __default__ = "raw"  # type: ignore


DEFAULT_NONMUTATING_METHODS: FrozenSet[str] = frozenset(
    {
        # containers
        "copy",
        "count",
        "get",
        "index",
        "items",
        "keys",
        "values",
        # strings
        "endswith",
        "format",
        "join",
        "lower",
        "replace",
        "split",
        "startswith",
        "strip",
        "upper",
        # dataframe-like display helpers
        "describe",
        "head",
        "info",
        "tail",
        "to_string",
    }
)


class JsonSerializableMixin:
    def to_json(self: Any) -> Dict[str, Any]:
        json = {}
        for key, value in asdict(self).items():
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, (frozenset, set)):
                value = sorted(value)
            elif not isinstance(value, (bool, float, int, str)):
                value = str(value)
            json[key] = value
        return json


@dataclass(frozen=True)
class AnalyzerSettings(JsonSerializableMixin):
    transform_ipython_syntax: bool = True
    method_calls_mutate_receiver: bool = True
    nonmutating_methods: FrozenSet[str] = field(
        default_factory=lambda: DEFAULT_NONMUTATING_METHODS
    )


@dataclass(frozen=True)
class SlicerSettings(JsonSerializableMixin):
    include_error_definitions: bool = False
