# どこで: `src/rush/params/__init__.py`。
# 何を: namespace 単位パラメータストアの公開エイリアスをまとめる。
# なぜ: 利用側から最小インポートで使えるようにするため。

from .errors import KeyNotFoundError, ParamError, RegistryError, TypeMismatchError
from .registry import (
    EnvironmentContext,
    InMemoryRegistry,
    NamespaceContext,
    ParamRegistry,
    StaticContext,
)
from .store import ParamStore
from .value import ConversionRules, LenientConversionRules, ParamValue, ValueKind
from .xmlrpc import MasterRegistry
from .yaml_io import dump_store_yaml, load_yaml_params

__all__ = [
    "ParamError",
    "KeyNotFoundError",
    "TypeMismatchError",
    "RegistryError",
    "ParamRegistry",
    "NamespaceContext",
    "StaticContext",
    "EnvironmentContext",
    "InMemoryRegistry",
    "MasterRegistry",
    "ParamStore",
    "ParamValue",
    "ValueKind",
    "ConversionRules",
    "LenientConversionRules",
    "load_yaml_params",
    "dump_store_yaml",
]
