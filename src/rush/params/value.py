# どこで: `src/rush/params/value.py`。
# 何を: ParamValue（レジストリ値の不変タグ付きボックス）と型変換規則を提供する。
# なぜ: レジストリの動的値を閉じた kind 集合として扱い、変換失敗を TypeMismatchError に揃えるため。

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from .errors import KeyNotFoundError, TypeMismatchError


class ValueKind(Enum):
    """ParamValue が保持できる値の種類。"""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    STRUCT = "struct"


_TRUE_WORDS = {"true", "1", "on", "yes"}
_FALSE_WORDS = {"false", "0", "off", "no"}


class ConversionRules:
    """ParamValue -> Python 型の変換規則（既定: rospy.get_param が返す値の扱いに合わせる）。

    - kind の完全一致のみ許す。例外は Python の数値規則に従う int -> float の拡幅
      （XmlRpcValue の double キャストはこれを許さない）。
    - bool は整数として扱わない。
    - 文字列を数値へ解釈しない。
    """

    def convert(self, value: ParamValue, target: Any) -> Any:
        if target is ParamValue:
            return value
        if target is object or target is Any:
            return value.to_python()

        if isinstance(target, type) and issubclass(target, np.generic):
            return self._convert_numpy_scalar(value, target)

        if target is bool:
            return self.to_bool(value)
        if target is int:
            return self.to_int(value)
        if target is float:
            return self.to_float(value)
        if target is str:
            return self.to_str(value)
        if target is list:
            return [item.to_python() for item in self._array_items(value)]
        if target is tuple:
            return tuple(item.to_python() for item in self._array_items(value))
        if target is dict:
            if value.kind is not ValueKind.STRUCT:
                raise _mismatch(value, target)
            return {k: v.to_python() for k, v in value.raw}

        raise TypeMismatchError(f"未対応の変換先型です: target={target!r}")

    def to_bool(self, value: ParamValue) -> bool:
        if value.kind is not ValueKind.BOOL:
            raise _mismatch(value, bool)
        return bool(value.raw)

    def to_int(self, value: ParamValue) -> int:
        if value.kind is not ValueKind.INT:
            raise _mismatch(value, int)
        return int(value.raw)

    def to_float(self, value: ParamValue) -> float:
        if value.kind not in {ValueKind.INT, ValueKind.FLOAT}:
            raise _mismatch(value, float)
        return float(value.raw)

    def to_str(self, value: ParamValue) -> str:
        if value.kind is not ValueKind.STRING:
            raise _mismatch(value, str)
        return str(value.raw)

    def _array_items(self, value: ParamValue) -> tuple[ParamValue, ...]:
        if value.kind is not ValueKind.ARRAY:
            raise _mismatch(value, list)
        return value.raw

    def _convert_numpy_scalar(self, value: ParamValue, target: type) -> Any:
        dtype = np.dtype(target)
        if dtype.kind == "b":
            return target(self.to_bool(value))
        if dtype.kind in {"i", "u"}:
            iv = self.to_int(value)
            info = np.iinfo(dtype)
            if iv < info.min or iv > info.max:
                raise TypeMismatchError(
                    f"{dtype.name} の範囲外です: value={iv} range=[{info.min}, {info.max}]"
                )
            return target(iv)
        if dtype.kind == "f":
            return target(self.to_float(value))
        raise TypeMismatchError(f"未対応の numpy 型です: target={dtype.name}")


class LenientConversionRules(ConversionRules):
    """文字列からの数値/真偽値解釈を許す変換規則。"""

    def to_bool(self, value: ParamValue) -> bool:
        if value.kind is ValueKind.STRING:
            lowered = str(value.raw).strip().lower()
            if lowered in _TRUE_WORDS:
                return True
            if lowered in _FALSE_WORDS:
                return False
            raise _mismatch(value, bool)
        if value.kind is ValueKind.INT:
            return bool(value.raw)
        return super().to_bool(value)

    def to_int(self, value: ParamValue) -> int:
        if value.kind is ValueKind.STRING:
            try:
                return int(str(value.raw).strip())
            except ValueError as exc:
                raise _mismatch(value, int) from exc
        return super().to_int(value)

    def to_float(self, value: ParamValue) -> float:
        if value.kind is ValueKind.STRING:
            try:
                return float(str(value.raw).strip())
            except ValueError as exc:
                raise _mismatch(value, float) from exc
        return super().to_float(value)

    def to_str(self, value: ParamValue) -> str:
        if value.kind in {ValueKind.ARRAY, ValueKind.STRUCT}:
            raise _mismatch(value, str)
        return str(value)


DEFAULT_RULES = ConversionRules()


def _mismatch(value: ParamValue, target: Any) -> TypeMismatchError:
    name = getattr(target, "__name__", repr(target))
    return TypeMismatchError(f"{value.kind.value} を {name} へ変換できません: value={value}")


@dataclass(frozen=True, slots=True)
class ParamValue:
    """レジストリ値 1 つ分の不変ボックス。

    Notes
    -----
    - ARRAY の raw は ``tuple[ParamValue, ...]``。
    - STRUCT の raw はキー昇順の ``tuple[tuple[str, ParamValue], ...]``。
    """

    kind: ValueKind
    raw: Any

    @classmethod
    def from_raw(cls, obj: Any) -> ParamValue:
        """レジストリのネイティブ表現（bool/int/float/str/list/dict）から生成する。"""

        if isinstance(obj, ParamValue):
            return obj
        if isinstance(obj, np.generic):
            obj = obj.item()

        # bool は int のサブクラスなので先に判定する。
        if isinstance(obj, bool):
            return cls(ValueKind.BOOL, obj)
        if isinstance(obj, int):
            return cls(ValueKind.INT, obj)
        if isinstance(obj, float):
            return cls(ValueKind.FLOAT, obj)
        if isinstance(obj, str):
            return cls(ValueKind.STRING, obj)
        if isinstance(obj, (list, tuple)):
            return cls(ValueKind.ARRAY, tuple(cls.from_raw(v) for v in obj))
        if isinstance(obj, Mapping):
            members = sorted(
                ((str(k), cls.from_raw(v)) for k, v in obj.items()), key=lambda kv: kv[0]
            )
            return cls(ValueKind.STRUCT, tuple(members))
        raise TypeMismatchError(f"未対応の値型です: type={type(obj).__name__}")

    def convert(self, target: Any, *, rules: ConversionRules | None = None) -> Any:
        """保持値を target 型へ変換して返す。"""

        return (rules or DEFAULT_RULES).convert(self, target)

    def convert_into(
        self,
        target: Any,
        name: str,
        type_: Any,
        *,
        rules: ConversionRules | None = None,
    ) -> None:
        """変換結果を target（mapping なら item、それ以外は属性）へ書き込む。"""

        converted = self.convert(type_, rules=rules)
        if isinstance(target, MutableMapping):
            target[name] = converted
        else:
            setattr(target, name, converted)

    def convert_sequence(
        self,
        item_type: Any,
        out: MutableSequence[Any] | None = None,
        *,
        rules: ConversionRules | None = None,
    ) -> MutableSequence[Any]:
        """ARRAY の各要素を item_type へ変換したリストを返す。

        out を渡した場合は既存要素を全て置き換えて out を返す。
        要素の変換に失敗した場合 out は変更しない。
        """

        if self.kind is not ValueKind.ARRAY:
            raise _mismatch(self, list)
        items = [item.convert(item_type, rules=rules) for item in self.raw]
        if out is None:
            return items
        out.clear()
        out.extend(items)
        return out

    def as_array(self, dtype: Any = float) -> np.ndarray:
        """数値 ARRAY（入れ子可）を numpy 配列として返す。"""

        if self.kind is not ValueKind.ARRAY:
            raise _mismatch(self, np.ndarray)
        data = self.to_python()
        if _contains_non_numeric(data):
            raise TypeMismatchError(f"数値以外の要素を含みます: value={self}")
        try:
            return np.asarray(data, dtype=dtype)
        except (TypeError, ValueError) as exc:
            raise TypeMismatchError(f"numpy 配列へ変換できません: value={self}") from exc

    def to_python(self) -> Any:
        """ボックスを再帰的に外した Python 値を返す。"""

        if self.kind is ValueKind.ARRAY:
            return [item.to_python() for item in self.raw]
        if self.kind is ValueKind.STRUCT:
            return {k: v.to_python() for k, v in self.raw}
        return self.raw

    def __getitem__(self, index: int | str) -> ParamValue:
        if self.kind is ValueKind.ARRAY and isinstance(index, int):
            return self.raw[index]
        if self.kind is ValueKind.STRUCT and isinstance(index, str):
            for k, v in self.raw:
                if k == index:
                    return v
            raise KeyNotFoundError(index)
        raise TypeMismatchError(f"{self.kind.value} は添字 {index!r} を受け付けません")

    def __bool__(self) -> bool:
        # ボックスは「値が存在する」ことを表す。中身の真偽は convert(bool) で得る。
        return True

    def __len__(self) -> int:
        if self.kind in {ValueKind.ARRAY, ValueKind.STRUCT, ValueKind.STRING}:
            return len(self.raw)
        raise TypeMismatchError(f"{self.kind.value} は長さを持ちません")

    def __str__(self) -> str:
        kind = self.kind
        if kind is ValueKind.BOOL:
            return "1" if self.raw else "0"
        if kind is ValueKind.INT:
            return str(self.raw)
        if kind is ValueKind.FLOAT:
            return f"{self.raw:g}"
        if kind is ValueKind.STRING:
            return self.raw
        if kind is ValueKind.ARRAY:
            return "{" + ",".join(str(item) for item in self.raw) + "}"
        return "[" + ",".join(f"{k}:{v}" for k, v in self.raw) + "]"

    def __repr__(self) -> str:
        return f"ParamValue({self.kind.value}, {self.to_python()!r})"


def _contains_non_numeric(data: Any) -> bool:
    if isinstance(data, list):
        return any(_contains_non_numeric(item) for item in data)
    return isinstance(data, (bool, str, dict))


__all__ = [
    "ValueKind",
    "ParamValue",
    "ConversionRules",
    "LenientConversionRules",
    "DEFAULT_RULES",
]
