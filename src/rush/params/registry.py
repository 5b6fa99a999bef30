# どこで: `src/rush/params/registry.py`。
# 何を: 外部パラメータレジストリ / 呼び出し元コンテキストのプロトコルとインメモリ実装を提供する。
# なぜ: ParamStore を ROS 依存から切り離し、レジストリ差し替えと単体テストを可能にするため。

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from .errors import KeyNotFoundError
from .names import SEP, is_absolute, normalize_namespace

_NS_REMAP_PREFIX = "__ns:="


@runtime_checkable
class ParamRegistry(Protocol):
    """外部パラメータレジストリ（読み取り専用で利用する）。"""

    def list_names(self) -> list[str]:
        """既知の絶対パラメータ名を全て返す。"""
        ...

    def get_value(self, name: str) -> Any:
        """name の現在値をネイティブ表現で返す。"""
        ...


@runtime_checkable
class NamespaceContext(Protocol):
    """相対 namespace を解決するための呼び出し元コンテキスト。"""

    def current_namespace(self) -> str: ...


class StaticContext:
    """固定 namespace を返すコンテキスト。"""

    def __init__(self, namespace: str = SEP) -> None:
        namespace = str(namespace) or SEP
        if not is_absolute(namespace):
            namespace = SEP + namespace
        self._namespace = namespace

    def current_namespace(self) -> str:
        return self._namespace

    def __repr__(self) -> str:
        return f"StaticContext({self._namespace!r})"


class EnvironmentContext:
    """`__ns:=` 引数 → `ROS_NAMESPACE` 環境変数 → `/` の順で namespace を決める。

    rospy/roscpp がノード namespace を決める規則と同じ優先順位。
    """

    def __init__(
        self,
        argv: Sequence[str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._argv = argv
        self._environ = environ

    def current_namespace(self) -> str:
        argv = sys.argv if self._argv is None else self._argv
        environ = os.environ if self._environ is None else self._environ

        namespace = ""
        for arg in argv:
            if arg.startswith(_NS_REMAP_PREFIX):
                namespace = arg[len(_NS_REMAP_PREFIX) :]
        if not namespace:
            namespace = environ.get("ROS_NAMESPACE", "")
        if not namespace:
            return SEP
        if not is_absolute(namespace):
            namespace = SEP + namespace
        return namespace


class InMemoryRegistry:
    """絶対名 -> ネイティブ値 を保持するレジストリ。

    Notes
    -----
    - dict を set すると ROS パラメータサーバと同様に葉の名前へ展開する。
    - 名前は常に `/` 始まり・末尾 `/` 無しへ正規化する。
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {}
        if values:
            self.update_from_mapping(values)

    def list_names(self) -> list[str]:
        return list(self._values)

    def get_value(self, name: str) -> Any:
        name = _normalize_name(name)
        if name in self._values:
            return self._values[name]

        # 中間ノードは配下の葉を dict として返す（getParam と同じ振る舞い）。
        prefix = normalize_namespace(name)
        subtree: dict[str, Any] = {}
        for full, value in self._values.items():
            if not full.startswith(prefix):
                continue
            node = subtree
            parts = full[len(prefix) :].split(SEP)
            for part in parts[:-1]:
                node = node.setdefault(part, {})
            node[parts[-1]] = value
        if not subtree:
            raise KeyNotFoundError(name)
        return subtree

    def set(self, name: str, value: Any) -> None:
        """name に value を設定する。dict は葉ごとに展開して設定する。"""

        name = _normalize_name(name)
        self.delete(name, missing_ok=True)
        # 祖先に葉があれば名前空間へ置き換わるので消す（葉と子を同名で併存させない）。
        for ancestor in _ancestors(name):
            self._values.pop(ancestor, None)
        if isinstance(value, Mapping):
            if not value:
                return
            for child, child_value in value.items():
                self.set(f"{normalize_namespace(name)}{child}", child_value)
            return
        self._values[name] = value

    def delete(self, name: str, *, missing_ok: bool = False) -> None:
        """name（と配下の葉）を削除する。"""

        name = _normalize_name(name)
        prefix = normalize_namespace(name)
        doomed = [n for n in self._values if n == name or n.startswith(prefix)]
        if not doomed and not missing_ok:
            raise KeyNotFoundError(name)
        for n in doomed:
            del self._values[n]

    def update_from_mapping(self, values: Mapping[str, Any], namespace: str = SEP) -> None:
        """values を namespace 配下へ設定する。"""

        base = normalize_namespace(namespace) or SEP
        if not is_absolute(base):
            base = SEP + base
        for name, value in values.items():
            name = str(name)
            full = name if is_absolute(name) else base + name
            self.set(full, value)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize_name(name) in self._values

    def __len__(self) -> int:
        return len(self._values)


def _normalize_name(name: str) -> str:
    name = str(name)
    if not is_absolute(name):
        name = SEP + name
    if len(name) > 1:
        name = name.rstrip(SEP)
    return name


def _ancestors(name: str) -> list[str]:
    """`/a/b/c` -> [`/a`, `/a/b`]。"""

    parts = name.strip(SEP).split(SEP)
    return [SEP + SEP.join(parts[:i]) for i in range(1, len(parts))]


__all__ = [
    "ParamRegistry",
    "NamespaceContext",
    "StaticContext",
    "EnvironmentContext",
    "InMemoryRegistry",
]
