# どこで: `src/rush/params/store.py`。
# 何を: namespace 単位でレジストリからパラメータを取り込む ParamStore を定義する。
# なぜ: 複数 namespace のマージと、記録済み namespace 集合からの決定的な reload を提供するため。

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import Any

from rush.core.runtime_config import default_grace_period

from .errors import KeyNotFoundError
from .names import has_prefix, normalize_namespace, resolve_namespace, strip_prefix
from .registry import NamespaceContext, ParamRegistry, StaticContext
from .value import ConversionRules, ParamValue

_logger = logging.getLogger(__name__)


class ParamStore:
    """key -> ParamValue を保持し、namespace 単位でレジストリから取り込むストア。

    Notes
    -----
    - `_entries` の各キーは、記録済み namespace の prefix を外部名から除いたもの。
    - `_namespaces` は load に渡された（正規化済み）引数の挿入順集合で、縮まない。
    - 同じキーへの再取り込みは黙って上書きする（後勝ち）。
    - 内部ロックは持たない。同一インスタンスの並行呼び出しは呼び出し側で同期する。
    """

    def __init__(
        self,
        registry: ParamRegistry,
        *,
        namespace: str | None = None,
        context: NamespaceContext | None = None,
        grace_period: float | None = None,
        rules: ConversionRules | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Parameters
        ----------
        registry : ParamRegistry
            取り込み元。ParamStore からは変更しない。
        namespace : str | None
            指定した場合は生成時に `load(namespace)` を行う。
        context : NamespaceContext | None
            相対 namespace の解決に使う。None なら `/` 固定。
        grace_period : float | None
            レジストリへ問い合わせる前に待つ秒数。None なら runtime config の既定値。
        rules : ConversionRules | None
            `get_as` が使う変換規則。None なら XML-RPC 準拠の既定規則。
        sleep : Callable[[float], None]
            待機関数（テストで差し替える）。
        """

        self._registry = registry
        self._context: NamespaceContext = context if context is not None else StaticContext()
        self._grace_period = grace_period
        self._rules = rules
        self._sleep = sleep

        self._entries: dict[str, ParamValue] = {}
        # 挿入順を保つ集合として dict を使う。
        self._namespaces: dict[str, None] = {}

        if namespace is not None:
            self.load(namespace)

    @property
    def namespaces(self) -> tuple[str, ...]:
        """記録済み namespace（正規化済みの引数）を挿入順で返す。"""

        return tuple(self._namespaces)

    @property
    def grace_period(self) -> float:
        if self._grace_period is not None:
            return float(self._grace_period)
        return default_grace_period()

    def load(self, namespace: str = "") -> None:
        """namespace 配下のパラメータをレジストリから取り込む。

        相対 namespace（`/` 始まりでない）や空文字列は、呼び出し時点のコンテキストに
        対して解決する。記録するのは解決前の引数なので、reload 時に再解決される。
        """

        normalized = normalize_namespace(namespace)
        self._namespaces[normalized] = None
        self._load_resolved(normalized)

    def reload(self) -> None:
        """entries を空にし、記録済みの全 namespace を挿入順に再取り込みする。"""

        self._entries.clear()
        for namespace in self._namespaces:
            self._load_resolved(namespace)

    def get(self, key: str) -> ParamValue:
        """key の値を返す。未登録なら KeyNotFoundError。"""

        try:
            return self._entries[key]
        except KeyError:
            raise KeyNotFoundError(key) from None

    def get_as(self, key: str, type_: Any) -> Any:
        """key の値を type_ へ変換して返す。"""

        return self.get(key).convert(type_, rules=self._rules)

    def get_keys(self) -> list[str]:
        """現在のキーを全て返す（空なら空リスト）。"""

        return list(self._entries)

    def as_dict(self) -> dict[str, Any]:
        """key -> ボックスを外した Python 値 の dict を返す。"""

        return {key: value.to_python() for key, value in self._entries.items()}

    def __getitem__(self, key: str) -> ParamValue:
        return self.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"ParamStore(namespaces={list(self._namespaces)!r}, keys={len(self._entries)})"

    def _load_resolved(self, namespace: str) -> None:
        prefix = resolve_namespace(namespace, self._context.current_namespace())

        grace = self.grace_period
        if grace > 0:
            self._sleep(grace)

        names = [n for n in self._registry.list_names() if has_prefix(n, prefix)]
        overwritten = 0
        for name in names:
            value = ParamValue.from_raw(self._registry.get_value(name))
            key = strip_prefix(name, prefix)
            if key in self._entries:
                overwritten += 1
            self._entries[key] = value

        _logger.debug(
            "パラメータを取り込みました: namespace=%r prefix=%r count=%d overwritten=%d",
            namespace,
            prefix,
            len(names),
            overwritten,
        )


__all__ = ["ParamStore"]
