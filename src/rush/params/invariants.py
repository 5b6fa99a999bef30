# どこで: `src/rush/params/invariants.py`。
# 何を: ParamStore の不変条件をテストで検証する関数を提供する。
# なぜ: 「キーは記録済み namespace の prefix 除去で得られる」等の知識を 1 箇所へ固定するため。

from __future__ import annotations

from .names import has_prefix, resolve_namespace
from .store import ParamStore
from .value import ParamValue


def assert_invariants(store: ParamStore) -> None:
    """ParamStore の不変条件を検査する。

    Notes
    -----
    テスト専用の検査関数。レジストリへ list_names を 1 回問い合わせる。
    """

    for key, value in store._entries.items():
        assert isinstance(key, str)
        assert isinstance(value, ParamValue)

    for namespace in store._namespaces:
        assert isinstance(namespace, str)
        assert namespace == "" or namespace.endswith("/")

    context_ns = store._context.current_namespace()
    prefixes = [resolve_namespace(ns, context_ns) for ns in store._namespaces]
    names = store._registry.list_names()
    for key in store._entries:
        assert any(
            has_prefix(name, prefix) and name[len(prefix) :] == key
            for prefix in prefixes
            for name in names
        ), f"key={key!r} は記録済み namespace から導出できません"


__all__ = ["assert_invariants"]
