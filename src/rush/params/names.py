# どこで: `src/rush/params/names.py`。
# 何を: namespace 文字列の正規化・解決・prefix 除去を提供する。
# なぜ: 「末尾 / の強制」で部分セグメント一致（/a/b と /a/bc）を防ぐ規則を 1 箇所へ固定するため。

from __future__ import annotations

SEP = "/"


def is_absolute(namespace: str) -> bool:
    return namespace.startswith(SEP)


def normalize_namespace(namespace: str) -> str:
    """末尾に区切り文字を付けた namespace を返す。

    空文字列は「呼び出し元コンテキストそのもの」を表すので空のまま返す。
    """

    namespace = str(namespace)
    if not namespace:
        return ""
    if not namespace.endswith(SEP):
        namespace += SEP
    return namespace


def resolve_namespace(namespace: str, context_namespace: str) -> str:
    """namespace をコンテキストに対して解決し、絶対 namespace（末尾 / 付き）を返す。

    Parameters
    ----------
    namespace : str
        `normalize_namespace` 済みの namespace。
    context_namespace : str
        呼び出し元の絶対 namespace（例: ``"/"``, ``"/robot"``）。
    """

    namespace = normalize_namespace(namespace)
    if is_absolute(namespace):
        return namespace

    base = normalize_namespace(context_namespace) or SEP
    if not is_absolute(base):
        base = SEP + base
    return base + namespace


def has_prefix(name: str, prefix: str) -> bool:
    """name の先頭 len(prefix) 文字が prefix と完全一致するか。"""

    return name[: len(prefix)] == prefix


def strip_prefix(name: str, prefix: str) -> str:
    return name[len(prefix) :]


__all__ = [
    "SEP",
    "is_absolute",
    "normalize_namespace",
    "resolve_namespace",
    "has_prefix",
    "strip_prefix",
]
