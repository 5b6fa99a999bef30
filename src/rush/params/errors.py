# どこで: `src/rush/params/errors.py`。
# 何を: パラメータストア/値ボックス/レジストリの例外型を定義する。
# なぜ: 呼び出し側が builtin 例外（KeyError/TypeError/RuntimeError）としても捕捉できるようにするため。

from __future__ import annotations


class ParamError(Exception):
    """rush.params が送出する例外の基底。"""


class KeyNotFoundError(ParamError, KeyError):
    """ParamStore に存在しないキーを参照した。"""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"キーが見つかりません: key={self.key!r}"


class TypeMismatchError(ParamError, TypeError):
    """ParamValue の保持型を要求型へ変換できない。"""


class RegistryError(ParamError, RuntimeError):
    """外部パラメータレジストリが失敗ステータスを返した。"""


__all__ = ["ParamError", "KeyNotFoundError", "TypeMismatchError", "RegistryError"]
