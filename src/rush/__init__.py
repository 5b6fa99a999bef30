# どこで: `src/rush/__init__.py`。
# 何を: ルート `rush` パッケージを定義する。
# なぜ: import 起点を `rush` に統一するため。

from __future__ import annotations

from rush.params import InMemoryRegistry, ParamStore, ParamValue

__all__ = ["InMemoryRegistry", "ParamStore", "ParamValue"]
