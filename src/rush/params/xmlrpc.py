# どこで: `src/rush/params/xmlrpc.py`。
# 何を: ROS master のパラメータサーバへ XML-RPC で問い合わせる MasterRegistry を提供する。
# なぜ: rospy を導入できない環境からでも ParamStore を実レジストリへ接続するため。

from __future__ import annotations

import xmlrpc.client
from typing import Any

from rush.core.runtime_config import runtime_config

from .errors import RegistryError

_STATUS_SUCCESS = 1


class MasterRegistry:
    """ROS master API（getParamNames / getParam）に対する ParamRegistry 実装。

    Notes
    -----
    - 失敗ステータス（code != 1）は RegistryError へ変換する。
    - 通信エラー（OSError / xmlrpc.client.Fault など）はそのまま伝播する。
    - リトライ/タイムアウトは持たない。
    """

    def __init__(
        self,
        master_uri: str | None = None,
        caller_id: str | None = None,
        *,
        proxy: Any | None = None,
    ) -> None:
        if master_uri is None or caller_id is None:
            cfg = runtime_config()
            master_uri = master_uri or cfg.master_uri
            caller_id = caller_id or cfg.caller_id
        self.master_uri = str(master_uri)
        self.caller_id = str(caller_id)
        self._proxy = proxy if proxy is not None else xmlrpc.client.ServerProxy(
            self.master_uri, allow_none=True
        )

    def list_names(self) -> list[str]:
        names = self._call("getParamNames")
        return [str(n) for n in names]

    def get_value(self, name: str) -> Any:
        return self._call("getParam", name)

    def _call(self, method: str, *args: Any) -> Any:
        code, message, value = getattr(self._proxy, method)(self.caller_id, *args)
        if code != _STATUS_SUCCESS:
            raise RegistryError(
                f"ROS master が失敗を返しました: method={method} args={args!r} "
                f"code={code} message={message!r}"
            )
        return value

    def __repr__(self) -> str:
        return f"MasterRegistry(master_uri={self.master_uri!r}, caller_id={self.caller_id!r})"


__all__ = ["MasterRegistry"]
