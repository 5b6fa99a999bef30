# どこで: `src/rush/params/rospy_bridge.py`。
# 何を: rospy のパラメータ API を ParamRegistry / NamespaceContext として包む。
# なぜ: rospy ノード内では master 接続やノード namespace を rospy に任せるため。

from __future__ import annotations

from typing import Any


def _import_rospy() -> Any:
    try:
        import rospy  # type: ignore
    except Exception as exc:
        raise RuntimeError(
            "RospyRegistry を使うには rospy が必要です（ROS 環境を source してください）。"
        ) from exc
    return rospy


class RospyRegistry:
    """`rospy.get_param_names` / `rospy.get_param` に委譲するレジストリ。"""

    def __init__(self, rospy: Any | None = None) -> None:
        self._rospy = rospy if rospy is not None else _import_rospy()

    def list_names(self) -> list[str]:
        return list(self._rospy.get_param_names())

    def get_value(self, name: str) -> Any:
        return self._rospy.get_param(name)


class RospyContext:
    """`rospy.get_namespace()` を返すコンテキスト。"""

    def __init__(self, rospy: Any | None = None) -> None:
        self._rospy = rospy if rospy is not None else _import_rospy()

    def current_namespace(self) -> str:
        return str(self._rospy.get_namespace())


__all__ = ["RospyRegistry", "RospyContext"]
