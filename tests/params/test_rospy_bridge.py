import sys
import types

import pytest

from rush.params import ParamStore
from rush.params.rospy_bridge import RospyContext, RospyRegistry


def _fake_rospy() -> types.SimpleNamespace:
    params = {"/ns/arm/joints": 6, "/ns/arm/name": "ur5", "/rosdistro": "noetic"}
    return types.SimpleNamespace(
        get_param_names=lambda: list(params),
        get_param=lambda name: params[name],
        get_namespace=lambda: "/ns/",
    )


def test_rospy_adapters_drive_param_store():
    rospy = _fake_rospy()
    store = ParamStore(
        RospyRegistry(rospy), context=RospyContext(rospy), namespace="arm", grace_period=0
    )

    assert store.as_dict() == {"joints": 6, "name": "ur5"}


def test_missing_rospy_raises_runtime_error(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setitem(sys.modules, "rospy", None)

    with pytest.raises(RuntimeError, match="rospy"):
        RospyRegistry()
