import pytest

from rush.core.runtime_config import set_config_path
from rush.params import InMemoryRegistry, MasterRegistry, ParamStore, RegistryError


class _FakeMaster:
    """ROS master API の (code, message, value) 応答を模擬する。"""

    def __init__(self, registry: InMemoryRegistry) -> None:
        self.registry = registry
        self.calls: list[tuple[str, tuple]] = []

    def getParamNames(self, caller_id: str):
        self.calls.append(("getParamNames", (caller_id,)))
        return [1, "Parameter names", self.registry.list_names()]

    def getParam(self, caller_id: str, key: str):
        self.calls.append(("getParam", (caller_id, key)))
        if key not in self.registry:
            return [-1, f"Parameter [{key}] is not set", 0]
        return [1, f"Parameter [{key}]", self.registry.get_value(key)]


def test_master_registry_feeds_param_store():
    master = _FakeMaster(InMemoryRegistry({"/robot/speed": 3.5, "/robot/name": "bot1"}))
    registry = MasterRegistry("http://master:11311", "/me", proxy=master)
    store = ParamStore(registry, namespace="robot", grace_period=0)

    assert store.as_dict() == {"speed": 3.5, "name": "bot1"}
    assert master.calls[0] == ("getParamNames", ("/me",))


def test_master_failure_status_raises_registry_error():
    master = _FakeMaster(InMemoryRegistry())
    registry = MasterRegistry("http://master:11311", "/me", proxy=master)

    with pytest.raises(RegistryError, match="getParam"):
        registry.get_value("/missing")


def test_transport_errors_propagate_unchanged():
    class _DownMaster:
        def getParamNames(self, caller_id: str):
            raise ConnectionRefusedError("connection refused")

    registry = MasterRegistry("http://master:11311", "/me", proxy=_DownMaster())
    with pytest.raises(ConnectionRefusedError):
        ParamStore(registry, grace_period=0).load("/")


def test_defaults_come_from_runtime_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    explicit = tmp_path / "config.yaml"
    explicit.write_text('ros:\n  master_uri: "http://robot:11311"\n', encoding="utf-8")
    set_config_path(explicit)

    registry = MasterRegistry(proxy=object())
    assert registry.master_uri == "http://robot:11311"
    assert registry.caller_id == "/rush"
