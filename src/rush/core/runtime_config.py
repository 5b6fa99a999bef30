# どこで: `src/rush/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）を提供する。
# なぜ: grace period や ROS master の接続先をユーザーが指定できるようにするため。

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """rush の実行時設定。"""

    config_path: Path | None
    grace_period_s: float
    master_uri: str
    caller_id: str


_EXPLICIT_CONFIG_PATH: Path | None = None
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Notes
    -----
    `path` を None にすると明示指定を解除し、既定の探索に戻る。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    _EXPLICIT_CONFIG_PATH = None if path is None else Path(str(path)).expanduser()
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    cwd = Path.cwd()
    home = Path.home()
    return (
        cwd / ".rush" / "config.yaml",
        home / ".config" / "rush" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _to_text(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise TypeError("non-empty string required")
    return value.strip()


def _required(
    section: dict[str, Any], name: str, *, key: str, convert: Callable[[Any], Any]
) -> Any:
    """section[name] を convert して返す。欠落・変換失敗は RuntimeError。"""

    value = section.get(name)
    if value is None:
        raise RuntimeError(f"{key} が未設定です（同梱 default_config.yaml を確認してください）")
    try:
        return convert(value)
    except Exception as exc:
        raise RuntimeError(f"{key} の値が不正です: got={value!r}") from exc


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """セクション単位（1 段）で override を base へ重ねた dict を返す。"""

    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = {**out[key], **value}
        else:
            out[key] = value
    return out


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")
    return dict(data)


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config をロードして dict を返す。"""

    blob = resources.files("rush").joinpath("resource", "default_config.yaml").read_text(
        encoding="utf-8"
    )
    return _load_yaml_text(blob, source="rush/resource/default_config.yaml")


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。"""

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")
    discovered_path = next((p for p in _default_config_candidates() if p.is_file()), None)

    payload = _load_packaged_default_config()
    for path in (discovered_path, explicit_path):
        if path is not None:
            text = path.read_text(encoding="utf-8")
            payload = _merge(payload, _load_yaml_text(text, source=str(path)))

    version = _required(payload, "version", key="version", convert=int)
    if version != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version}")

    params = _as_mapping(payload.get("params"), key="params")
    ros = _as_mapping(payload.get("ros"), key="ros")

    grace_period_s = _required(
        params, "grace_period_s", key="params.grace_period_s", convert=float
    )
    if grace_period_s < 0:
        raise ValueError(f"params.grace_period_s は 0 以上である必要があります: got={grace_period_s}")

    cfg = RuntimeConfig(
        config_path=explicit_path or discovered_path,
        grace_period_s=grace_period_s,
        master_uri=_required(ros, "master_uri", key="ros.master_uri", convert=_to_text),
        caller_id=_required(ros, "caller_id", key="ros.caller_id", convert=_to_text),
    )
    _CONFIG_CACHE = cfg
    return cfg



def default_grace_period() -> float:
    """ParamStore.load の既定 grace period（秒）を返す。

    上書き順（後勝ち）:
    1) 同梱 default_config.yaml
    2) `./.rush/config.yaml` / `~/.config/rush/config.yaml`
    3) `set_config_path(...)` の config
    """

    return runtime_config().grace_period_s


__all__ = ["RuntimeConfig", "default_grace_period", "runtime_config", "set_config_path"]
