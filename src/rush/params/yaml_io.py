# どこで: `src/rush/params/yaml_io.py`。
# 何を: YAML パラメータファイルの読み込み（rosparam load 相当）と ParamStore の YAML 出力を提供する。
# なぜ: ROS master 無しでも、ファイルで定義したパラメータを InMemoryRegistry 経由で扱えるようにするため。

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from .registry import InMemoryRegistry
from .store import ParamStore

_logger = logging.getLogger(__name__)


def load_yaml_params(
    path: str | Path,
    registry: InMemoryRegistry | None = None,
    namespace: str = "/",
) -> InMemoryRegistry:
    """YAML ファイルを読み、namespace 配下へ設定した registry を返す。

    registry を省略した場合は新しい InMemoryRegistry を作る。
    """

    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"パラメータ YAML の読み込みに失敗しました: path={path}") from exc

    if registry is None:
        registry = InMemoryRegistry()
    if data is None:
        return registry
    if not isinstance(data, dict):
        _logger.warning("パラメータ YAML のトップレベルが mapping ではありません: path=%s", path)
        raise RuntimeError(f"パラメータ YAML は mapping である必要があります: path={path}")

    registry.update_from_mapping(data, namespace=namespace)
    _logger.debug("パラメータ YAML を読み込みました: path=%s namespace=%r", path, namespace)
    return registry


def dump_store_yaml(store: ParamStore) -> str:
    """ParamStore の内容をキー昇順の YAML 文字列として返す。"""

    return yaml.safe_dump(store.as_dict(), sort_keys=True, allow_unicode=True)


__all__ = ["load_yaml_params", "dump_store_yaml"]
