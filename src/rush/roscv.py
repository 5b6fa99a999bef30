# どこで: `src/rush/roscv.py`。
# 何を: numpy 画像配列と sensor_msgs/Image 形式のメッセージを相互変換する。
# なぜ: OpenCV 画像（= numpy 配列）を ROS へ流す際のエンコーディング推定とコピーを 1 箇所へ閉じるため。

from __future__ import annotations

import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np

MONO8 = "mono8"
MONO16 = "mono16"
BGR8 = "bgr8"
RGB8 = "rgb8"
BGRA8 = "bgra8"
RGBA8 = "rgba8"
BGR16 = "bgr16"
RGB16 = "rgb16"
BGRA16 = "bgra16"
RGBA16 = "rgba16"

# encoding -> (dtype, channels)
_LAYOUTS: dict[str, tuple[np.dtype, int]] = {
    MONO8: (np.dtype(np.uint8), 1),
    BGR8: (np.dtype(np.uint8), 3),
    RGB8: (np.dtype(np.uint8), 3),
    BGRA8: (np.dtype(np.uint8), 4),
    RGBA8: (np.dtype(np.uint8), 4),
    MONO16: (np.dtype(np.uint16), 1),
    BGR16: (np.dtype(np.uint16), 3),
    RGB16: (np.dtype(np.uint16), 3),
    BGRA16: (np.dtype(np.uint16), 4),
    RGBA16: (np.dtype(np.uint16), 4),
}


@dataclass(slots=True)
class Header:
    """std_msgs/Header 相当。stamp は秒（float）。"""

    seq: int = 0
    stamp: float = 0.0
    frame_id: str = ""


@dataclass(slots=True)
class ImageMessage:
    """sensor_msgs/Image 相当。"""

    header: Header = field(default_factory=Header)
    height: int = 0
    width: int = 0
    encoding: str = ""
    is_bigendian: int = 0
    step: int = 0
    data: bytes = b""


def image_encoding(image: np.ndarray, invert: bool = True) -> str:
    """配列の dtype/チャンネル数から encoding を返す。未対応なら空文字列。

    invert=True のとき 3/4 チャンネルを BGR 順（OpenCV 既定）とみなす。
    """

    if image.ndim == 2:
        channels = 1
    elif image.ndim == 3:
        channels = int(image.shape[2])
    else:
        return ""

    if image.dtype == np.uint8:
        table = {1: MONO8, 3: BGR8 if invert else RGB8, 4: BGRA8 if invert else RGBA8}
    elif image.dtype == np.uint16:
        table = {1: MONO16, 3: BGR16 if invert else RGB16, 4: BGRA16 if invert else RGBA16}
    else:
        return ""
    return table.get(channels, "")


def cv_to_ros(
    image: np.ndarray, header: Header | None = None, *, invert: bool = True
) -> ImageMessage:
    """numpy 画像を ImageMessage へコピーして返す。"""

    image = np.asarray(image)
    encoding = image_encoding(image, invert=invert)
    if not encoding:
        raise ValueError(
            f"未対応の画像レイアウトです: dtype={image.dtype} shape={image.shape}"
        )

    height, width = int(image.shape[0]), int(image.shape[1])
    contiguous = np.ascontiguousarray(image)
    return ImageMessage(
        header=header if header is not None else Header(),
        height=height,
        width=width,
        encoding=encoding,
        is_bigendian=int(sys.byteorder == "big"),
        step=int(contiguous.strides[0]),
        data=contiguous.tobytes(),
    )


def ros_to_cv(msg: ImageMessage) -> np.ndarray:
    """ImageMessage から numpy 画像（コピー）を返す。mono は 2 次元配列。"""

    layout = _LAYOUTS.get(msg.encoding)
    if layout is None:
        raise ValueError(f"未対応の encoding です: {msg.encoding!r}")
    dtype, channels = layout
    dtype = dtype.newbyteorder(">" if msg.is_bigendian else "<")

    row_items = msg.step // dtype.itemsize
    flat = np.frombuffer(msg.data, dtype=dtype, count=msg.height * row_items)
    rows = flat.reshape(msg.height, row_items)[:, : msg.width * channels]
    image = rows.reshape(msg.height, msg.width, channels).astype(dtype.newbyteorder("="))
    if channels == 1:
        return image[:, :, 0].copy()
    return image


class ImagePublisher:
    """numpy 画像を ImageMessage にして publish 関数へ渡す。"""

    def __init__(
        self,
        publish: Callable[[ImageMessage], None],
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._publish = publish
        self._clock = clock
        self._seq = 0

    def publish(
        self, image: np.ndarray, stamp: float | None = None, frame_id: str = ""
    ) -> ImageMessage:
        header = Header(
            seq=self._seq,
            stamp=self._clock() if stamp is None else float(stamp),
            frame_id=frame_id,
        )
        msg = cv_to_ros(image, header)
        self._publish(msg)
        self._seq += 1
        return msg


__all__ = [
    "Header",
    "ImageMessage",
    "ImagePublisher",
    "image_encoding",
    "cv_to_ros",
    "ros_to_cv",
]
