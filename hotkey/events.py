from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Key(Enum):
    CONTROL_LEFT = "ctrl"
    CONTROL_RIGHT = "right ctrl"
    ALT = "alt"
    ALT_GR = "alt gr"
    O = "o"
    I = "i"
    OTHER = ""


# keyboard 库在不同平台上给出的按键名并不一致，这里统一归一
_KEY_ALIASES: dict[str, Key] = {
    "ctrl": Key.CONTROL_LEFT,
    "left ctrl": Key.CONTROL_LEFT,
    "control": Key.CONTROL_LEFT,
    "left control": Key.CONTROL_LEFT,
    "right ctrl": Key.CONTROL_RIGHT,
    "right control": Key.CONTROL_RIGHT,
    "alt": Key.ALT,
    "left alt": Key.ALT,
    "alt gr": Key.ALT_GR,
    "altgr": Key.ALT_GR,
    "right alt": Key.ALT_GR,
    # 本地化的 Windows 键名（GetKeyNameText）
    "strg": Key.CONTROL_LEFT,
    "strg-links": Key.CONTROL_LEFT,
    "strg-rechts": Key.CONTROL_RIGHT,
    "ctrl droite": Key.CONTROL_RIGHT,
    "ctrl gauche": Key.CONTROL_LEFT,
    "o": Key.O,
    "i": Key.I,
}

# 左 Ctrl 的扫描码，键名认不出时兜底
_SCAN_CODE_CONTROL_LEFT = 29


@dataclass(frozen=True)
class KeyPress:
    key: Key


@dataclass(frozen=True)
class KeyRelease:
    key: Key


RawInputEvent = Union[KeyPress, KeyRelease]


def key_from_name(name: Optional[str], scan_code: Optional[int] = None) -> Key:
    key = _KEY_ALIASES.get(name.strip().lower(), Key.OTHER) if name else Key.OTHER
    if key is Key.OTHER and scan_code == _SCAN_CODE_CONTROL_LEFT:
        return Key.CONTROL_LEFT
    return key


def to_raw_event(
    name: Optional[str], event_type: str, scan_code: Optional[int] = None
) -> Optional[RawInputEvent]:
    """把 hook 回调里的 (按键名, "down"/"up") 转成 RawInputEvent，未知类型返回 None"""
    key = key_from_name(name, scan_code)
    if event_type == "down":
        return KeyPress(key)
    if event_type == "up":
        return KeyRelease(key)
    return None
