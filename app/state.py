from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union


class Indicator(Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


INDICATOR_COLORS: dict[Indicator, str] = {
    Indicator.IDLE: "#fede8b",
    Indicator.LOADING: "#008000",
    Indicator.ERROR: "#cc0000",
}


@dataclass(frozen=True)
class ShowText:
    text: Optional[str]


@dataclass(frozen=True)
class SetIndicator:
    indicator: Indicator


@dataclass(frozen=True)
class ToggleVisibility:
    pass


UIMessage = Union[ShowText, SetIndicator, ToggleVisibility]


@dataclass(frozen=True)
class OverlayState:
    visible: bool = True
    current_text: Optional[str] = None
    indicator: Indicator = Indicator.IDLE


@dataclass(frozen=True)
class RenderPlan:
    visible: bool
    text: Optional[str] = None
    tint: Optional[str] = None


def reduce(state: OverlayState, message: UIMessage) -> OverlayState:
    if isinstance(message, ShowText):
        return replace(state, current_text=message.text)
    if isinstance(message, SetIndicator):
        return replace(state, indicator=message.indicator)
    if isinstance(message, ToggleVisibility):
        return replace(state, visible=not state.visible)
    raise TypeError(f"未知的 UI 消息: {message!r}")


def render(state: OverlayState) -> RenderPlan:
    """隐藏时什么都不画；有文本时只画文本；否则画一个按状态着色的小方块"""
    if not state.visible:
        return RenderPlan(visible=False)
    if state.current_text is not None:
        return RenderPlan(visible=True, text=state.current_text)
    return RenderPlan(visible=True, tint=INDICATOR_COLORS[state.indicator])
