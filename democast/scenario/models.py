from __future__ import annotations
import re
from typing import Annotated, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..colors import parse_color, parse_gradient

SAFE_SELECTOR_RE = re.compile(r"""^[a-zA-Z0-9\-_#.\[\]="':\s~^$|*,>+()@]+$""")


def is_safe_selector(selector: str) -> bool:
    """True when ``selector`` only uses characters from the safe selector charset."""
    return bool(SAFE_SELECTOR_RE.match(selector))


def _check_color(value: str) -> str:
    parse_color(value)
    return value


# CSS-ish colour string, rejected at load time when it cannot be parsed
Color = Annotated[str, AfterValidator(_check_color)]


class _Model(BaseModel):
    """Scenario base: camelCase in YAML, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _SelectorAction(_Model):
    @field_validator("selector", check_fields=False)
    @classmethod
    def _check_selector(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not is_safe_selector(value):
            raise ValueError("Selector contains invalid characters")
        return value


# --- Step actions ---


class NavigateAction(_Model):
    action: Literal["navigate"]
    url: str = Field(min_length=1)
    wait_until: Literal["load", "domcontentloaded", "networkidle"] = "networkidle"


class ClickAction(_SelectorAction):
    action: Literal["click"]
    selector: str
    delay: Optional[float] = None


class TypeAction(_SelectorAction):
    action: Literal["type"]
    selector: str
    text: str
    delay: float = 50


class ScrollAction(_SelectorAction):
    action: Literal["scroll"]
    selector: Optional[str] = None
    x: float = 0
    y: float = 0
    smooth: bool = True


class WaitAction(_Model):
    action: Literal["wait"]
    duration: float


class HoverAction(_SelectorAction):
    action: Literal["hover"]
    selector: str


class ScreenshotAction(_Model):
    action: Literal["screenshot"]
    name: Optional[str] = None
    full_page: bool = False


StepAction = Annotated[
    Union[
        NavigateAction,
        ClickAction,
        TypeAction,
        ScrollAction,
        WaitAction,
        HoverAction,
        ScreenshotAction,
    ],
    Field(discriminator="action"),
]


# --- Effects ---


class ZoomConfig(_Model):
    enabled: bool = True
    scale: float = Field(1.8, ge=1, le=5)
    duration: float = 600
    easing: Literal["ease-in-out", "ease-in", "ease-out", "linear"] = "ease-in-out"


class CursorConfig(_Model):
    enabled: bool = True
    size: int = 20
    color: Color = "#000000"
    speed: Literal["fast", "normal", "slow"] = "fast"
    smoothing: bool = True
    click_effect: bool = True
    click_color: Color = "rgba(59, 130, 246, 0.3)"
    click_radius: float = 30
    trail: bool = False
    trail_length: int = 8
    trail_color: Color = "rgba(59, 130, 246, 0.2)"
    highlight: bool = False
    highlight_radius: float = 40
    highlight_color: Color = "rgba(255, 215, 0, 0.18)"


class BackgroundConfig(_Model):
    enabled: bool = True
    type: Literal["gradient", "solid", "image"] = "gradient"
    value: str = "linear-gradient(135deg, #667eea 0%, #764ba2 100%)"
    padding: int = 60
    border_radius: int = 12
    shadow: bool = True

    @model_validator(mode="after")
    def _check_value(self) -> "BackgroundConfig":
        if self.type == "gradient":
            parse_gradient(self.value)
        elif self.type == "solid":
            parse_color(self.value)
        elif not self.value.strip():
            raise ValueError("Background image path must not be empty")
        return self


class DeviceFrameConfig(_Model):
    enabled: bool = False
    type: Literal["browser", "macbook", "iphone", "ipad", "android", "none"] = "browser"
    dark_mode: bool = False


class SpeedRampConfig(_Model):
    enabled: bool = False
    idle_speed: float = Field(3.0, ge=0.5, le=8)
    action_speed: float = Field(0.8, ge=0.25, le=2)


class KeystrokeConfig(_Model):
    enabled: bool = False
    position: Literal["bottom-center", "bottom-left", "bottom-right"] = "bottom-center"
    font_size: int = 18
    background_color: Color = "rgba(0, 0, 0, 0.75)"
    text_color: Color = "#ffffff"
    padding: int = 8
    fade_after: float = 1500


class WatermarkConfig(_Model):
    enabled: bool = False
    text: str = ""
    position: Literal["top-left", "top-right", "bottom-left", "bottom-right"] = "bottom-right"
    opacity: float = Field(0.5, ge=0, le=1)
    font_size: int = 14
    color: Color = "#ffffff"


class EffectsConfig(_Model):
    zoom: ZoomConfig = Field(default_factory=ZoomConfig)
    cursor: CursorConfig = Field(default_factory=CursorConfig)
    background: BackgroundConfig = Field(default_factory=BackgroundConfig)
    device_frame: DeviceFrameConfig = Field(default_factory=DeviceFrameConfig)
    speed_ramp: SpeedRampConfig = Field(default_factory=SpeedRampConfig)
    keystroke: KeystrokeConfig = Field(default_factory=KeystrokeConfig)
    watermark: WatermarkConfig = Field(default_factory=WatermarkConfig)

    @classmethod
    def disabled(cls) -> "EffectsConfig":
        """Effects with every layer switched off (raw frames, only resized)."""
        return cls(
            zoom=ZoomConfig(enabled=False),
            cursor=CursorConfig(enabled=False),
            background=BackgroundConfig(enabled=False),
        )


# --- Output ---


class OutputConfig(_Model):
    format: Literal["gif", "mp4", "webm", "png-sequence"] = "gif"
    width: int = 1280
    height: int = 800
    fps: float = Field(15, ge=1, le=60)
    quality: float = Field(80, ge=1, le=100)
    output_dir: str = "./output"
    filename: str = "democast-recording"


# --- Scenario ---


class Viewport(_Model):
    width: int = 1280
    height: int = 800


class Step(_Model):
    name: Optional[str] = None
    actions: List[StepAction]
    capture_delay: float = 300
    hold_duration: float = 1500
    transition: Literal["fade", "none"] = "none"


class Scenario(_Model):
    name: str
    description: Optional[str] = None
    viewport: Viewport = Field(default_factory=Viewport)
    effects: EffectsConfig = Field(default_factory=EffectsConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    steps: List[Step] = Field(min_length=1)
