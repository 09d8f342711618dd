from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, field_validator

from .config import BLUR_MAX, DEFAULT_BLUR, DEFAULT_THRESHOLD, THRESHOLD_MAX


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


class Clip(BaseModel):
    x: int = 0
    y: int = 0

    @field_validator("x", "y", mode="before")
    @classmethod
    def _coerce_coordinate(cls, v: Any) -> Any:
        if v is None:
            return 0
        if isinstance(v, float):
            return 0 if math.isnan(v) or math.isinf(v) else int(round(v))
        return v


class Settings(BaseModel):
    """
    Caller-facing settings. Out-of-range numbers are clamped, never rejected.
    """

    threshold: float = DEFAULT_THRESHOLD
    blur: float = DEFAULT_BLUR
    clip: Optional[Clip] = None
    feather: bool = False

    @field_validator("threshold", mode="before")
    @classmethod
    def _default_threshold(cls, v: Any) -> Any:
        return DEFAULT_THRESHOLD if v is None else v

    @field_validator("blur", mode="before")
    @classmethod
    def _default_blur(cls, v: Any) -> Any:
        return DEFAULT_BLUR if v is None else v

    @field_validator("threshold")
    @classmethod
    def _clamp_threshold(cls, v: float) -> float:
        if math.isnan(v):
            return float(DEFAULT_THRESHOLD)
        return _clamp(v, 0.0, float(THRESHOLD_MAX))

    @field_validator("blur")
    @classmethod
    def _clamp_blur(cls, v: float) -> float:
        if math.isnan(v):
            return float(DEFAULT_BLUR)
        return _clamp(v, 0.0, float(BLUR_MAX))


@dataclass(frozen=True)
class FillParams:
    """Normalized parameters consumed by the edge map and the flood fill."""

    threshold: float
    blur: float
    clip_x: int = 0
    clip_y: int = 0
    feather: bool = False

    @property
    def edge_limit(self) -> float:
        # blur == 0 means no edge map; the edge test passes for any value.
        if self.blur <= 0:
            return math.inf
        return self.threshold / self.blur

    @property
    def clear_limit(self) -> float:
        return self.threshold / 4


class PerformanceRecord(BaseModel):
    name: str
    time: float
    width: int
    height: int


def normalize_settings(settings: Union[Settings, Mapping[str, Any], None] = None) -> FillParams:
    """
    Clamp and rescale caller settings:
      - threshold [0, 100] -> byte scale [0, 255]
      - blur clamped to [0, 20]
      - absent clip -> image origin
    """
    if settings is None:
        settings = Settings()
    elif not isinstance(settings, Settings):
        settings = Settings.model_validate(dict(settings))

    clip = settings.clip or Clip()
    return FillParams(
        threshold=255.0 * (settings.threshold / THRESHOLD_MAX),
        blur=settings.blur,
        clip_x=clip.x,
        clip_y=clip.y,
        feather=settings.feather,
    )
