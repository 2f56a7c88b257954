"""Configuration defaults, env vars, and runtime options for dayclock."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dayclock.dial.timemath import DialGeometry


VERSION = "1.0.0"

DEFAULT_STORE_FILE = "dayclock.json"


@dataclass
class Config:
    """Runtime configuration shared by the CLI and the dial engine."""

    # Store
    store_file: str = ""
    api_url: str = ""
    api_token: str = ""

    # Dial geometry (SVG user units)
    view_size: int = 320
    radius_am: float = 75
    radius_pm: float = 110
    stroke_track: float = 28
    stroke_event: float = 24

    # Interaction
    snap_minutes: int = 5
    tick_seconds: float = 60.0

    # Misc
    verbose: bool = False

    def __post_init__(self) -> None:
        if not self.store_file:
            self.store_file = os.environ.get("DAYCLOCK_STORE_FILE") or DEFAULT_STORE_FILE
        if not self.api_url:
            self.api_url = os.environ.get("DAYCLOCK_API_URL", "")
        if not self.api_token:
            self.api_token = os.environ.get("DAYCLOCK_API_TOKEN", "")
    @property
    def use_local_store(self) -> bool:
        return not self.api_url

    def geometry(self) -> DialGeometry:
        center = self.view_size / 2
        return DialGeometry(
            center_x=center,
            center_y=center,
            radius_am=self.radius_am,
            radius_pm=self.radius_pm,
            view_size=self.view_size,
            stroke_track=self.stroke_track,
            stroke_event=self.stroke_event,
        )
