"""
Timeline configuration - presentation constants for the reconciliation engines
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

from timeline_dep_graph.utils.exceptions import ConfigurationError

from .env_config import EnvConfig

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class TimelineConfig:
    """
    Configuration settings for a timeline instance.

    None of these values are load-bearing for the reconciliation itself; they
    tune the geometry and navigation heuristics.

    Attributes:
        bezier_pull: Horizontal control point offset of an arrow, as a multiple
            of the smaller endpoint height (default: 1.0)
        offscreen_edge: x coordinate used for a synthetic off-screen target
            endpoint; None uses the view's viewport width (default: None)
        nested_label_padding: Extra top space reserved above a nested expanded
            task's bounding box for its label (default: 20)
        hierarchy_padding: Padding between an expanded task's sub-tasks and its
            container (default: 5)
        label_offset: Horizontal offset of a container label (default: 10)
        focus_margin_seconds: Window margin around a focused task (default: 5)
        zoom_ratio: Toolbar zoom step (default: 0.2)
        motion_ratio: Toolbar pan step as a fraction of the window (default: 0.2)
        ungrouped_lane: Lane id used when items are not grouped by status
        log_level: Logging level (default: 'INFO')
    """

    bezier_pull: float = 1.0
    offscreen_edge: Optional[float] = None
    nested_label_padding: float = 20
    hierarchy_padding: float = 5
    label_offset: float = 10
    focus_margin_seconds: float = 5
    zoom_ratio: float = 0.2
    motion_ratio: float = 0.2
    ungrouped_lane: str = "unGrouped"
    log_level: str = "INFO"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.bezier_pull < 0:
            raise ValueError("bezier_pull cannot be negative")

        for name in ("nested_label_padding", "hierarchy_padding", "label_offset"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} cannot be negative")

        if self.focus_margin_seconds < 0:
            raise ValueError("focus_margin_seconds cannot be negative")

        if not 0 < self.zoom_ratio <= 1:
            raise ValueError(f"zoom_ratio must be in (0, 1], got {self.zoom_ratio}")

        if not 0 < self.motion_ratio <= 1:
            raise ValueError(f"motion_ratio must be in (0, 1], got {self.motion_ratio}")

        if not self.ungrouped_lane:
            raise ValueError("ungrouped_lane cannot be empty")

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

    @classmethod
    def from_env(cls, prefix: str = "TDG_") -> "TimelineConfig":
        """
        Create configuration from environment variables.

        Args:
            prefix: Prefix for environment variables (default: "TDG_")

        Example:
            export TDG_BEZIER_PULL=2
            export TDG_FOCUS_MARGIN_SECONDS=30
            config = TimelineConfig.from_env()
        """
        try:
            return cls(
                bezier_pull=EnvConfig.get_float(f"{prefix}BEZIER_PULL", 1.0),
                offscreen_edge=EnvConfig.get_optional_float(f"{prefix}OFFSCREEN_EDGE"),
                nested_label_padding=EnvConfig.get_float(f"{prefix}NESTED_LABEL_PADDING", 20),
                hierarchy_padding=EnvConfig.get_float(f"{prefix}HIERARCHY_PADDING", 5),
                label_offset=EnvConfig.get_float(f"{prefix}LABEL_OFFSET", 10),
                focus_margin_seconds=EnvConfig.get_float(f"{prefix}FOCUS_MARGIN_SECONDS", 5),
                zoom_ratio=EnvConfig.get_float(f"{prefix}ZOOM_RATIO", 0.2),
                motion_ratio=EnvConfig.get_float(f"{prefix}MOTION_RATIO", 0.2),
                ungrouped_lane=EnvConfig.get(f"{prefix}UNGROUPED_LANE", "unGrouped"),
                log_level=EnvConfig.get(f"{prefix}LOG_LEVEL", "INFO"),
            )
        except ValueError as e:
            raise ConfigurationError(setting_name=f"{prefix}*", message=str(e)) from e

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "TimelineConfig":
        """Create configuration from a dictionary, ignoring unknown keys."""
        known = {k: v for k, v in config_dict.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)
