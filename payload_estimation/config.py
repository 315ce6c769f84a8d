"""
Estimator Config - payload estimation settings

Settings live in a small JSON file (same layout idea as robot_db.json):

    {
        "gravity": [0.0, 0.0, -9.81],
        "reference_axis": "z",
        "reference_magnitude": 1.0,
        "combination": "max",
        "safety_margin": 1.0
    }

Every key is optional.
"""

import json
import logging
from dataclasses import dataclass, asdict
from typing import Dict, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

AXES = {'x': 0, 'y': 1, 'z': 2}

# "max" keeps the historical behaviour (largest per-joint bound wins).
# "min" reports the most restrictive joint, which is the physical capacity.
COMBINATIONS = ('max', 'min')

DEFAULT_GRAVITY = (0.0, 0.0, -9.81)


def _number(value):
    if isinstance(value, str):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class EstimatorConfig:
    """
    Payload estimation settings.

    Attributes:
        gravity: gravity acceleration in the base frame [m/s²]
        reference_axis: tip-frame axis of the unit reference force
        reference_magnitude: magnitude of the reference force [N]
        combination: 'max' (historical) or 'min' (binding joint)
        safety_margin: fraction of the torque limit used by feasibility checks
    """
    gravity: Tuple[float, float, float] = DEFAULT_GRAVITY
    reference_axis: str = 'z'
    reference_magnitude: float = 1.0
    combination: str = 'max'
    safety_margin: float = 1.0

    def __post_init__(self):
        try:
            gravity = tuple(_number(g) for g in self.gravity)
            reference_magnitude = _number(self.reference_magnitude)
            safety_margin = _number(self.safety_margin)
        except (TypeError, ValueError) as e:
            error_msg = f"Invalid config value - {e}"
            logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        if len(gravity) != 3:
            raise ConfigurationError(f"gravity must have 3 components, got {len(gravity)}")
        object.__setattr__(self, 'gravity', gravity)
        object.__setattr__(self, 'reference_magnitude', reference_magnitude)
        object.__setattr__(self, 'safety_margin', safety_margin)

        if not isinstance(self.reference_axis, str) or self.reference_axis not in AXES:
            raise ConfigurationError(
                f"reference_axis must be one of {sorted(AXES)}, got {self.reference_axis!r}"
            )
        if self.combination not in COMBINATIONS:
            raise ConfigurationError(
                f"combination must be one of {COMBINATIONS}, got {self.combination!r}"
            )
        if not self.reference_magnitude > 0.0:
            raise ConfigurationError(
                f"reference_magnitude must be positive, got {self.reference_magnitude}"
            )
        if not 0.0 < self.safety_margin <= 1.0:
            raise ConfigurationError(
                f"safety_margin must be in (0, 1], got {self.safety_margin}"
            )

    @property
    def axis_index(self) -> int:
        return AXES[self.reference_axis]

    def replace(self, **changes) -> 'EstimatorConfig':
        """Copy with some fields changed"""
        values = asdict(self)
        values.update({k: v for k, v in changes.items() if v is not None})
        return EstimatorConfig(**values)

    @classmethod
    def from_dict(cls, data: Dict) -> 'EstimatorConfig':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)


def load_config(config_path) -> EstimatorConfig:
    """
    Load an EstimatorConfig from a JSON file

    Args:
        config_path: JSON file path

    Returns:
        EstimatorConfig

    Raises:
        ConfigurationError: file missing, not JSON, or invalid values
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info(f"[EstimatorConfig] Loaded config from: {config_path}")
    except FileNotFoundError:
        error_msg = f"Config file not found: {config_path}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)
    except json.JSONDecodeError as e:
        error_msg = f"Config JSON parsing failed - {e}"
        logger.error(error_msg)
        raise ConfigurationError(error_msg)

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be an object, got {type(data).__name__}")

    return EstimatorConfig.from_dict(data)
