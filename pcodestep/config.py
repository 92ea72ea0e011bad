from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Optional


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw, 0)


@dataclass(frozen=True)
class StepperConfig:
    # None lets the formatter indent only when the p-code has line labels.
    indent: Optional[bool] = None
    trace: bool = False
    trace_capacity: int = 256


def load_stepper_config() -> StepperConfig:
    indent: Optional[bool] = None
    if os.getenv("PCODESTEP_INDENT") is not None:
        indent = _env_flag("PCODESTEP_INDENT")
    return StepperConfig(
        indent=indent,
        trace=_env_flag("PCODESTEP_TRACE", default=False),
        trace_capacity=_env_int("PCODESTEP_TRACE_CAPACITY", 256),
    )


__all__ = ["StepperConfig", "load_stepper_config"]
