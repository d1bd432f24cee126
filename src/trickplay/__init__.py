"""Trickplay: sampled video frames packed into scrub-preview tilesheets."""

from trickplay.core import (
    CancellationToken,
    TrickplayConfig,
    TrickplayError,
    load_trickplay_config,
    plan_trickplay,
    run_trickplay,
)

__version__ = "0.1.0"

__all__ = [
    "CancellationToken",
    "TrickplayConfig",
    "TrickplayError",
    "load_trickplay_config",
    "plan_trickplay",
    "run_trickplay",
]
