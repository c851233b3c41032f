from __future__ import annotations

"""Randomness helpers for seeding."""

import os
import random
from typing import Optional

import numpy as np

from ..logger import get_logger

logger = get_logger(__name__)


def seed_if_needed(seed: Optional[int] = None) -> Optional[int]:
    """Seed ``random`` and numpy from ``seed`` or the SEED env var.

    Returns the seed used, or None when nothing was seeded.
    """
    if seed is None:
        raw = os.environ.get("SEED")
        if raw is None:
            return None
        try:
            seed = int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-integer SEED={raw!r}")
            return None
    random.seed(seed)
    np.random.seed(seed % (2**32))
    return seed


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Dedicated generator; unseeded draws from the module RNG state."""
    return random.Random(seed if seed is not None else random.getrandbits(64))
