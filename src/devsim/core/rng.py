"""
Per-model random sources.

Every model gets its own numpy Generator derived from:
- the single simulation-level seed
- the model's id

The id is hashed into the SeedSequence spawn key, so a model's stream
depends on nothing else: adding, removing or reordering other models does
not perturb it, and the same seed always reproduces the same run.
"""

from __future__ import annotations
import hashlib

import numpy as np


def fresh_seed() -> int:
    """Draw a non-deterministic 128-bit seed from OS entropy."""
    return int(np.random.SeedSequence().entropy)


def model_seed_sequence(seed: int, model_id: str) -> np.random.SeedSequence:
    """SeedSequence for one model, keyed by the SHA-256 of its id."""
    digest = hashlib.sha256(model_id.encode("utf-8")).digest()
    spawn_key = tuple(
        int.from_bytes(digest[i:i + 4], "little") for i in range(0, len(digest), 4)
    )
    return np.random.SeedSequence(entropy=seed, spawn_key=spawn_key)


def model_rng(seed: int, model_id: str) -> np.random.Generator:
    """Independent, reproducible Generator for one model."""
    return np.random.default_rng(model_seed_sequence(seed, model_id))
