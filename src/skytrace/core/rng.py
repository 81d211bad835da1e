"""Explicit, seedable random number generation.

Every pixel gets its own 32-bit generator state derived from a single seed
and the pixel's linear index, so pixels can be evaluated in parallel with no
shared random state and a render is reproducible for a given seed.

The generator is the PCG hash from "Hash Functions for GPU Rendering"
(Jarzynski & Olano, JCGT 2020). A state is advanced by hashing it again and
the upper 24 bits of the new state form a float in [0, 1).

The process-wide seed used when a caller does not pass one is drawn once
from numpy's entropy source and can be pinned with ``set_process_seed``.
"""

import threading

import numpy as np
import taichi as ti

# Seeds and RNG states are unsigned 32-bit integers
SEED_MASK = 0xFFFFFFFF

# Golden-ratio multiplier spreading consecutive seeds across the state space
SEED_SCRAMBLE = 0x9E3779B9

_INV_2_POW_24 = 1.0 / 16777216.0


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with the PCG output permutation."""
    state = value * ti.u32(747796405) + ti.u32(2891336453)
    word = (ti.bit_shr(state, ti.bit_shr(state, 28) + ti.u32(4)) ^ state) * ti.u32(277803737)
    return ti.bit_shr(word, 22) ^ word


@ti.func
def seed_pixel(seed: ti.u32, index: ti.u32) -> ti.u32:
    """Derive the initial RNG state for the pixel with the given linear index."""
    return pcg_hash(index ^ (seed * ti.u32(SEED_SCRAMBLE)))


@ti.func
def next_float(rng: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        rng: The current RNG state.

    Returns:
        A tuple (value, rng) where rng is the advanced state.
    """
    state = pcg_hash(rng)
    value = ti.cast(ti.bit_shr(state, 8), ti.f32) * _INV_2_POW_24
    return value, state


# =============================================================================
# Process-wide Seed (Python side)
# =============================================================================

_seed_lock = threading.Lock()
_process_seed: int | None = None


def process_seed() -> int:
    """Return the process-wide seed, drawing it on first use."""
    global _process_seed
    with _seed_lock:
        if _process_seed is None:
            _process_seed = int(np.random.default_rng().integers(0, SEED_MASK + 1))
        return _process_seed


def set_process_seed(seed: int) -> None:
    """Pin the process-wide seed.

    Args:
        seed: Any non-negative integer. Reduced modulo 2^32.

    Raises:
        ValueError: If seed is negative.
    """
    global _process_seed
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")
    with _seed_lock:
        _process_seed = seed & SEED_MASK


def resolve_seed(seed: int | None) -> int:
    """Return seed reduced to 32 bits, or the process-wide seed if None."""
    if seed is None:
        return process_seed()
    if seed < 0:
        raise ValueError(f"Seed must be non-negative, got {seed}")
    return seed & SEED_MASK
