"""Explicit per-stream pseudo-random number generation for Taichi kernels.

Every random draw takes the current generator state and returns the next
state alongside the value, so each pixel (the unit of parallel work) owns an
independent stream and no random state is shared between workers. A render is
therefore deterministic for a given seed, whatever the chunking or thread
scheduling.

Streams are seeded by hashing (seed, stream index) with the Wang hash and
advanced with a 32-bit xorshift generator.

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_stream(ti.u32(7), ti.u32(0))
    ...     x, state = random_float(state)
    ...     return x
"""

import taichi as ti

# 2**-24: maps the top 24 bits of a u32 to [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def wang_hash(key: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang, 2007).

    Args:
        key: The value to hash.

    Returns:
        The hashed value.
    """
    k = key
    k = (k ^ ti.u32(61)) ^ ti.bit_shr(k, 16)
    k = k * ti.u32(9)
    k = k ^ ti.bit_shr(k, 4)
    k = k * ti.u32(0x27D4EB2D)
    k = k ^ ti.bit_shr(k, 15)
    return k


@ti.func
def seed_stream(seed: ti.u32, stream: ti.u32) -> ti.u32:
    """Derive the initial state of an independent random stream.

    Args:
        seed: The render seed.
        stream: The stream index (e.g. the linear pixel index).

    Returns:
        A non-zero generator state.
    """
    state = wang_hash(seed ^ wang_hash(stream))
    if state == ti.u32(0):
        state = ti.u32(1)
    return state


@ti.func
def next_state(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 generator by one step.

    Args:
        state: The current state (must be non-zero).

    Returns:
        The next state (non-zero).
    """
    s = state
    s = s ^ (s << 13)
    s = s ^ ti.bit_shr(s, 17)
    s = s ^ (s << 5)
    return s


@ti.func
def random_float(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple (value, new_state).
    """
    s = next_state(state)
    value = ti.cast(ti.bit_shr(s, 8), ti.f32) * _INV_2_24
    return value, s


@ti.func
def random_range(low: ti.f32, high: ti.f32, state: ti.u32):
    """Draw a uniform float in [low, high).

    Args:
        low: Lower bound (inclusive).
        high: Upper bound (exclusive).
        state: The current generator state.

    Returns:
        A tuple (value, new_state).
    """
    x, s = random_float(state)
    return low + (high - low) * x, s
