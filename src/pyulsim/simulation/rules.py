"""Per-type simulation rules.

Each rule mutates one decoded device state in place. Neighbour statuses
are passed in by the scheduler; a rule never touches another device.
All randomness comes from a draw in ``[1, 10]``.
"""

from __future__ import annotations

from typing import Protocol

from pyulsim._constants import (
    DOOR_THRESHOLD_LAMP_OFF,
    DOOR_THRESHOLD_LAMP_ON,
    KEY_COUNT,
    KEY_LUMINOSITY,
    KEY_STATUS,
    LAMP_DIM_THRESHOLD,
    LUMINOSITY_BOOST_BELOW,
    LUMINOSITY_DEFAULT,
    LUMINOSITY_DIM_ABOVE,
    LUMINOSITY_MAX,
    LUMINOSITY_MIN,
    LUMINOSITY_STEP,
    MOTION_THRESHOLD,
    STATUS_CLOSED,
    STATUS_LOCKED,
    STATUS_OFF,
    STATUS_ON,
    STATUS_OPEN,
)


class RandomSource(Protocol):
    """The slice of :class:`random.Random` the rules need."""

    def randint(self, a: int, b: int) -> int:
        ...


def draw(rng: RandomSource) -> int:
    """Pick a random number between 1 and 10."""
    return rng.randint(1, 10)


def jitter(rng: RandomSource) -> int:
    return draw(rng) * draw(rng)


def _as_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _clamp_luminosity(value: int) -> int:
    return max(LUMINOSITY_MIN, min(LUMINOSITY_MAX, value))


def bell_tick(state: dict[str, str]) -> None:
    """Switch the bell off if it is still ringing."""
    if state.get(KEY_STATUS) == STATUS_ON:
        state[KEY_STATUS] = STATUS_OFF


def motion_tick(state: dict[str, str], door_status: str, rng: RandomSource) -> None:
    """Count people passing an open door; nobody passes a shut one."""
    if door_status != STATUS_OPEN:
        state[KEY_COUNT] = "0"
    elif state.get(KEY_COUNT) == "1":
        state[KEY_COUNT] = "0"
    else:
        state[KEY_COUNT] = "1" if draw(rng) > MOTION_THRESHOLD else "0"


def lamp_tick(state: dict[str, str], door_status: str, rng: RandomSource) -> None:
    """Brighten towards full power while the door is open, dim towards 1000 otherwise."""
    if state.get(KEY_STATUS) == STATUS_OFF:
        state[KEY_LUMINOSITY] = str(LUMINOSITY_MIN)
        return

    luminosity = _as_int(state.get(KEY_LUMINOSITY))
    if door_status == STATUS_OPEN:
        if luminosity is None:
            luminosity = LUMINOSITY_DEFAULT
        luminosity += jitter(rng)
        if luminosity < LUMINOSITY_BOOST_BELOW:
            luminosity += LUMINOSITY_STEP + jitter(rng)
        state[KEY_LUMINOSITY] = str(_clamp_luminosity(luminosity))
    elif luminosity is not None and luminosity > LUMINOSITY_DIM_ABOVE:
        if draw(rng) > LAMP_DIM_THRESHOLD:
            luminosity -= LUMINOSITY_STEP + jitter(rng)
        luminosity += draw(rng)
        state[KEY_LUMINOSITY] = str(_clamp_luminosity(luminosity))


def door_tick(state: dict[str, str], lamp_status: str, rng: RandomSource) -> None:
    """Randomly open and close an unlocked door; more traffic while the lamp is on."""
    if state.get(KEY_STATUS) == STATUS_LOCKED:
        return
    threshold = DOOR_THRESHOLD_LAMP_ON if lamp_status == STATUS_ON else DOOR_THRESHOLD_LAMP_OFF
    state[KEY_STATUS] = STATUS_OPEN if draw(rng) > threshold else STATUS_CLOSED
