"""Ultralight 2.0 text codec.

Ultralight is a series of pipe separated key/value pairs, where each key
and value are in turn separated by a pipe character::

    s|ON|l|1000   <->   {"s": "ON", "l": "1000"}

Commands sent southbound use the same format with an ``@`` separating the
echoed value from the actuation verb (``door001@open``).
"""

from __future__ import annotations

from collections.abc import Mapping

from pyulsim._constants import COMMAND_SEPARATOR, PAIR_SEPARATOR
from pyulsim.exceptions import UlMalformedProtocolError


def decode(raw: str) -> dict[str, str]:
    """Decode an Ultralight string into an ordered ``{key: value}`` dict.

    Raises :class:`UlMalformedProtocolError` when the token count is odd.
    """
    if raw == "":
        return {}
    tokens = raw.split(PAIR_SEPARATOR)
    if len(tokens) % 2:
        raise UlMalformedProtocolError(
            f"Ultralight payload has an odd token count ({len(tokens)}): {raw[:64]!r}",
            raw=raw,
        )
    state: dict[str, str] = {}
    for index in range(0, len(tokens), 2):
        state[tokens[index]] = tokens[index + 1]
    return state


def encode(state: Mapping[str, object]) -> str:
    """Encode a mapping into an Ultralight string, preserving key order."""
    return PAIR_SEPARATOR.join(f"{key}{PAIR_SEPARATOR}{value}" for key, value in state.items())


def parse_command(field: str) -> tuple[str, str]:
    """Split ``value@command`` into ``(value, command)``.

    A field without ``@`` yields an empty command. Anything after a second
    ``@`` is ignored.
    """
    parts = field.split(COMMAND_SEPARATOR)
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]


def command_field(body: str) -> str:
    """Return the leading command field of a southbound request body."""
    return body.split(PAIR_SEPARATOR, 1)[0]
