"""
Buffer Compositor - builds the 512-slot DMX frame from fixtures and templates

The frame is recomputed from scratch on every attribute change. Later
fixtures/channels overwrite earlier ones on shared slots. Channels that do
not fit inside the universe are dropped as a whole.
"""
from typing import Iterable, Iterator, Tuple

import numpy as np

from .constants import DMX_MAX_SLOT, DMX_UNIVERSE_SIZE
from .fixtures import Fixture
from .templates import Channel, TemplateRegistry


def new_frame() -> np.ndarray:
    return np.zeros(DMX_UNIVERSE_SIZE, dtype=np.uint8)


def iter_composed_channels(fixtures: Iterable[Fixture],
                           templates: TemplateRegistry) -> Iterator[Tuple[Fixture, Channel, int]]:
    """
    Yield (fixture, channel, slot) for every channel that lands inside the universe.

    Fixtures whose type has no template and channels whose slot range falls
    outside [0, 511] are skipped.
    """
    for fixture in fixtures:
        channels = templates.get(fixture.type)
        if not channels:
            continue

        for channel in channels:
            slot = channel.slot(fixture.address)
            if slot is None:
                continue
            last = slot + channel.width - 1
            if slot < 0 or last > DMX_MAX_SLOT:
                continue
            yield fixture, channel, slot


def compose(fixtures: Iterable[Fixture], templates: TemplateRegistry) -> np.ndarray:
    """
    Compose the full DMX frame.

    Args:
        fixtures: Fixtures in registry order
        templates: Template registry

    Returns:
        np.ndarray: 512 uint8 slot values
    """
    frame = new_frame()
    for fixture, channel, slot in iter_composed_channels(fixtures, templates):
        value = fixture.get_value(channel.attribute)
        if channel.bits == 16:
            frame[slot] = (value >> 8) & 0xFF
            frame[slot + 1] = value & 0xFF
        else:
            frame[slot] = value & 0xFF
    return frame


def channels_used(fixtures: Iterable[Fixture], templates: TemplateRegistry) -> int:
    """One more than the highest slot written by any composed channel (0 if none)."""
    highest = -1
    for _, channel, slot in iter_composed_channels(fixtures, templates):
        highest = max(highest, slot + channel.width - 1)
    return highest + 1
