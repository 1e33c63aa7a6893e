"""
Transient State Manager - set/step/toggle/flash semantics on top of attribute writes

Every attribute change goes through `set_attribute`, which stores the value on
the fixture and runs the commit callback (recompose, flush, feedbacks,
variables). Raw channel writes bypass the attribute model completely.
"""
from typing import Callable, Dict, Optional, Tuple

from .constants import DMX_MAX_SLOT
from .fixtures import Fixture
from .logger import get_logger
from .registry import Registries
from .templates import Channel
from .utils import clamp, parse_int, split_attribute_id

logger = get_logger(__name__)


class TransientStateManager:
    """Attribute mutations for the configured fixtures"""

    def __init__(self, commit: Callable[[], None], write_raw: Callable[[int, int], None]):
        """
        Args:
            commit: Called once after every attribute mutation (or batch)
            write_raw: Writes one value into the live DMX buffer and flushes it
        """
        self.commit = commit
        self.write_raw = write_raw
        self.registries = Registries()
        # (fixture index, attribute) -> value before the flash
        self.flash_storage: Dict[Tuple[int, str], int] = {}

    def rebuild(self, registries: Registries):
        """Switch to freshly parsed registries; pending flashes are dropped."""
        self.registries = registries
        self.flash_storage.clear()

    def _resolve(self, fixture_index, attribute) -> Tuple[Optional[Fixture], Optional[Channel]]:
        fixture = self.registries.fixtures.get(fixture_index)
        if fixture is None:
            return None, None
        channel = self.registries.templates.find_channel(fixture.type, attribute)
        return fixture, channel

    def current_value(self, fixture_index, attribute) -> int:
        fixture = self.registries.fixtures.get(fixture_index)
        return fixture.get_value(attribute) if fixture else 0

    # ------------------------------------------------------------------
    # Primitive
    # ------------------------------------------------------------------

    def set_attribute(self, fixture_index, attribute, value) -> bool:
        """
        Store a value and commit.

        Returns:
            bool: False if the fixture or attribute does not exist (no-op)
        """
        fixture, channel = self._resolve(fixture_index, attribute)
        if fixture is None or channel is None:
            logger.debug(f"Ignoring write to fixture {fixture_index!r} attribute {attribute!r}")
            return False

        fixture.values[attribute] = value
        self.commit()
        return True

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def set_value(self, fixture_index, attribute_id, value) -> bool:
        attribute, _ = split_attribute_id(attribute_id)
        value = parse_int(value)
        fixture, channel = self._resolve(fixture_index, attribute)
        if channel is None or value is None:
            return False
        return self.set_attribute(fixture.index, attribute, clamp(value, channel.bits))

    def step(self, fixture_index, attribute_id, step8=0, step16_coarse=0, step16_fine=0) -> bool:
        """Add a signed delta to the current value, clamped to the channel range."""
        attribute, bits = split_attribute_id(attribute_id)
        fixture, channel = self._resolve(fixture_index, attribute)
        if channel is None:
            return False

        # The selector decides which step fields apply, the channel decides the range
        if bits == 16:
            delta = (parse_int(step16_coarse) or 0) + (parse_int(step16_fine) or 0)
        else:
            delta = parse_int(step8) or 0

        current = fixture.get_value(attribute)
        return self.set_attribute(fixture.index, attribute, clamp(current + delta, channel.bits))

    def toggle(self, fixture_index, attribute_id, val1, val2) -> bool:
        """val2 if the attribute currently equals val1, otherwise val1."""
        attribute, _ = split_attribute_id(attribute_id)
        val1 = parse_int(val1)
        val2 = parse_int(val2)
        fixture, channel = self._resolve(fixture_index, attribute)
        if channel is None or val1 is None or val2 is None:
            return False
        val1, val2 = clamp(val1, channel.bits), clamp(val2, channel.bits)

        current = fixture.get_value(attribute)
        return self.set_attribute(fixture.index, attribute, val2 if current == val1 else val1)

    def flash(self, fixture_index, attribute_id, value) -> bool:
        """Remember the current value and jump to the flash value until release."""
        attribute, _ = split_attribute_id(attribute_id)
        value = parse_int(value)
        fixture, channel = self._resolve(fixture_index, attribute)
        if channel is None or value is None:
            return False

        self.flash_storage[(fixture.index, attribute)] = fixture.get_value(attribute)
        return self.set_attribute(fixture.index, attribute, clamp(value, channel.bits))

    def release_flash(self, fixture_index, attribute_id) -> bool:
        """Restore the pre-flash value; no-op when nothing is stashed."""
        attribute, _ = split_attribute_id(attribute_id)
        key = (parse_int(fixture_index), attribute)
        if key not in self.flash_storage:
            return False

        previous = self.flash_storage.pop(key)
        return self.set_attribute(key[0], attribute, previous)

    def set_preset(self, fixture_index, preset_name) -> bool:
        preset = self.registries.presets.find(preset_name)
        if preset is None:
            return False

        fixture, channel = self._resolve(fixture_index, preset.attribute)
        if channel is None:
            return False
        return self.set_attribute(fixture.index, preset.attribute, clamp(preset.value, channel.bits))

    def set_raw_channel(self, fixture_index, offset, value) -> bool:
        """
        Write straight into the live buffer at a fixture-relative offset (1-based).

        Attribute values are not touched; the next recompose overwrites the slot.
        """
        fixture = self.registries.fixtures.get(fixture_index)
        offset = parse_int(offset)
        value = parse_int(value)
        if fixture is None or offset is None or value is None:
            return False

        slot = (fixture.address - 1) + (offset - 1)
        if not 0 <= slot <= DMX_MAX_SLOT:
            return False
        self.write_raw(slot, value % 256)
        return True

    def blackout(self):
        """Zero every template attribute of every fixture, then commit once."""
        for fixture in self.registries.fixtures:
            channels = self.registries.templates.get(fixture.type)
            if not channels:
                continue
            for channel in channels:
                fixture.values[channel.attribute] = 0
        self.commit()
