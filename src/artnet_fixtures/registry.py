"""
Registry rebuild from the flat host configuration.

The host form stores one key per field (template_1_name, fixture_3_address,
preset_2_value, ...). Every config apply rebuilds all three registries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import VALUE_POLICY_PRESERVE
from .fixtures import FixtureRegistry
from .logger import get_logger
from .presets import PresetRegistry
from .templates import TemplateRegistry
from .utils import parse_int

logger = get_logger(__name__)


@dataclass
class Registries:
    templates: TemplateRegistry = field(default_factory=TemplateRegistry)
    fixtures: FixtureRegistry = field(default_factory=FixtureRegistry)
    presets: PresetRegistry = field(default_factory=PresetRegistry)


def _count(config: Dict[str, Any], key: str, default: int) -> int:
    # A zero/blank count falls back to the default, like an untouched form field
    return parse_int(config.get(key)) or default


def build_registries(config: Optional[Dict[str, Any]],
                     previous: Optional[Registries] = None,
                     value_policy: str = VALUE_POLICY_PRESERVE) -> Registries:
    """
    Parse templates, fixtures and presets from a flat config dict.

    Args:
        config: Host configuration
        previous: Registries from the last apply
        value_policy: 'preserve' carries runtime values over to the fixture with
            the same index and type, 'reset' starts every fixture empty

    Returns:
        Registries: freshly built registries
    """
    config = config or {}
    registries = Registries()

    for i in range(1, _count(config, 'templateCount', 1) + 1):
        registries.templates.parse(
            config.get(f'template_{i}_name'),
            config.get(f'template_{i}_channels')
        )

    for i in range(1, _count(config, 'fixtureCount', 1) + 1):
        fixture = registries.fixtures.parse(
            i,
            config.get(f'fixture_{i}_name'),
            config.get(f'fixture_{i}_address'),
            config.get(f'fixture_{i}_type')
        )
        if fixture is None or previous is None or value_policy != VALUE_POLICY_PRESERVE:
            continue
        old = previous.fixtures.get(i)
        if old is not None and old.type == fixture.type:
            fixture.values.update(old.values)

    for i in range(1, _count(config, 'presetCount', 0) + 1):
        registries.presets.parse(
            config.get(f'preset_{i}_name'),
            config.get(f'preset_{i}_type'),
            config.get(f'preset_{i}_attribute'),
            config.get(f'preset_{i}_value')
        )

    logger.debug(f"Parsed {len(registries.templates)} templates, {len(registries.fixtures)} fixtures, "
                 f"{len(registries.presets)} presets.")
    return registries
