"""
Control Surface Generator

Derives everything the host exposes (actions, feedbacks, variables, preset
buttons) from the current registries. Nothing here is patched incrementally:
each config apply calls these functions again and replaces the old definitions.
"""
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .compositor import channels_used
from .constants import COLOR_BLACK, COLOR_GREEN, COLOR_WHITE, MAX_VALUE_16BIT, MAX_VALUE_8BIT
from .fixtures import FixtureRegistry
from .logger import get_logger
from .presets import PresetRegistry
from .registry import Registries
from .templates import TemplateRegistry
from .transient import TransientStateManager
from .utils import clamp, parse_int, slugify, split_attribute_id

logger = get_logger(__name__)

Options = Dict[str, Any]

COMPARE_OPERATORS = {
    '=': operator.eq,
    '!=': operator.ne,
    '>': operator.gt,
    '<': operator.lt,
    '>=': operator.ge,
    '<=': operator.le,
}


@dataclass
class ActionDefinition:
    """
    One invokable action.

    `callback(options)` runs on press. `subscribe(options)` returns the release
    handler for momentary actions (or None).
    """
    name: str
    options: List[dict]
    callback: Callable[[Options], Any]
    subscribe: Optional[Callable[[Options], Optional[Callable[[], Any]]]] = None

    def on_release(self, options: Options) -> Optional[Callable[[], Any]]:
        if self.subscribe is None:
            return None
        return self.subscribe(options)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'options': self.options,
            'momentary': self.subscribe is not None
        }


@dataclass
class FeedbackDefinition:
    """Boolean feedback evaluated against the live fixture values"""
    name: str
    description: str
    options: List[dict]
    callback: Callable[[Options], bool]
    type: str = 'boolean'
    default_style: dict = field(default_factory=lambda: {'bgcolor': COLOR_GREEN})

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'name': self.name,
            'description': self.description,
            'default_style': self.default_style,
            'options': self.options
        }


@dataclass
class Choices:
    """Selector lists shared by all generated actions and feedbacks"""
    fixtures: List[dict]
    attributes: List[dict]
    presets: List[dict]

    @property
    def default_fixture(self):
        return self.fixtures[0]['id']

    @property
    def default_attribute(self):
        return self.attributes[0]['id']

    @property
    def default_preset(self):
        return self.presets[0]['id']


# ----------------------------------------------------------------------
# Choices
# ----------------------------------------------------------------------

def attribute_choices(templates: TemplateRegistry) -> List[dict]:
    """Unique attribute:bits ids across all templates, first-seen order."""
    choices = []
    seen = set()
    for _, channels in templates.items():
        for channel in channels:
            if channel.attribute_id in seen:
                continue
            seen.add(channel.attribute_id)
            choices.append({'id': channel.attribute_id,
                            'label': f"{channel.attribute} ({channel.bits}-bit)"})
    if not choices:
        choices.append({'id': '', 'label': 'No attributes defined'})
    return choices


def fixture_choices(fixtures: FixtureRegistry) -> List[dict]:
    choices = [{'id': fixture.index, 'label': fixture.name} for fixture in fixtures]
    return choices or [{'id': 0, 'label': 'No fixtures defined'}]


def preset_choices(presets: PresetRegistry) -> List[dict]:
    choices = [{'id': preset.name, 'label': f"{preset.type}: {preset.name}"} for preset in presets]
    return choices or [{'id': '', 'label': 'No presets defined'}]


def derive_choices(registries: Registries) -> Choices:
    return Choices(
        fixtures=fixture_choices(registries.fixtures),
        attributes=attribute_choices(registries.templates),
        presets=preset_choices(registries.presets)
    )


# ----------------------------------------------------------------------
# Option field helpers
# ----------------------------------------------------------------------

def _fixture_option(choices: Choices) -> dict:
    return {'type': 'dropdown', 'id': 'fixture', 'label': 'Fixture',
            'default': choices.default_fixture, 'choices': choices.fixtures}


def _attribute_option(choices: Choices) -> dict:
    return {'type': 'dropdown', 'id': 'attribute', 'label': 'Attribute',
            'default': choices.default_attribute, 'choices': choices.attributes}


def _preset_option(choices: Choices, label='Preset') -> dict:
    return {'type': 'dropdown', 'id': 'preset', 'label': label,
            'default': choices.default_preset, 'choices': choices.presets}


def _number_option(option_id, label, default, minimum, maximum, bits=None, **extra) -> dict:
    option = {'type': 'number', 'id': option_id, 'label': label,
              'default': default, 'min': minimum, 'max': maximum}
    if bits is not None:
        # Only shown when the selected attribute id ends with ":<bits>"
        option['visible_for_bits'] = bits
    option.update(extra)
    return option


def _value_for_bits(options: Options, key8: str, key16: str):
    _, bits = split_attribute_id(options.get('attribute'))
    return options.get(key16) if bits == 16 else options.get(key8)


# ----------------------------------------------------------------------
# Actions
# ----------------------------------------------------------------------

def action_definitions(choices: Choices, manager: TransientStateManager) -> Dict[str, ActionDefinition]:
    """Build the action set bound to `manager`."""
    actions = {}

    actions['set_attribute'] = ActionDefinition(
        name='Set Attribute Value',
        options=[
            _fixture_option(choices),
            _attribute_option(choices),
            _number_option('value8', 'Value (0-255)', 0, 0, MAX_VALUE_8BIT, bits=8, range=True),
            _number_option('value16', 'Value (0-65535)', 0, 0, MAX_VALUE_16BIT, bits=16, range=True),
        ],
        callback=lambda options: manager.set_value(
            options.get('fixture'),
            options.get('attribute'),
            _value_for_bits(options, 'value8', 'value16')
        )
    )

    actions['set_preset'] = ActionDefinition(
        name='Set Global Preset',
        options=[_fixture_option(choices), _preset_option(choices)],
        callback=lambda options: manager.set_preset(options.get('fixture'), options.get('preset'))
    )

    actions['step_attribute'] = ActionDefinition(
        name='Step Attribute Value',
        options=[
            _fixture_option(choices),
            _attribute_option(choices),
            _number_option('step8', 'Step Amount (0-255)', 0, -MAX_VALUE_8BIT, MAX_VALUE_8BIT, bits=8),
            _number_option('step16_coarse', 'Coarse Step (changes MSB)', 0,
                           -MAX_VALUE_16BIT, MAX_VALUE_16BIT, bits=16),
            _number_option('step16_fine', 'Fine Step (changes LSB)', 0,
                           -MAX_VALUE_16BIT, MAX_VALUE_16BIT, bits=16),
        ],
        callback=lambda options: manager.step(
            options.get('fixture'),
            options.get('attribute'),
            step8=options.get('step8'),
            step16_coarse=options.get('step16_coarse'),
            step16_fine=options.get('step16_fine')
        )
    )

    actions['set_raw_channel'] = ActionDefinition(
        name='Set Raw Channel Offset',
        options=[
            _fixture_option(choices),
            _number_option('offset', 'Channel Offset (1-based)', 1, 1, 512),
            _number_option('value', 'Value (0-255)', 0, 0, MAX_VALUE_8BIT),
        ],
        callback=lambda options: manager.set_raw_channel(
            options.get('fixture'), options.get('offset'), options.get('value'))
    )

    actions['flash_attribute'] = ActionDefinition(
        name='Flash Attribute Value',
        options=[
            _fixture_option(choices),
            _attribute_option(choices),
            _number_option('value8', 'Flash Value (0-255)', MAX_VALUE_8BIT, 0, MAX_VALUE_8BIT, bits=8),
            _number_option('value16', 'Flash Value (0-65535)', MAX_VALUE_16BIT, 0, MAX_VALUE_16BIT, bits=16),
        ],
        callback=lambda options: manager.flash(
            options.get('fixture'),
            options.get('attribute'),
            _value_for_bits(options, 'value8', 'value16')
        ),
        subscribe=lambda options: (
            lambda: manager.release_flash(options.get('fixture'), options.get('attribute'))
        )
    )

    actions['toggle_attribute'] = ActionDefinition(
        name='Toggle Attribute Value',
        options=[
            _fixture_option(choices),
            _attribute_option(choices),
            _number_option('val1_8', 'Value 1 (0-255)', MAX_VALUE_8BIT, 0, MAX_VALUE_8BIT, bits=8),
            _number_option('val2_8', 'Value 2 (0-255)', 0, 0, MAX_VALUE_8BIT, bits=8),
            _number_option('val1_16', 'Value 1 (0-65535)', MAX_VALUE_16BIT, 0, MAX_VALUE_16BIT, bits=16),
            _number_option('val2_16', 'Value 2 (0-65535)', 0, 0, MAX_VALUE_16BIT, bits=16),
        ],
        callback=lambda options: manager.toggle(
            options.get('fixture'),
            options.get('attribute'),
            _value_for_bits(options, 'val1_8', 'val1_16'),
            _value_for_bits(options, 'val2_8', 'val2_16')
        )
    )

    actions['blackout_all'] = ActionDefinition(
        name='Blackout All',
        options=[],
        callback=lambda options: manager.blackout()
    )

    return actions


# ----------------------------------------------------------------------
# Feedbacks
# ----------------------------------------------------------------------

def feedback_definitions(choices: Choices, registries: Registries) -> Dict[str, FeedbackDefinition]:
    """Build the feedback set evaluated against `registries`."""

    def active_preset(options: Options) -> bool:
        fixture = registries.fixtures.get(options.get('fixture'))
        if fixture is None:
            return False
        preset = registries.presets.find(options.get('preset'))
        if preset is None:
            return False
        channel = registries.templates.find_channel(fixture.type, preset.attribute)
        if channel is None:
            return False
        # Applying a preset stores it clamped to the channel width
        return fixture.get_value(preset.attribute) == clamp(preset.value, channel.bits)

    def attribute_compare(options: Options) -> bool:
        fixture = registries.fixtures.get(options.get('fixture'))
        if fixture is None:
            return False
        compare = COMPARE_OPERATORS.get(options.get('op'))
        target = parse_int(options.get('value'))
        if compare is None or target is None:
            return False
        attribute, _ = split_attribute_id(options.get('attribute'))
        return compare(fixture.get_value(attribute), target)

    return {
        'active_preset': FeedbackDefinition(
            name='Active Preset',
            description='Change button style if a global preset is active',
            options=[_fixture_option(choices), _preset_option(choices, label='Global Preset')],
            callback=active_preset
        ),
        'attribute_compare': FeedbackDefinition(
            name='Attribute Comparison',
            description='Change style based on attribute comparison (e.g., > 50%)',
            options=[
                _fixture_option(choices),
                _attribute_option(choices),
                {'type': 'dropdown', 'id': 'op', 'label': 'Operation', 'default': '>',
                 'choices': [{'id': op, 'label': op} for op in COMPARE_OPERATORS]},
                _number_option('value', 'Value', 128, 0, MAX_VALUE_16BIT),
            ],
            callback=attribute_compare
        ),
    }


# ----------------------------------------------------------------------
# Variables
# ----------------------------------------------------------------------

def attribute_variable_id(fixture_index: int, attribute: str) -> str:
    return f"fixture_{fixture_index}_{slugify(attribute)}"


def variable_definitions(registries: Registries) -> List[dict]:
    variables = []
    for fixture in registries.fixtures:
        variables.append({'variable_id': f"fixture_{fixture.index}_name",
                          'name': f"Fixture {fixture.index} Name"})
        for channel in registries.templates.get(fixture.type) or []:
            variables.append({'variable_id': attribute_variable_id(fixture.index, channel.attribute),
                              'name': f"Fixture {fixture.index} {channel.attribute}"})

    variables.append({'variable_id': 'fixture_count_total', 'name': 'Total Fixtures'})
    variables.append({'variable_id': 'dmx_channels_used', 'name': 'DMX Channels Used'})
    return variables


def variable_values(registries: Registries) -> Dict[str, Any]:
    values = {}
    for fixture in registries.fixtures:
        values[f"fixture_{fixture.index}_name"] = fixture.name
        for channel in registries.templates.get(fixture.type) or []:
            values[attribute_variable_id(fixture.index, channel.attribute)] = fixture.get_value(channel.attribute)

    values['fixture_count_total'] = len(registries.fixtures)
    values['dmx_channels_used'] = channels_used(registries.fixtures, registries.templates)
    return values


# ----------------------------------------------------------------------
# Preset buttons
# ----------------------------------------------------------------------

def preset_definitions(registries: Registries) -> Dict[str, dict]:
    """One button per (global preset, fixture of the preset's type)."""
    presets = {}

    for preset in registries.presets:
        for fixture in registries.fixtures:
            if fixture.type != preset.type:
                continue

            channel = registries.templates.find_channel(fixture.type, preset.attribute)
            bits = channel.bits if channel else 8
            value = clamp(preset.value, bits)
            preset_id = f"fixture_{fixture.index}_preset_{slugify(preset.name)}"

            presets[preset_id] = {
                'type': 'button',
                'category': f"{fixture.name} Presets",
                'name': preset.name,
                'style': {
                    'text': f"{fixture.name}\n{preset.name}",
                    'size': '14',
                    'color': COLOR_WHITE,
                    'bgcolor': COLOR_BLACK,
                },
                'steps': [
                    {
                        'down': [
                            {
                                'action_id': 'set_attribute',
                                'options': {
                                    'fixture': fixture.index,
                                    'attribute': f"{preset.attribute}:{bits}",
                                    'value8': value if bits == 8 else 0,
                                    'value16': value if bits == 16 else 0,
                                },
                            },
                        ],
                        'up': [],
                    },
                ],
                'feedbacks': [
                    {
                        'feedback_id': 'active_preset',
                        'options': {
                            'fixture': fixture.index,
                            'preset': preset.name,
                        },
                        'style': {'bgcolor': COLOR_GREEN},
                    },
                ],
            }

    return presets
