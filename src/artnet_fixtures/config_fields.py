"""
Host configuration form.

The form is dynamic: the number of template, fixture and preset groups
follows the counts saved in the current config, so the user sets the counts,
saves, and then gets the individual inputs.
"""
from typing import Any, Dict, List

from .constants import (
    DEFAULT_HOST,
    FIXTURE_ADDRESS_SPACING,
    MAX_FIXTURES,
    MAX_PRESETS,
    MAX_TEMPLATES,
    MAX_UNIVERSE,
    MAX_VALUE_16BIT,
    MAX_VALUE_8BIT,
)
from .utils import parse_int

USAGE_INFO = """
    <strong>Dynamic Configuration:</strong><br>
    1. Set the Counts below.<br>
    2. Click <strong>Save</strong> to see the individual input fields.<br>
    3. Define <strong>Templates</strong> (fixture types) first, then assign them to <strong>Fixtures</strong>.<br>
    4. Global Presets can be defined once and applied to any fixture of that type.
"""


def _header(field_id, value) -> dict:
    return {'type': 'static-text', 'id': field_id, 'width': 12, 'label': '', 'value': value}


def _template_fields(i) -> List[dict]:
    return [
        _header(f'template_{i}_header', f'<hr><strong>Template {i}</strong>'),
        {'type': 'textinput', 'id': f'template_{i}_name', 'label': 'Template Name',
         'width': 6, 'default': f'Type {i}'},
        {'type': 'textinput', 'id': f'template_{i}_channels', 'label': 'Channels (offset:attribute:bits, ...)',
         'description': 'Example: 1:Dimmer:8, 2:Pan:16, 4:Tilt:16', 'width': 6, 'default': '1:Dimmer:8'},
    ]


def _fixture_fields(i, template_choices) -> List[dict]:
    return [
        _header(f'fixture_{i}_header', f'<hr><strong>Fixture {i}</strong>'),
        {'type': 'textinput', 'id': f'fixture_{i}_name', 'label': 'Name', 'width': 4, 'default': f'Fixture {i}'},
        {'type': 'number', 'id': f'fixture_{i}_address', 'label': 'DMX Address', 'width': 4,
         'min': 1, 'max': 512, 'default': 1 + (i - 1) * FIXTURE_ADDRESS_SPACING},
        {'type': 'dropdown', 'id': f'fixture_{i}_type', 'label': 'Fixture Type', 'width': 4,
         'choices': template_choices, 'default': template_choices[0]['id'] if template_choices else ''},
    ]


def _preset_fields(i, template_choices) -> List[dict]:
    return [
        _header(f'preset_{i}_header', f'<hr><strong>Global Preset {i}</strong>'),
        {'type': 'textinput', 'id': f'preset_{i}_name', 'label': 'Preset Name', 'width': 3, 'default': f'Preset {i}'},
        {'type': 'dropdown', 'id': f'preset_{i}_type', 'label': 'Applicable to Type', 'width': 3,
         'choices': template_choices, 'default': template_choices[0]['id'] if template_choices else ''},
        {'type': 'textinput', 'id': f'preset_{i}_attribute', 'label': 'Attribute', 'width': 3, 'default': 'Dimmer'},
        {'type': 'number', 'id': f'preset_{i}_value', 'label': 'Value', 'width': 3,
         'min': 0, 'max': MAX_VALUE_16BIT, 'default': MAX_VALUE_8BIT},
    ]


def get_config_fields(config: Dict[str, Any] = None) -> List[dict]:
    """
    Render the configuration form for the current config.

    Args:
        config: Currently saved configuration (counts decide how many groups are shown)

    Returns:
        List[dict]: Form field descriptors
    """
    config = config or {}
    template_count = min(parse_int(config.get('templateCount')) or 1, MAX_TEMPLATES)
    fixture_count = min(parse_int(config.get('fixtureCount')) or 1, MAX_FIXTURES)
    preset_count = min(parse_int(config.get('presetCount')) or 0, MAX_PRESETS)

    fields = [
        {'type': 'static-text', 'id': 'info', 'width': 12, 'label': 'Usage Info', 'value': USAGE_INFO},
        {'type': 'number', 'id': 'templateCount', 'label': 'Number of Templates',
         'default': 1, 'min': 1, 'max': MAX_TEMPLATES, 'width': 4},
        {'type': 'number', 'id': 'fixtureCount', 'label': 'Number of Fixtures',
         'default': 1, 'min': 1, 'max': MAX_FIXTURES, 'width': 4},
        {'type': 'number', 'id': 'presetCount', 'label': 'Number of Global Presets',
         'default': 0, 'min': 0, 'max': MAX_PRESETS, 'width': 4},
        {'type': 'textinput', 'id': 'host', 'label': 'Target Host',
         'description': 'The IP address of your Art-Net node.', 'width': 8, 'default': DEFAULT_HOST},
        {'type': 'number', 'id': 'universe', 'label': 'Universe',
         'description': f'The Art-Net universe to send to (0-{MAX_UNIVERSE}).', 'width': 4,
         'min': 0, 'max': MAX_UNIVERSE, 'default': 0},
        _header('template_section_header',
                '<br><h2>1. Define Templates</h2><p>Define your fixture types here. Example: A "Generic RGB" '
                'template might have channels <code>1:Red:8, 2:Green:8, 3:Blue:8</code>.</p>'),
    ]

    for i in range(1, template_count + 1):
        fields.extend(_template_fields(i))

    template_choices = []
    for i in range(1, template_count + 1):
        name = config.get(f'template_{i}_name') or f'Type {i}'
        template_choices.append({'id': name, 'label': name})

    fields.append(_header('fixture_section_header',
                          '<br><h2>2. Assign Fixtures</h2><p>Create instances of your templates at '
                          'specific DMX addresses.</p>'))
    for i in range(1, fixture_count + 1):
        fields.extend(_fixture_fields(i, template_choices))

    fields.append(_header('preset_section_header',
                          '<br><h2>3. Global Presets</h2><p>Define common values (like "Color Blue" or '
                          '"Strobe Fast") that can be applied to any fixture of a specific type. These will '
                          'also appear as buttons in the Presets tab.</p>'))
    for i in range(1, preset_count + 1):
        fields.extend(_preset_fields(i, template_choices))

    return fields
