"""
Test generated actions, feedbacks, variables and preset buttons
"""
import pytest

from artnet_fixtures.registry import build_registries
from artnet_fixtures.surface import (
    action_definitions,
    attribute_choices,
    derive_choices,
    feedback_definitions,
    fixture_choices,
    preset_definitions,
    variable_definitions,
    variable_values,
)
from artnet_fixtures.transient import TransientStateManager


@pytest.fixture
def manager(registries):
    manager = TransientStateManager(commit=lambda: None, write_raw=lambda slot, value: None)
    manager.rebuild(registries)
    return manager


@pytest.fixture
def actions(registries, manager):
    return action_definitions(derive_choices(registries), manager)


@pytest.fixture
def feedbacks(registries):
    return feedback_definitions(derive_choices(registries), registries)


class TestChoices:

    def test_attribute_ids_deduplicated(self, sample_config):
        sample_config['template_1_channels'] = '1:Dimmer:8, 2:Pan:16'
        registries = build_registries(sample_config)

        ids = [choice['id'] for choice in attribute_choices(registries.templates)]

        assert ids == ['Dimmer:8', 'Pan:16', 'Tilt:16']

    def test_same_attribute_different_width(self, sample_config):
        sample_config['template_1_channels'] = '1:Dimmer:16'
        registries = build_registries(sample_config)

        ids = [choice['id'] for choice in attribute_choices(registries.templates)]

        assert ids == ['Dimmer:16', 'Dimmer:8', 'Pan:16', 'Tilt:16']

    def test_fixture_sentinel(self):
        registries = build_registries({})

        assert fixture_choices(registries.fixtures) == [{'id': 0, 'label': 'No fixtures defined'}]

    def test_defaults_are_first_choice(self, registries):
        choices = derive_choices(registries)

        assert choices.default_fixture == 1
        assert choices.default_attribute == 'Dimmer:8'
        assert choices.default_preset == 'Full'


class TestActions:

    def test_action_set(self, actions):
        assert set(actions) == {
            'set_attribute', 'set_preset', 'step_attribute', 'set_raw_channel',
            'flash_attribute', 'toggle_attribute', 'blackout_all'
        }

    def test_only_flash_is_momentary(self, actions):
        momentary = [action_id for action_id, action in actions.items() if action.to_dict()['momentary']]
        assert momentary == ['flash_attribute']

    def test_set_attribute_picks_value_by_width(self, actions, manager):
        actions['set_attribute'].callback({'fixture': 2, 'attribute': 'Pan:16', 'value8': 1, 'value16': 5000})
        actions['set_attribute'].callback({'fixture': 2, 'attribute': 'Dimmer:8', 'value8': 77, 'value16': 5000})

        assert manager.current_value(2, 'Pan') == 5000
        assert manager.current_value(2, 'Dimmer') == 77

    def test_flash_release_handler(self, actions, manager):
        options = {'fixture': 1, 'attribute': 'Dimmer:8', 'value8': 255}

        actions['flash_attribute'].callback(options)
        assert manager.current_value(1, 'Dimmer') == 255

        release = actions['flash_attribute'].on_release(options)
        release()
        assert manager.current_value(1, 'Dimmer') == 0

    def test_non_momentary_has_no_release(self, actions):
        assert actions['set_attribute'].on_release({}) is None

    def test_bit_dependent_options_marked(self, actions):
        options = {option['id']: option for option in actions['step_attribute'].options}

        assert options['step8']['visible_for_bits'] == 8
        assert options['step16_coarse']['visible_for_bits'] == 16
        assert 'visible_for_bits' not in options['fixture']


class TestFeedbacks:

    def test_active_preset(self, feedbacks, manager):
        options = {'fixture': 1, 'preset': 'Full'}
        assert not feedbacks['active_preset'].callback(options)

        manager.set_value(1, 'Dimmer:8', 255)

        assert feedbacks['active_preset'].callback(options)

    def test_active_preset_unknown(self, feedbacks):
        assert not feedbacks['active_preset'].callback({'fixture': 9, 'preset': 'Full'})
        assert not feedbacks['active_preset'].callback({'fixture': 1, 'preset': 'Nope'})

    @pytest.mark.parametrize("op, target, expected", [
        ('>', 100, True),
        ('<', 100, False),
        ('=', 128, True),
        ('!=', 128, False),
        ('>=', 128, True),
        ('<=', 127, False),
        ('~', 1, False),
    ])
    def test_attribute_compare(self, feedbacks, manager, op, target, expected):
        manager.set_value(1, 'Dimmer:8', 128)

        result = feedbacks['attribute_compare'].callback(
            {'fixture': 1, 'attribute': 'Dimmer:8', 'op': op, 'value': target})

        assert result is expected


class TestVariables:

    def test_definitions(self, registries):
        ids = [variable['variable_id'] for variable in variable_definitions(registries)]

        assert ids == [
            'fixture_1_name', 'fixture_1_dimmer',
            'fixture_2_name', 'fixture_2_dimmer', 'fixture_2_pan', 'fixture_2_tilt',
            'fixture_count_total', 'dmx_channels_used'
        ]

    def test_values(self, registries, manager):
        manager.set_value(2, 'Pan:16', 300)

        values = variable_values(registries)

        assert values['fixture_2_name'] == 'Spot'
        assert values['fixture_2_pan'] == 300
        assert values['fixture_1_dimmer'] == 0
        assert values['fixture_count_total'] == 2
        assert values['dmx_channels_used'] == 15

    def test_empty(self):
        values = variable_values(build_registries({}))
        assert values == {'fixture_count_total': 0, 'dmx_channels_used': 0}


class TestPresetButtons:

    def test_one_button_per_matching_fixture(self, registries):
        presets = preset_definitions(registries)

        assert set(presets) == {'fixture_1_preset_full', 'fixture_2_preset_center'}

    def test_button_binds_set_attribute(self, registries):
        button = preset_definitions(registries)['fixture_2_preset_center']
        down = button['steps'][0]['down'][0]

        assert button['category'] == 'Spot Presets'
        assert down['action_id'] == 'set_attribute'
        assert down['options'] == {'fixture': 2, 'attribute': 'Pan:16', 'value8': 0, 'value16': 32768}
        assert button['feedbacks'][0]['feedback_id'] == 'active_preset'
        assert button['feedbacks'][0]['options'] == {'fixture': 2, 'preset': 'Center'}

    def test_button_press_applies_preset(self, registries, actions, manager):
        down = preset_definitions(registries)['fixture_1_preset_full']['steps'][0]['down'][0]

        actions[down['action_id']].callback(down['options'])

        assert manager.current_value(1, 'Dimmer') == 255

    def test_out_of_range_preset_lights_after_apply(self, registries, feedbacks, manager):
        # 1000 is stored as 255 on the 8-bit Dimmer
        registries.presets.parse('Hot', 'Dimmer', 'Dimmer', 1000)

        manager.set_preset(1, 'Hot')

        assert manager.current_value(1, 'Dimmer') == 255
        assert feedbacks['active_preset'].callback({'fixture': 1, 'preset': 'Hot'}) is True
