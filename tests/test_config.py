"""
Test config validation, the config form and config file loading
"""
import json
import logging

import pytest

from artnet_fixtures.config_fields import get_config_fields
from artnet_fixtures.config_schema import ConfigValidator, validate_config_file
from artnet_fixtures.logger import FixtureLogger, parse_log_level
from artnet_fixtures.main import load_config


@pytest.fixture
def validator():
    return ConfigValidator()


class TestConfigValidator:

    def test_default_config_valid(self, validator):
        is_valid, errors = validator.validate(validator.get_default_config())

        assert is_valid, errors

    def test_instance_section_required(self, validator):
        is_valid, errors = validator.validate({'api': {'port': 5000}})

        assert not is_valid
        assert any('instance' in error for error in errors)

    def test_sample_instance_valid(self, validator, sample_config):
        assert validator.validate_instance(sample_config) == (True, [])

    def test_address_as_text_allowed(self, validator, sample_config):
        sample_config['fixture_1_address'] = '17'
        is_valid, _ = validator.validate_instance(sample_config)
        assert is_valid

    @pytest.mark.parametrize("key, value", [
        ('universe', 40000),
        ('universe', -1),
        ('fixtureCount', 101),
        ('templateCount', 0),
        ('value_policy', 'sometimes'),
        ('template_1_channels', 5),
        ('host', '10.0.0'),
        ('host', '10.0.0.256'),
    ])
    def test_invalid_instance(self, validator, sample_config, key, value):
        sample_config[key] = value

        is_valid, errors = validator.validate_instance(sample_config)

        assert not is_valid
        assert errors

    def test_empty_host_allowed(self, validator, sample_config):
        # A blank host is a runtime BadConfig state, not a schema error
        sample_config['host'] = ''
        assert validator.validate_instance(sample_config)[0]


class TestConfigFile:

    def test_missing_file(self, tmp_path):
        is_valid, errors, config = validate_config_file(str(tmp_path / 'missing.json'))

        assert not is_valid
        assert 'not found' in errors[0]
        assert config == {}

    def test_broken_json(self, tmp_path):
        path = tmp_path / 'config.json'
        path.write_text('{"instance": ', encoding='utf-8')

        is_valid, errors, _ = validate_config_file(str(path))

        assert not is_valid
        assert 'JSON parse error' in errors[0]

    def test_load_config_falls_back_to_defaults(self, tmp_path):
        config = load_config(str(tmp_path / 'missing.json'))

        assert config == ConfigValidator().get_default_config()

    def test_load_config(self, tmp_path, sample_config):
        path = tmp_path / 'config.json'
        path.write_text(json.dumps({'instance': sample_config}), encoding='utf-8')

        config = load_config(str(path))

        assert config['instance']['fixture_2_name'] == 'Spot'


class TestConfigFields:

    def test_minimal_form(self):
        ids = [field['id'] for field in get_config_fields({})]

        assert ids[:6] == ['info', 'templateCount', 'fixtureCount', 'presetCount', 'host', 'universe']
        assert 'template_1_channels' in ids
        assert 'fixture_1_type' in ids
        assert not any(field_id.startswith('preset_1') for field_id in ids)

    def test_template_choices_from_names(self, sample_config):
        fields = {field['id']: field for field in get_config_fields(sample_config)}

        choices = fields['fixture_1_type']['choices']
        assert [choice['id'] for choice in choices] == ['Dimmer', 'Moving Head']
        assert fields['preset_2_type']['default'] == 'Dimmer'

    def test_unnamed_template_placeholder(self):
        fields = {field['id']: field for field in get_config_fields({'templateCount': 2})}

        assert [c['id'] for c in fields['fixture_1_type']['choices']] == ['Type 1', 'Type 2']

    def test_address_defaults_spaced(self):
        fields = {field['id']: field for field in get_config_fields({'fixtureCount': 3})}

        assert fields['fixture_3_address']['default'] == 21

    def test_counts_capped(self):
        ids = [field['id'] for field in get_config_fields({'templateCount': 50})]

        assert 'template_10_name' in ids
        assert 'template_11_name' not in ids


class TestLogging:

    def test_parse_log_level(self):
        assert parse_log_level('debug') == logging.DEBUG
        assert parse_log_level('ERROR') == logging.ERROR
        assert parse_log_level('loud') == logging.WARNING
        assert parse_log_level(None, default=logging.INFO) == logging.INFO

    def test_singleton(self):
        assert FixtureLogger() is FixtureLogger()

    def test_cleanup_old_logs(self, tmp_path):
        for i in range(5):
            (tmp_path / f'artnet_fixtures_2024010{i}_000000.log').write_text('x')
        (tmp_path / 'other.log').write_text('x')

        FixtureLogger()._cleanup_old_logs(tmp_path, max_files=2)

        remaining = sorted(p.name for p in tmp_path.iterdir())
        assert len([name for name in remaining if name.startswith('artnet_fixtures_')]) == 2
        assert 'other.log' in remaining
