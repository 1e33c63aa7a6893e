"""
Shared fixtures for the artnet-fixtures test suite
"""
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from artnet_fixtures.registry import build_registries  # noqa: E402


class FakeSender:
    """Records what the instance flushes instead of sending UDP"""

    def __init__(self, host, universe, refresh_interval_ms):
        self.host = host
        self.universe = universe
        self.refresh_interval_ms = refresh_interval_ms
        self.values = bytearray(512)
        self.transmit_count = 0
        self.stopped = False

    def transmit(self):
        self.transmit_count += 1

    def stop(self):
        self.stopped = True


@pytest.fixture
def sample_config():
    """Two templates, two fixtures, two presets"""
    return {
        'host': '10.0.0.20',
        'universe': 0,
        'templateCount': 2,
        'template_1_name': 'Dimmer',
        'template_1_channels': '1:Dimmer:8',
        'template_2_name': 'Moving Head',
        'template_2_channels': '1:Dimmer:8, 2:Pan:16, 4:Tilt:16',
        'fixtureCount': 2,
        'fixture_1_name': 'Front',
        'fixture_1_address': 1,
        'fixture_1_type': 'Dimmer',
        'fixture_2_name': 'Spot',
        'fixture_2_address': 11,
        'fixture_2_type': 'Moving Head',
        'presetCount': 2,
        'preset_1_name': 'Full',
        'preset_1_type': 'Dimmer',
        'preset_1_attribute': 'Dimmer',
        'preset_1_value': 255,
        'preset_2_name': 'Center',
        'preset_2_type': 'Moving Head',
        'preset_2_attribute': 'Pan',
        'preset_2_value': 32768,
    }


@pytest.fixture
def registries(sample_config):
    return build_registries(sample_config)


@pytest.fixture
def senders():
    """Every FakeSender created by `sender_factory`, in creation order"""
    return []


@pytest.fixture
def sender_factory(senders):
    def factory(host, universe, refresh_interval_ms):
        sender = FakeSender(host, universe, refresh_interval_ms)
        senders.append(sender)
        return sender
    return factory
