"""
Test DMX frame composition
"""
import numpy as np

from artnet_fixtures.compositor import channels_used, compose
from artnet_fixtures.fixtures import Fixture, FixtureRegistry
from artnet_fixtures.templates import TemplateRegistry


def make(templates_spec, fixtures_spec):
    """templates_spec: {name: spec}; fixtures_spec: [(address, type, values)]"""
    templates = TemplateRegistry()
    for name, spec in templates_spec.items():
        templates.parse(name, spec)

    fixtures = FixtureRegistry()
    for index, (address, type, values) in enumerate(fixtures_spec, start=1):
        fixture = Fixture(index=index, address=address, name=f"F{index}", type=type)
        fixture.values.update(values)
        fixtures.add(fixture)
    return fixtures, templates


class TestCompose:

    def test_empty_frame(self):
        frame = compose(FixtureRegistry(), TemplateRegistry())

        assert frame.shape == (512,)
        assert frame.dtype == np.uint8
        assert not frame.any()

    def test_8bit_channel(self):
        fixtures, templates = make({"Par": "1:Dimmer:8"}, [(10, "Par", {"Dimmer": 200})])

        frame = compose(fixtures, templates)

        assert frame[9] == 200
        assert frame.sum() == 200

    def test_16bit_channel_msb_lsb(self):
        fixtures, templates = make({"Head": "2:Pan:16"}, [(1, "Head", {"Pan": 0x1234})])

        frame = compose(fixtures, templates)

        assert frame[1] == 0x12
        assert frame[2] == 0x34

    def test_unset_attribute_is_zero(self):
        fixtures, templates = make({"Par": "1:Dimmer, 2:Red"}, [(1, "Par", {"Dimmer": 50})])

        frame = compose(fixtures, templates)

        assert list(frame[:2]) == [50, 0]

    def test_overlap_last_write_wins(self):
        fixtures, templates = make(
            {"Par": "1:Dimmer"},
            [(5, "Par", {"Dimmer": 10}), (5, "Par", {"Dimmer": 99})]
        )

        frame = compose(fixtures, templates)

        assert frame[4] == 99

    def test_last_slot_included(self):
        fixtures, templates = make({"Par": "1:Dimmer"}, [(512, "Par", {"Dimmer": 7})])

        frame = compose(fixtures, templates)

        assert frame[511] == 7

    def test_16bit_past_end_dropped(self):
        fixtures, templates = make({"Head": "1:Pan:16"}, [(512, "Head", {"Pan": 0xFFFF})])

        frame = compose(fixtures, templates)

        assert not frame.any()

    def test_out_of_range_and_unknown_type_skipped(self):
        fixtures, templates = make(
            {"Par": "1:Dimmer, x:Broken"},
            [(0, "Par", {"Dimmer": 1}), (600, "Par", {"Dimmer": 2}), (1, "Ghost", {"Dimmer": 3})]
        )

        frame = compose(fixtures, templates)

        assert not frame.any()


class TestChannelsUsed:

    def test_none_composed(self):
        assert channels_used(FixtureRegistry(), TemplateRegistry()) == 0

    def test_highest_slot_plus_one(self, registries):
        # Spot at 11: Dimmer slot 10, Pan 11-12, Tilt 13-14
        assert channels_used(registries.fixtures, registries.templates) == 15
