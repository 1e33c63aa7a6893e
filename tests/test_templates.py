"""
Test template parsing and the shared parsing helpers
"""
import pytest

from artnet_fixtures.templates import Channel, TemplateRegistry, parse_channel_spec
from artnet_fixtures.utils import clamp, parse_int, slugify, split_attribute_id


class TestParseInt:
    """Leading-integer parsing of form values"""

    @pytest.mark.parametrize("raw, expected", [
        ("12", 12),
        (" 7abc", 7),
        ("-5", -5),
        (3.9, 3),
        (42, 42),
        ("abc", None),
        ("", None),
        (None, None),
        (True, None),
    ])
    def test_values(self, raw, expected):
        assert parse_int(raw) == expected


class TestHelpers:

    def test_clamp_8bit(self):
        assert clamp(300, 8) == 255
        assert clamp(-4, 8) == 0

    def test_clamp_16bit(self):
        assert clamp(70000, 16) == 65535
        assert clamp(300, 16) == 300

    def test_split_attribute_id(self):
        assert split_attribute_id("Pan:16") == ("Pan", 16)
        assert split_attribute_id("Dimmer:8") == ("Dimmer", 8)
        # Missing or unknown width falls back to 8 bit
        assert split_attribute_id("Dimmer") == ("Dimmer", 8)
        assert split_attribute_id(None) == ("", 8)

    def test_slugify(self):
        assert slugify("Color Wheel") == "color_wheel"


class TestParseChannelSpec:
    """Channel spec text -> Channel list"""

    def test_basic_spec(self):
        channels = parse_channel_spec("1:Dimmer:8, 2:Pan:16, 4:Tilt")

        assert channels == [
            Channel(1, "Dimmer", 8),
            Channel(2, "Pan", 16),
            Channel(4, "Tilt", 8),
        ]

    def test_malformed_segments_dropped(self):
        channels = parse_channel_spec("1:Dimmer, bogus, 3, ")

        assert len(channels) == 1
        assert channels[0].attribute == "Dimmer"

    def test_unknown_bits_treated_as_8(self):
        assert parse_channel_spec("1:Dimmer:12")[0].bits == 8
        assert parse_channel_spec("1:Dimmer:abc")[0].bits == 8

    def test_unparsable_offset_kept_without_slot(self):
        channels = parse_channel_spec("x:Dimmer:8")

        assert len(channels) == 1
        assert channels[0].offset is None
        assert channels[0].slot(1) is None

    def test_whitespace_trimmed(self):
        channel = parse_channel_spec("  3 :  Color  : 16 ")[0]
        assert channel == Channel(3, "Color", 16)

    def test_channel_geometry(self):
        pan = Channel(2, "Pan", 16)
        assert pan.attribute_id == "Pan:16"
        assert pan.width == 2
        # Fixture at address 11 -> 0-based slot 11
        assert pan.slot(11) == 11


class TestTemplateRegistry:

    @pytest.fixture
    def templates(self):
        return TemplateRegistry()

    def test_blank_name_or_spec_skipped(self, templates):
        assert templates.parse("", "1:Dimmer") is None
        assert templates.parse("Par", "   ") is None
        assert len(templates) == 0

    def test_duplicate_name_replaces(self, templates):
        templates.parse("Par", "1:Dimmer")
        templates.parse("Par", "1:Red, 2:Green, 3:Blue")

        assert len(templates) == 1
        assert [c.attribute for c in templates.get("Par")] == ["Red", "Green", "Blue"]

    def test_find_channel_first_match(self, templates):
        templates.parse("Odd", "1:Dimmer:8, 5:Dimmer:16")

        channel = templates.find_channel("Odd", "Dimmer")
        assert channel.offset == 1
        assert templates.find_channel("Odd", "Pan") is None
        assert templates.find_channel("Missing", "Dimmer") is None

    def test_to_dict(self, templates):
        templates.parse("Par", "1:Dimmer")

        assert "Par" in templates
        assert templates.to_dict() == {"Par": [{"offset": 1, "attribute": "Dimmer", "bits": 8}]}
