"""
Fixture Templates

Contains the channel layout data model:
- Channel: One attribute at a relative offset (8 or 16 bit)
- TemplateRegistry: Named channel layouts parsed from config text
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .constants import DEFAULT_BITS
from .logger import get_logger
from .utils import clean_text, parse_int

logger = get_logger(__name__)


@dataclass(frozen=True)
class Channel:
    """One attribute inside a template"""
    offset: Optional[int]    # 1-based offset from the fixture address (None = unparsable)
    attribute: str           # Logical name, e.g. "Dimmer"
    bits: int = DEFAULT_BITS  # 8 or 16

    @property
    def attribute_id(self) -> str:
        """Selector id shared by all templates using this attribute/width"""
        return f"{self.attribute}:{self.bits}"

    @property
    def width(self) -> int:
        """Number of DMX slots occupied"""
        return 2 if self.bits == 16 else 1

    def slot(self, address: int) -> Optional[int]:
        """Absolute 0-based slot for a fixture at `address`, None if undefined."""
        if self.offset is None or address is None:
            return None
        return (address - 1) + (self.offset - 1)

    def to_dict(self) -> dict:
        return {
            'offset': self.offset,
            'attribute': self.attribute,
            'bits': self.bits
        }


def parse_channel_spec(spec: str) -> List[Channel]:
    """
    Parse a channel spec like "1:Dimmer:8, 2:Pan:16, 4:Tilt".

    Segments with fewer than two colon-parts are dropped. Bits default to 8;
    anything other than 16 is treated as 8.
    """
    channels = []
    for segment in clean_text(spec).split(','):
        parts = [part.strip() for part in segment.strip().split(':')]
        if len(parts) < 2:
            continue

        bits = parse_int(parts[2]) if len(parts) > 2 else None
        channels.append(Channel(
            offset=parse_int(parts[0]),
            attribute=parts[1],
            bits=16 if bits == 16 else DEFAULT_BITS
        ))
    return channels


class TemplateRegistry:
    """Template name -> ordered channel list"""

    def __init__(self):
        self._templates: Dict[str, List[Channel]] = {}

    def parse(self, name, channel_spec) -> Optional[List[Channel]]:
        """
        Parse and register one template slot.

        Blank name or spec registers nothing. A repeated name replaces the
        earlier channel list.
        """
        name = clean_text(name)
        if not name or not clean_text(channel_spec):
            return None

        channels = parse_channel_spec(channel_spec)
        self._templates[name] = channels
        return channels

    def get(self, name) -> Optional[List[Channel]]:
        return self._templates.get(name)

    def find_channel(self, name, attribute) -> Optional[Channel]:
        """First channel of template `name` carrying `attribute`"""
        for channel in self._templates.get(name) or []:
            if channel.attribute == attribute:
                return channel
        return None

    def names(self) -> List[str]:
        return list(self._templates.keys())

    def items(self) -> Iterator[Tuple[str, List[Channel]]]:
        return iter(self._templates.items())

    def __contains__(self, name) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def to_dict(self) -> dict:
        return {
            name: [channel.to_dict() for channel in channels]
            for name, channels in self._templates.items()
        }
