"""
Global presets: named (template, attribute, value) shortcuts
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from .utils import clean_text, parse_int


@dataclass(frozen=True)
class Preset:
    name: str
    type: str         # Template name the preset applies to
    attribute: str
    value: int

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'type': self.type,
            'attribute': self.attribute,
            'value': self.value
        }


class PresetRegistry:
    """Presets in config order, looked up by exact name"""

    def __init__(self):
        self._presets: List[Preset] = []

    def parse(self, name, type, attribute, value) -> Optional[Preset]:
        name = clean_text(name)
        type = clean_text(type)
        attribute = clean_text(attribute)
        value = parse_int(value)
        if not name or not type or not attribute or value is None:
            return None

        preset = Preset(name=name, type=type, attribute=attribute, value=value)
        self._presets.append(preset)
        return preset

    def find(self, name) -> Optional[Preset]:
        """First preset with exactly this name"""
        for preset in self._presets:
            if preset.name == name:
                return preset
        return None

    def __iter__(self) -> Iterator[Preset]:
        return iter(self._presets)

    def __len__(self) -> int:
        return len(self._presets)

    def to_list(self) -> List[dict]:
        return [preset.to_dict() for preset in self._presets]
