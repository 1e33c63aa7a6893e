"""
Fixture instances: a template placed at a DMX address with live attribute values
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .utils import clean_text, parse_int


@dataclass
class Fixture:
    """A placed fixture"""
    index: int                # 1-based config slot, stable across re-applies
    address: int              # DMX start address (1-512)
    name: str                 # Display name
    type: str                 # Template name (may not resolve)
    values: Dict[str, int] = field(default_factory=dict)  # attribute -> current value

    def get_value(self, attribute: str) -> int:
        return self.values.get(attribute, 0)

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'address': self.address,
            'name': self.name,
            'type': self.type,
            'values': dict(self.values)
        }

    @staticmethod
    def parse(index, name, address, type) -> Optional['Fixture']:
        """Build a fixture from one config slot; None if name, address or type is unusable."""
        name = clean_text(name)
        address = parse_int(address)
        type = clean_text(type)
        if not name or address is None or not type:
            return None
        return Fixture(index=index, address=address, name=name, type=type)


class FixtureRegistry:
    """Ordered fixtures with lookup by config index"""

    def __init__(self):
        self._fixtures: List[Fixture] = []
        self._by_index: Dict[int, Fixture] = {}

    def parse(self, index, name, address, type) -> Optional[Fixture]:
        fixture = Fixture.parse(index, name, address, type)
        if fixture is not None:
            self.add(fixture)
        return fixture

    def add(self, fixture: Fixture):
        if fixture.index in self._by_index:
            self._fixtures.remove(self._by_index[fixture.index])
        self._fixtures.append(fixture)
        self._by_index[fixture.index] = fixture

    def get(self, index) -> Optional[Fixture]:
        """Fixture for a config index, or None. Accepts ids that arrive as strings."""
        return self._by_index.get(parse_int(index))

    def __iter__(self) -> Iterator[Fixture]:
        return iter(self._fixtures)

    def __len__(self) -> int:
        return len(self._fixtures)

    def to_list(self) -> List[dict]:
        return [fixture.to_dict() for fixture in self._fixtures]
