from __future__ import annotations

import json
import logging
import random
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .settings import settings

logger = logging.getLogger(__name__)

DEFAULT_THEMES_PATH = Path(__file__).resolve().parent / "data" / "planet_themes.json"
UNKNOWN_PLANET = "Unknown"
_TERM_FILLERS = ("Term1", "Term2", "Term3")


class PlanetThemes:
	"""Planet names plus description templates keyed by lesson category.

	Instances are treated as read-only; anything consumed during a sequencing
	run lives in a PlanetPool created from them.
	"""

	def __init__(self, planets: Sequence[str], descriptions: Dict[str, Sequence[str]]) -> None:
		self.planets = tuple(planets)
		self.descriptions = {category: tuple(templates) for category, templates in descriptions.items()}

	@classmethod
	def from_dict(cls, data: Dict) -> "PlanetThemes":
		return cls(data.get("planets") or [], data.get("descriptions") or {})

	def fresh_pool(self, rng: random.Random) -> "PlanetPool":
		names = list(self.planets)
		rng.shuffle(names)
		return PlanetPool(names)

	def random_template(self, category: str, rng: random.Random) -> str:
		templates = self.descriptions.get(category) or ()
		if not templates:
			return ""
		return templates[rng.randrange(len(templates))]


class PlanetPool:
	def __init__(self, names: List[str]) -> None:
		self._names = names

	def __len__(self) -> int:
		return len(self._names)

	def pop(self) -> str:
		if not self._names:
			logger.warning("planet pool exhausted, using placeholder name")
			return UNKNOWN_PLANET
		return self._names.pop()


def build_planet_description(
	themes: PlanetThemes,
	category: str,
	planet: str,
	terms: Sequence[str],
	rng: random.Random,
) -> str:
	text = themes.random_template(category, rng)
	text = text.replace("{planet}", planet, 1)
	for idx, filler in enumerate(_TERM_FILLERS):
		value = terms[idx] if idx < len(terms) and terms[idx] else filler
		text = text.replace("{term%d}" % (idx + 1), value, 1)
	return text


@lru_cache(maxsize=4)
def _load_themes(path: str) -> PlanetThemes:
	with open(path, encoding="utf-8") as fh:
		return PlanetThemes.from_dict(json.load(fh))


def load_planet_themes(path: Optional[str] = None) -> PlanetThemes:
	return _load_themes(str(path or settings.planet_themes_path or DEFAULT_THEMES_PATH))
