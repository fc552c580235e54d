"""Read-only nation registry and the other static presets.

The registry is loaded once at process start and passed explicitly to every
component that needs nation metadata. It is never written to and never
copied into a save.

Preset files (under presets/):
  nations.json          {CODE: {name, color, leader_name, ...}}
  roadmaps.json         {CODE: {profile, narrative_history, strategic_dilemmas,
                                historical_mistakes, milestones}}
  starting_units.json   [{name, type, nation, region, coords}]
"""

import json
import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from pax_historia.errors import NationNotFound
from pax_historia.models import Nation, Unit

logger = logging.getLogger(__name__)


class NationRegistry(Mapping[str, Nation]):
    """Immutable code → Nation mapping plus per-nation historical roadmaps."""

    def __init__(
        self,
        nations: Mapping[str, Nation],
        roadmaps: Mapping[str, Any] | None = None,
    ) -> None:
        self._nations = {code.upper(): n for code, n in nations.items()}
        self._roadmaps = dict(roadmaps or {})

    @classmethod
    def from_presets(cls, presets_dir: Path) -> "NationRegistry":
        nations_path = presets_dir / "nations.json"
        raw: dict[str, dict] = {}
        if nations_path.is_file():
            raw = json.loads(nations_path.read_text())
        else:
            logger.warning(f"No nation registry at {nations_path}; starting empty")
        nations = {
            code.upper(): Nation.model_validate({"code": code.upper(), **entry})
            for code, entry in raw.items()
        }
        roadmaps_path = presets_dir / "roadmaps.json"
        roadmaps = json.loads(roadmaps_path.read_text()) if roadmaps_path.is_file() else {}
        return cls(nations, roadmaps)

    def __getitem__(self, code: str) -> Nation:
        return self._nations[code.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nations)

    def __len__(self) -> int:
        return len(self._nations)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self._nations

    def require(self, code: str) -> Nation:
        """Return the nation for ``code`` or raise ``NationNotFound``."""
        nation = self._nations.get(code.upper())
        if nation is None:
            raise NationNotFound(code)
        return nation

    def major_powers(self) -> list[Nation]:
        return [n for n in self._nations.values() if n.is_major_power]

    def sorted_for_display(self) -> list[Nation]:
        """Major powers first, then alphabetical by name."""
        return sorted(self._nations.values(), key=lambda n: (not n.is_major_power, n.name))

    def name_of(self, code: str) -> str:
        nation = self._nations.get(code.upper())
        return nation.name if nation else code

    def roadmap_context(self, code: str) -> str:
        """Render the historical roadmap of a nation as prompt text."""
        data = self._roadmaps.get(code.upper())
        if not data:
            return (
                f"No specific milestones are archived for {code}. "
                "Keep a realistic tone consistent with the 1935-1945 period."
            )
        if isinstance(data, list):
            return "\n".join(str(item) for item in data)

        parts = [f"--- NATIONAL PROFILE AND HISTORY ({code.upper()}) ---"]
        parts.append(f"PROFILE: {data.get('profile') or 'None'}")
        if data.get("narrative_history"):
            parts.append(f"NATIONAL HISTORY AND PSYCHE:\n{data['narrative_history']}")
        for key, heading in (
            ("strategic_dilemmas", "STRATEGIC DILEMMAS"),
            ("historical_mistakes", "HISTORICAL MISTAKES TO AVOID"),
            ("milestones", "CHRONOLOGICAL ROADMAP"),
        ):
            items = data.get(key) or []
            if items:
                parts.append(f"{heading}:\n- " + "\n- ".join(items))
        return "\n\n".join(parts)


def load_starting_units(presets_dir: Path, created_at: str) -> list[Unit]:
    """Build the seeded unit roster for a new game."""
    path = presets_dir / "starting_units.json"
    if not path.is_file():
        return []
    units = []
    for entry in json.loads(path.read_text()):
        units.append(Unit(
            name=entry["name"],
            unit_type=entry["type"],
            nation_code=entry["nation"].upper(),
            region_id=entry["region"],
            centroid=entry.get("coords"),
            created_at=created_at,
        ))
    return units
