"""Hardcoded what-if presets — configuration only."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ScenarioPreset:
    id: str
    label: str
    description: str
    deltas: tuple[float, ...] = field(default_factory=tuple)


PRESETS: dict[str, ScenarioPreset] = {
    "boost": ScenarioPreset(
        id="boost",
        label="Boost",
        description="Contribute $50 or $100 more each month.",
        deltas=(50.0, 100.0),
    ),
    "precision": ScenarioPreset(
        id="precision",
        label="Precision Adjustments",
        description="Small changes: $25 more, $25 less, $50 more per month.",
        deltas=(25.0, -25.0, 50.0),
    ),
}


def list_presets() -> list[ScenarioPreset]:
    return list(PRESETS.values())


def get_preset(preset_id: str) -> ScenarioPreset | None:
    return PRESETS.get(preset_id)
