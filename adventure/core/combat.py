from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum

from adventure.assets.registry import Weapon
from adventure.core.randomizer import Randomizer


class ActionKind(StrEnum):
    # Values double as the trigger ids of the encounter controls.
    attack = "attack"
    dodge = "dodge"


@dataclass(frozen=True, slots=True)
class RollOutcome:
    roll: int
    success: bool


@dataclass(frozen=True, slots=True)
class RollFrame:
    enemy_roll: int
    roll: int
    is_final: bool


def roll_max(kind: ActionKind, weapon: Weapon) -> int:
    return weapon.attack_max if kind is ActionKind.attack else weapon.dodge_max


def beats(player_roll: int, enemy_roll: int) -> bool:
    # Ties go to the enemy.
    return player_roll > enemy_roll


class CombatResolver:
    """Rolls for the player and decides success. Never touches session state.

    `preview` only feeds the cosmetic roll animation; it defaults to the main randomizer.
    """

    def __init__(self, randomizer: Randomizer, *, preview: Randomizer | None = None) -> None:
        self.randomizer = randomizer
        self.preview = preview or randomizer

    def resolve_action(self, kind: ActionKind, weapon: Weapon, enemy_roll: int) -> RollOutcome:
        player_roll = self.randomizer.int_in_range(roll_max(kind, weapon))
        return RollOutcome(roll=player_roll, success=beats(player_roll, enemy_roll))

    def animated_roll_preview(
        self,
        enemy_roll: int,
        max_roll: int,
        player_roll: int,
        steps: int = 10,
    ) -> Iterator[RollFrame]:
        """Yield `steps` throwaway previews, then the real roll (`steps + 1` frames total)."""

        for _ in range(steps):
            yield RollFrame(enemy_roll=enemy_roll, roll=self.preview.int_in_range(max_roll), is_final=False)
        yield RollFrame(enemy_roll=enemy_roll, roll=player_roll, is_final=True)
