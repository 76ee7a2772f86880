from __future__ import annotations

from dataclasses import dataclass

from adventure.assets.registry import Catalog, Enemy, Weapon

STARTING_HIT_POINTS = 3


@dataclass(slots=True)
class SessionState:
    """One run, from weapon choice to death. Owned by a single GameLoop."""

    player_name: str
    weapon: Weapon
    hit_points: int = STARTING_HIT_POINTS
    score: int = 0
    enemy_index: int = 0

    @property
    def is_alive(self) -> bool:
        return self.hit_points > 0

    def current_enemy(self, catalog: Catalog) -> Enemy:
        return catalog.enemy_at(self.enemy_index)

    def record_defeat(self, enemy: Enemy) -> None:
        self.score += enemy.score_value
        self.enemy_index += 1

    def take_hit(self) -> None:
        if self.hit_points > 0:
            self.hit_points -= 1
