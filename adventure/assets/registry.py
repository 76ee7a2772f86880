from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Weapon:
    name: str
    attack_max: int
    dodge_max: int


@dataclass(frozen=True, slots=True)
class Enemy:
    name: str
    strength: int
    score_value: int


@dataclass(frozen=True, slots=True)
class Catalog:
    """Weapons and enemies supplied at startup.

    Order is significant: weapon controls map to the literal catalog position, and
    enemies are met in catalog order, wrapping around forever.
    """

    weapons: tuple[Weapon, ...]
    enemies: tuple[Enemy, ...]

    def __post_init__(self) -> None:
        if not self.weapons:
            raise AssetLoadError("Catalog needs at least one weapon")
        if not self.enemies:
            raise AssetLoadError("Catalog needs at least one enemy")
        for w in self.weapons:
            if w.attack_max <= 0 or w.dodge_max <= 0:
                raise AssetLoadError(f"Weapon stats must be positive: {w.name}")
        for e in self.enemies:
            if e.strength <= 0 or e.score_value <= 0:
                raise AssetLoadError(f"Enemy stats must be positive: {e.name}")

    def enemy_at(self, index: int) -> Enemy:
        return self.enemies[index % len(self.enemies)]


class AssetLoadError(RuntimeError):
    pass


def _read_csv_rows(path: Path) -> list[list[str]]:
    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            rows = [[c.strip() for c in row] for row in csv.reader(f)]
    except FileNotFoundError as e:
        raise AssetLoadError(f"Asset file not found: {path}") from e

    return [row for row in rows if any(row)]


def _positive_int(value: str, *, path: Path, column: str) -> int:
    try:
        n = int(value)
    except ValueError as e:
        raise AssetLoadError(f"{path}: {column} must be an integer, got {value!r}") from e
    if n <= 0:
        raise AssetLoadError(f"{path}: {column} must be > 0, got {n}")
    return n


def _data_rows(path: Path, expected_header: list[str]) -> list[list[str]]:
    rows = _read_csv_rows(path)
    if not rows:
        raise AssetLoadError(f"Empty CSV: {path}")

    header = [c.casefold() for c in rows[0]]
    if header[: len(expected_header)] != expected_header:
        raise AssetLoadError(f"Unexpected header in {path}: {rows[0]}")

    return [row for row in rows[1:] if len(row) >= len(expected_header) and row[0]]


def load_weapons_csv(path: Path) -> tuple[Weapon, ...]:
    out = [
        Weapon(
            name=row[0],
            attack_max=_positive_int(row[1], path=path, column="attack"),
            dodge_max=_positive_int(row[2], path=path, column="dodge"),
        )
        for row in _data_rows(path, ["name", "attack", "dodge"])
    ]
    return tuple(out)


def load_enemies_csv(path: Path) -> tuple[Enemy, ...]:
    out = [
        Enemy(
            name=row[0],
            strength=_positive_int(row[1], path=path, column="strength"),
            score_value=_positive_int(row[2], path=path, column="score"),
        )
        for row in _data_rows(path, ["name", "strength", "score"])
    ]
    return tuple(out)


def default_catalog() -> Catalog:
    """The classic three weapons and three enemies.

    Used when asset CSVs are missing (e.g. an installed wheel without the repo `assets/`).
    """

    return Catalog(
        weapons=(
            Weapon(name="Sword", attack_max=6, dodge_max=12),
            Weapon(name="Bow", attack_max=4, dodge_max=16),
            Weapon(name="Magic", attack_max=8, dodge_max=10),
        ),
        enemies=(
            Enemy(name="Wolf", strength=4, score_value=1),
            Enemy(name="Troll", strength=6, score_value=4),
            Enemy(name="Balrog", strength=8, score_value=9),
        ),
    )


def load_catalog(*, root: Path) -> Catalog:
    assets_dir = root / "assets"

    # Default behavior: fall back to the built-in catalog when files are missing or malformed.
    # You can force strict behavior by setting ADVENTURE_STRICT_ASSETS=1.
    strict = os.getenv("ADVENTURE_STRICT_ASSETS", "").strip().lower() in {"1", "true", "yes"}

    try:
        return Catalog(
            weapons=load_weapons_csv(assets_dir / "weapons.csv"),
            enemies=load_enemies_csv(assets_dir / "enemies.csv"),
        )
    except AssetLoadError as e:
        if strict:
            raise
        logger.warning("Using default catalog: %s", e)
        return default_catalog()


def catalog_root() -> Path:
    """Directory holding `assets/`: `ADVENTURE_ASSETS_ROOT`, or the repo root."""

    override = os.getenv("ADVENTURE_ASSETS_ROOT", "").strip()
    if override:
        return Path(override)
    # adventure/assets/registry.py -> repo root
    return Path(__file__).resolve().parents[2]


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    # Loaded once per process; `get_catalog.cache_clear()` forces a reload.
    catalog = load_catalog(root=catalog_root())
    logger.info("Catalog loaded: %d weapons, %d enemies", len(catalog.weapons), len(catalog.enemies))
    return catalog
