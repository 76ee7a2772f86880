"""Pure markup for each phase.

No input handling here: every function maps game values to an HTML fragment.
Control ids in the markup are the trigger ids the game loop waits on.
"""
from __future__ import annotations

from collections.abc import Sequence
from html import escape

from adventure.assets.registry import Enemy, Weapon
from adventure.core.combat import ActionKind

OK = "ok"
RETRY = "retry"
NAME_FIELD = "name"
WEAPON_PREFIX = "weapon-"


def weapon_control_id(index: int) -> str:
    return f"{WEAPON_PREFIX}{index}"


def weapon_index(control_id: str) -> int:
    """Catalog position encoded in a weapon control id (`weapon-2` -> 2)."""

    if not control_id.startswith(WEAPON_PREFIX):
        raise ValueError(f"Not a weapon control: {control_id}")
    return int(control_id[len(WEAPON_PREFIX) :])


def name_prompt() -> str:
    return (
        "<h1>Greetings Adventurer</h1>\n"
        "<p>Choose your name</p>\n"
        f'<input id="{NAME_FIELD}" name="{NAME_FIELD}" type="text" />\n'
        "<br />\n"
        f'<button id="{OK}">Done</button>'
    )


def welcome(name: str) -> str:
    return f'<h1>Welcome, {escape(name)}!</h1>\n<button id="{OK}">Thanks!</button>'


def weapon_select(name: str, weapons: Sequence[Weapon]) -> str:
    buttons = "".join(
        f'<button id="{weapon_control_id(i)}">'
        f"<h2><strong>{escape(w.name)}</strong></h2>"
        f"<p>Attack: {w.attack_max}<br />Dodge: {w.dodge_max}</p>"
        "</button>"
        for i, w in enumerate(weapons)
    )
    return f"<h1>Now it's time for you {escape(name)} to choose your weapon</h1>\n{buttons}"


def weapon_chosen(weapon: Weapon) -> str:
    return f'<h1>You chose {escape(weapon.name)}</h1>\n<button id="{OK}">Nice!</button>'


def encounter(enemy: Enemy, enemy_roll: int, hit_points: int, weapon: Weapon) -> str:
    return (
        f"<h1>You encounter a {escape(enemy.name)} ({enemy.strength})</h1>\n"
        f"<p>Your hitpoints: {hit_points}</p>\n"
        '<div id="fight">\n'
        f"<p>Enemy rolls {enemy_roll}</p>\n"
        f'<button id="{ActionKind.attack.value}">Attack (1-{weapon.attack_max})</button>\n'
        f'<button id="{ActionKind.dodge.value}">Dodge (1-{weapon.dodge_max})</button>\n'
        "</div>"
    )


def roll_frame(enemy_roll: int, roll: int) -> str:
    return f"<p>Enemy rolls {enemy_roll}</p>\n<p>You roll {roll}</p>"


def attack_result(enemy: Enemy, success: bool) -> str:
    if success:
        return f"<h2>You defeat the {escape(enemy.name)}! <br />Score +{enemy.score_value}</h2>"
    return f"<h2>You try to attack but the {escape(enemy.name)} is too fast for you.<br />-1 HP</h2>"


def dodge_result(enemy: Enemy, success: bool) -> str:
    if success:
        return f"<h1>You successfully dodge the {escape(enemy.name)}'s attack!</h1>"
    return f"<h1>You try to dodge the {escape(enemy.name)}'s attack but fail.<br />-1 HP</h1>"


def game_over(name: str, score: int) -> str:
    return (
        f"<h1>You die! Farewell {escape(name)}...</h1>\n"
        f"<p>Your final score is: {score}</p>\n"
        f'<button id="{RETRY}">Retry?</button>'
    )
