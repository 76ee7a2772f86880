from __future__ import annotations

import pytest

from adventure import views
from adventure.assets.registry import Enemy, default_catalog


def test_weapon_controls_encode_catalog_position() -> None:
    weapons = default_catalog().weapons
    markup = views.weapon_select("Ada", weapons)

    for i in range(len(weapons)):
        control_id = views.weapon_control_id(i)
        assert f'id="{control_id}"' in markup
        assert views.weapon_index(control_id) == i


def test_weapon_index_rejects_other_controls() -> None:
    with pytest.raises(ValueError):
        views.weapon_index("attack")


def test_player_text_is_escaped() -> None:
    markup = views.welcome("<script>x</script>")
    assert "<script>" not in markup
    assert "&lt;script&gt;" in markup


def test_encounter_offers_attack_and_dodge() -> None:
    catalog = default_catalog()
    markup = views.encounter(catalog.enemies[1], 5, 2, catalog.weapons[0])

    assert "You encounter a Troll (6)" in markup
    assert "Enemy rolls 5" in markup
    assert "Your hitpoints: 2" in markup
    assert 'id="attack"' in markup and 'id="dodge"' in markup
    assert "Attack (1-6)" in markup and "Dodge (1-12)" in markup


def test_results_and_game_over() -> None:
    wolf = Enemy(name="Wolf", strength=4, score_value=1)

    assert "Score +1" in views.attack_result(wolf, True)
    assert "-1 HP" in views.attack_result(wolf, False)
    assert "-1 HP" not in views.dodge_result(wolf, True)
    assert "-1 HP" in views.dodge_result(wolf, False)

    over = views.game_over("Ada", 14)
    assert "Farewell Ada" in over
    assert "Your final score is: 14" in over
    assert f'id="{views.RETRY}"' in over
