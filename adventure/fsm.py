from __future__ import annotations

import logging

from statemachine import State, StateMachine

from adventure.api.models import GamePhase

logger = logging.getLogger(__name__)


class GamePhaseMachine(StateMachine):
    """Phase order of one adventure, looping back to the name prompt after game over.

    The machine only guards transitions; the GameLoop performs each phase's
    presentation/waits and then sends the event the phase ended with.
    """

    name_prompt = State(GamePhase.name_prompt.value, value=GamePhase.name_prompt.value, initial=True)
    weapon_select = State(GamePhase.weapon_select.value, value=GamePhase.weapon_select.value)
    encounter = State(GamePhase.encounter.value, value=GamePhase.encounter.value)
    combat_round = State(GamePhase.combat_round.value, value=GamePhase.combat_round.value)
    game_over = State(GamePhase.game_over.value, value=GamePhase.game_over.value)

    name_entered = name_prompt.to(weapon_select)
    weapon_chosen = weapon_select.to(encounter)
    enemy_engaged = encounter.to(combat_round)
    round_continues = combat_round.to.itself()
    enemy_defeated = combat_round.to(encounter)
    player_died = combat_round.to(game_over)
    retry = game_over.to(name_prompt)

    def __init__(self, session_label: str = "local") -> None:
        self.session_label = session_label
        super().__init__()

    @property
    def phase(self) -> GamePhase:
        return GamePhase(str(self.current_state.value))

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.debug("[%s] %s: %s -> %s", self.session_label, event, source.value, target.value)
