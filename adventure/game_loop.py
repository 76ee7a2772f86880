from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any

from adventure import views
from adventure.api.models import GamePhase
from adventure.assets.registry import Catalog, Enemy
from adventure.core.combat import ActionKind, CombatResolver, roll_max
from adventure.core.events import EventType, GameEvent
from adventure.core.randomizer import Randomizer
from adventure.core.session import SessionState
from adventure.core.triggers import EventWaiter
from adventure.fsm import GamePhaseMachine
from adventure.presentation import PresentationPort
from adventure.settings import GameTimings

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 256

Sleep = Callable[[float], Awaitable[Any]]


class GameLoop:
    """Drives one player through name -> weapon -> encounters -> game over, forever.

    Every phase has one handler that presents markup, waits on the EventWaiter and
    returns the machine event the phase ended with. `step()` runs the current phase;
    `run_session()` plays one full run; `run_forever()` never returns.
    """

    def __init__(
        self,
        *,
        catalog: Catalog,
        waiter: EventWaiter,
        presenter: PresentationPort,
        randomizer: Randomizer,
        resolver: CombatResolver | None = None,
        timings: GameTimings | None = None,
        sleep: Sleep = asyncio.sleep,
        session_label: str = "local",
    ) -> None:
        self.catalog = catalog
        self.waiter = waiter
        self.presenter = presenter
        self.randomizer = randomizer
        self.resolver = resolver or CombatResolver(randomizer)
        self.timings = timings or GameTimings()
        self._sleep = sleep
        self.session_label = session_label

        self.machine = GamePhaseMachine(session_label=session_label)
        self.history: deque[GameEvent] = deque(maxlen=HISTORY_LIMIT)
        self.runs_completed = 0

        # Current run. `session` exists from weapon choice until game over is acknowledged.
        self.session: SessionState | None = None
        self._player_name = ""
        self._enemy: Enemy | None = None

        self._handlers: dict[GamePhase, Callable[[], Awaitable[str]]] = {
            GamePhase.name_prompt: self._name_prompt,
            GamePhase.weapon_select: self._weapon_select,
            GamePhase.encounter: self._encounter,
            GamePhase.combat_round: self._combat_round,
            GamePhase.game_over: self._game_over,
        }

    @property
    def phase(self) -> GamePhase:
        return self.machine.phase

    async def step(self) -> str:
        event = await self._handlers[self.phase]()
        self.machine.send(event)
        return event

    async def run_session(self) -> SessionState:
        """Play one run to the end of game over; returns the finished session."""

        if self.phase != GamePhase.name_prompt:
            raise ValueError(f"A run starts at the name prompt, not {self.phase.value}")

        finished: SessionState | None = None
        while True:
            if self.phase == GamePhase.game_over:
                finished = self.session
            event = await self.step()
            if event == "retry":
                if finished is None:
                    raise RuntimeError("Game over was acknowledged without a finished run")
                return finished

    async def run_forever(self) -> None:
        while True:
            finished = await self.run_session()
            logger.info(
                "[%s] run finished: name=%r weapon=%s score=%s",
                self.session_label,
                finished.player_name,
                finished.weapon.name,
                finished.score,
            )

    # ---- phase handlers ----

    async def _name_prompt(self) -> str:
        self.waiter.clear_fields()
        await self.presenter.present(views.name_prompt())
        await self.waiter.await_one({views.OK})

        self._player_name = self.waiter.field(views.NAME_FIELD)
        self._record("NAME_CHOSEN", name=self._player_name)

        await self.presenter.present(views.welcome(self._player_name))
        await self.waiter.await_one({views.OK})
        return "name_entered"

    async def _weapon_select(self) -> str:
        weapons = self.catalog.weapons
        await self.presenter.present(views.weapon_select(self._player_name, weapons))

        control_id = await self.waiter.await_one(views.weapon_control_id(i) for i in range(len(weapons)))
        weapon = weapons[views.weapon_index(control_id)]
        self._record("WEAPON_CHOSEN", weapon=weapon.name)

        await self.presenter.present(views.weapon_chosen(weapon))
        await self.waiter.await_one({views.OK})

        self.session = SessionState(player_name=self._player_name, weapon=weapon)
        self._record("SESSION_STARTED", name=self._player_name, weapon=weapon.name)
        return "weapon_chosen"

    async def _encounter(self) -> str:
        session = self._require_session()
        self._enemy = session.current_enemy(self.catalog)
        self._record("ENEMY_ENCOUNTERED", enemy=self._enemy.name, enemy_index=session.enemy_index)
        return "enemy_engaged"

    async def _combat_round(self) -> str:
        session = self._require_session()
        enemy = self._enemy
        if enemy is None:
            raise RuntimeError("Combat round started without an encountered enemy")

        enemy_roll = self.randomizer.int_in_range(enemy.strength)
        await self.presenter.present(views.encounter(enemy, enemy_roll, session.hit_points, session.weapon))

        action = ActionKind(await self.waiter.await_one(kind.value for kind in ActionKind))
        outcome = self.resolver.resolve_action(action, session.weapon, enemy_roll)
        self._record(
            "ACTION_RESOLVED",
            action=action.value,
            enemy_roll=enemy_roll,
            roll=outcome.roll,
            success=outcome.success,
        )

        await self._play_roll(enemy_roll, roll_max(action, session.weapon), outcome.roll)

        if action is ActionKind.attack:
            await self.presenter.present(views.attack_result(enemy, outcome.success))
            await self._sleep(self.timings.attack_result_s)
            if outcome.success:
                session.record_defeat(enemy)
                self._record("ENEMY_DEFEATED", enemy=enemy.name, score=session.score)
                return "enemy_defeated"
        else:
            await self.presenter.present(views.dodge_result(enemy, outcome.success))
            await self._sleep(self.timings.dodge_result_s)
            if outcome.success:
                return "round_continues"

        session.take_hit()
        self._record("HIT_TAKEN", hit_points=session.hit_points)
        return "round_continues" if session.is_alive else "player_died"

    async def _game_over(self) -> str:
        session = self._require_session()
        self._record("GAME_OVER", name=session.player_name, score=session.score)

        await self.presenter.present(views.game_over(session.player_name, session.score))
        await self.waiter.await_one({views.RETRY})

        self.runs_completed += 1
        self.session = None
        self._enemy = None
        return "retry"

    # ---- helpers ----

    async def _play_roll(self, enemy_roll: int, max_roll: int, player_roll: int) -> None:
        for frame in self.resolver.animated_roll_preview(enemy_roll, max_roll, player_roll):
            await self.presenter.present(views.roll_frame(frame.enemy_roll, frame.roll))
            await self._sleep(self.timings.roll_frame_s)
        await self._sleep(self.timings.roll_settle_s)

    def _require_session(self) -> SessionState:
        if self.session is None:
            raise RuntimeError(f"No active run in phase {self.phase.value}")
        return self.session

    def _record(self, type: EventType, **payload: Any) -> None:
        event = GameEvent.now(type=type, session_seq=self.runs_completed, payload=payload)
        self.history.append(event)
        logger.debug("[%s] %s %s", self.session_label, type, payload)
