"""
Fatebound Breach - Enemy Intent Planning

Intents are computed in advance and stored on each Enemy so the planning
phase has no hidden information. The pattern cycles with the turn:

    (turn + position) % 3 == 0 → ATTACK
    (turn + position) % 3 == 1 → DEFEND for sentinels, ATTACK otherwise
    (turn + position) % 3 == 2 → IDLE
"""

from dataclasses import replace
from typing import Sequence

from src.engine.base import Enemy, EnemyIntent

DEFENSIVE_KINDS = frozenset({"sentinel"})


def intent_for(enemy: Enemy, position: int, turn: int) -> EnemyIntent:
    """Intent of the enemy at a given live-set position for a turn."""
    pattern = (turn + position) % 3
    if pattern == 0:
        return EnemyIntent.ATTACK
    if pattern == 1:
        return EnemyIntent.DEFEND if enemy.kind in DEFENSIVE_KINDS else EnemyIntent.ATTACK
    return EnemyIntent.IDLE


def plan_intents(enemies: Sequence[Enemy], turn: int) -> tuple[Enemy, ...]:
    """Return enemies with intents planned for the upcoming turn."""
    return tuple(
        replace(enemy, intent=intent_for(enemy, position, turn))
        for position, enemy in enumerate(enemies)
    )
