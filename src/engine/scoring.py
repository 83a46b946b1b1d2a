"""
Fatebound Breach - Score Accumulator

Score is always previous score plus the sum of this resolution's events.
Only the combat resolver emits events.

Scoring:
    - Jackpot pending at start of turn: +5000
    - Enemy destroyed by a packet: +100
    - Immune-except-crit cache destroyed: +1000 on top of the kill
    - Victory: +500
    - Victory with player hp at max: +200 on top
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable

from src.engine.base import Enemy, Player


class ScoreEventKind(Enum):
    """Categories of score events."""
    JACKPOT = auto()
    KILL = auto()
    CACHE_CRACKED = auto()
    VICTORY = auto()
    FLAWLESS = auto()


@dataclass(frozen=True)
class ScoreEvent:
    """
    A single scoring component within a resolution.

    Attributes:
        kind: What triggered the points
        points: Points awarded
        enemy_id: Enemy involved, for kill events
    """
    kind: ScoreEventKind
    points: int
    enemy_id: str | None = None

    @property
    def description(self) -> str:
        if self.enemy_id:
            return f"{self.kind.name} ({self.enemy_id})"
        return self.kind.name


class ScoreAccumulator:
    """
    Stateless scoring rules.

    All methods are class methods operating on immutable data.
    """

    JACKPOT_BONUS = 5000
    KILL_POINTS = 100
    CACHE_BONUS = 1000
    VICTORY_BONUS = 500
    FLAWLESS_BONUS = 200

    @classmethod
    def jackpot(cls) -> tuple[ScoreEvent, ...]:
        return (ScoreEvent(ScoreEventKind.JACKPOT, cls.JACKPOT_BONUS),)

    @classmethod
    def kills(
        cls,
        before: Iterable[Enemy],
        after: Iterable[Enemy],
    ) -> tuple[ScoreEvent, ...]:
        """
        Score every enemy whose hp went from >0 to 0 between two snapshots.

        Args:
            before: Enemies at the start of the step
            after: The same enemies at the end of the step

        Returns:
            Kill (and cache) events in 'after' order
        """
        alive_before = {e.id for e in before if e.is_alive}
        events: list[ScoreEvent] = []
        for enemy in after:
            if enemy.id in alive_before and not enemy.is_alive:
                events.append(ScoreEvent(ScoreEventKind.KILL, cls.KILL_POINTS, enemy.id))
                if enemy.is_immune_except_crit:
                    events.append(
                        ScoreEvent(ScoreEventKind.CACHE_CRACKED, cls.CACHE_BONUS, enemy.id)
                    )
        return tuple(events)

    @classmethod
    def victory(cls, player: Player) -> tuple[ScoreEvent, ...]:
        """Completion bonus, plus the flawless bonus when hp is at max."""
        events = [ScoreEvent(ScoreEventKind.VICTORY, cls.VICTORY_BONUS)]
        if player.is_untouched:
            events.append(ScoreEvent(ScoreEventKind.FLAWLESS, cls.FLAWLESS_BONUS))
        return tuple(events)

    @classmethod
    def total(cls, events: Iterable[ScoreEvent]) -> int:
        return sum(event.points for event in events)

    @classmethod
    def apply(cls, score: int, events: Iterable[ScoreEvent]) -> int:
        """Return score plus the sum of events."""
        return score + cls.total(events)
