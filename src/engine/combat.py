"""
Fatebound Breach - Combat Resolver

The pure state transition for one turn. Given the same state and assignments
it always produces the same next state; the input state is never modified.

Resolution order (fixed):
    1. Start-of-turn anomaly hook and pending jackpot bonus
    2. Packets resolve in hand order
    3. +100 per enemy destroyed by a packet (+1000 for the cache)
    4. Dead enemies are removed
    5. Preliminary result (DEFEAT / VICTORY / CONTINUE)
    6. On CONTINUE, enemies with ATTACK intent hit the player, shield first
    7. End-of-turn anomaly hook, with a second dead sweep
    8. Hand and assignments cleared, turn counter incremented
    9. Final result; VICTORY awards completion and flawless bonuses

Overkill Rule:
    Excess damage is discarded. An enemy with 2 hp hit for 15 ends at 0.

Cache Rule:
    An immune-except-crit enemy is destroyed outright by a CRIT and
    deflects every other packet.
"""

from dataclasses import dataclass, replace
from typing import Sequence

from src.engine.anomaly import AnomalyEngine, absorb_damage
from src.engine.base import (
    Assignment,
    Enemy,
    EnemyIntent,
    GameState,
    GameStatus,
    Packet,
    PacketKind,
    Player,
    Rarity,
    TargetKind,
    TurnAnomaly,
    TurnResult,
)
from src.engine.errors import InvalidAssignment
from src.engine.scoring import ScoreAccumulator, ScoreEvent
from src.engine.validators import validate_assignments


@dataclass(frozen=True)
class TurnOutcome:
    """
    Result of resolving one turn.

    Attributes:
        state: The new snapshot
        result: VICTORY, DEFEAT or CONTINUE
        events: Score events awarded during the resolution
    """
    state: GameState
    result: TurnResult
    events: tuple[ScoreEvent, ...] = tuple()

    @property
    def points(self) -> int:
        return ScoreAccumulator.total(self.events)

    @property
    def is_terminal(self) -> bool:
        return self.result != TurnResult.CONTINUE


class CombatResolver:
    """
    Stateless turn resolution.

    All methods are class methods operating on immutable data.
    State is passed in and returned, never stored.
    """

    # Rarity multipliers as (numerator, denominator); results are floored
    RARITY_MULTIPLIERS: dict[Rarity, tuple[int, int]] = {
        Rarity.COMMON: (1, 1),
        Rarity.RARE: (3, 2),
        Rarity.LEGENDARY: (2, 1),
    }

    @classmethod
    def effective_magnitude(cls, packet: Packet, anomaly: TurnAnomaly) -> int:
        """
        Base magnitude scaled by rarity, plus the anomaly ATTACK bonus.

        RARE is ×1.5 rounded down; integer arithmetic keeps it exact.
        """
        num, den = cls.RARITY_MULTIPLIERS[packet.rarity]
        value = (packet.magnitude * num) // den
        return value + AnomalyEngine.attack_bonus(anomaly, packet.kind)

    @classmethod
    def damage_player(cls, player: Player, damage: int) -> Player:
        """Shield absorbs first; the remainder reduces hp, floored at 0."""
        return absorb_damage(player, damage)

    @classmethod
    def apply_to_player(cls, player: Player, packet: Packet, magnitude: int) -> Player:
        """Apply a SELF-targeted packet."""
        if packet.kind == PacketKind.HEAL:
            return replace(player, hp=min(player.hp + magnitude, player.max_hp))
        if packet.kind == PacketKind.DEFEND:
            return replace(player, shield=player.shield + magnitude)
        if packet.is_damage:
            # Self-damage is legal but not a normal play path
            return cls.damage_player(player, magnitude)
        return player

    @classmethod
    def apply_to_enemy(cls, enemy: Enemy, packet: Packet, magnitude: int) -> Enemy:
        """Apply an ENEMY-targeted packet."""
        if enemy.is_immune_except_crit:
            if packet.kind == PacketKind.CRIT:
                return replace(enemy, hp=0)
            return enemy
        if packet.is_damage:
            return replace(enemy, hp=max(0, enemy.hp - magnitude))
        return enemy

    @classmethod
    def evaluate(cls, player: Player, enemies: Sequence[Enemy]) -> TurnResult:
        """
        Check the win/loss condition.

        DEFEAT takes precedence over VICTORY.
        """
        if not player.is_alive:
            return TurnResult.DEFEAT
        if not any(e.is_alive for e in enemies):
            return TurnResult.VICTORY
        return TurnResult.CONTINUE

    @classmethod
    def enemy_phase(cls, player: Player, enemies: Sequence[Enemy]) -> Player:
        """Every live enemy with ATTACK intent deals its intended damage."""
        for enemy in enemies:
            if enemy.is_alive and enemy.intent == EnemyIntent.ATTACK:
                player = cls.damage_player(player, enemy.intended_damage)
        return player

    @classmethod
    def validate(cls, state: GameState, assignments: Sequence[Assignment]) -> tuple[Assignment, ...]:
        """
        Validate assignments against the state without resolving anything.

        Returns:
            Assignments in hand order

        Raises:
            InvalidAssignment: If the state has no dealt hand or coverage is wrong
            UnknownEnemyTarget: If an enemy target is not live
        """
        if state.status != GameStatus.ACTIVE:
            raise InvalidAssignment(
                f"Cannot resolve a turn while the game is {state.status.value}."
            )
        return validate_assignments(state.hand, assignments, state.live_enemy_ids)

    @classmethod
    def resolve_turn(cls, state: GameState, assignments: Sequence[Assignment]) -> TurnOutcome:
        """
        Resolve one turn.

        Args:
            state: Current ACTIVE state with a dealt hand
            assignments: One assignment per hand packet

        Returns:
            TurnOutcome with the new state, result and score events

        Raises:
            InvalidAssignment: Bad coverage or target (nothing is resolved)
            UnknownEnemyTarget: Target is not a live enemy
        """
        ordered = cls.validate(state, assignments)

        anomaly = state.anomaly
        events: list[ScoreEvent] = []

        # 1. Start of turn
        if state.jackpot:
            events.extend(ScoreAccumulator.jackpot())
        player = AnomalyEngine.apply_start_of_turn(anomaly, state.player)
        enemies = state.enemies

        # 2. Packets, in hand order
        for assignment in ordered:
            packet = state.hand[assignment.packet_index]
            target = assignment.target
            if target.kind == TargetKind.DISCARD:
                continue
            magnitude = cls.effective_magnitude(packet, anomaly)
            if target.kind == TargetKind.SELF:
                player = cls.apply_to_player(player, packet, magnitude)
            else:
                enemies = tuple(
                    cls.apply_to_enemy(e, packet, magnitude) if e.id == target.enemy_id else e
                    for e in enemies
                )

        # 3. Kill scoring, 4. dead sweep
        events.extend(ScoreAccumulator.kills(state.enemies, enemies))
        enemies = tuple(e for e in enemies if e.is_alive)

        # 5. Preliminary result, 6. enemy phase
        if cls.evaluate(player, enemies) == TurnResult.CONTINUE:
            player = cls.enemy_phase(player, enemies)

        # 7. End of turn
        player, enemies = AnomalyEngine.apply_end_of_turn(anomaly, player, enemies)

        # 9. Final result and completion bonuses
        result = cls.evaluate(player, enemies)
        if result == TurnResult.VICTORY:
            events.extend(ScoreAccumulator.victory(player))

        # 8. Clear the hand, advance the turn
        next_state = replace(
            state,
            player=player,
            enemies=enemies,
            hand=tuple(),
            assignments=tuple(),
            jackpot=False,
            turn_counter=state.turn_counter + 1,
            score=ScoreAccumulator.apply(state.score, events),
            status=GameStatus.AWAITING_HAND if result == TurnResult.CONTINUE else GameStatus.RESOLVED,
        )
        return TurnOutcome(state=next_state, result=result, events=tuple(events))


def resolve_turn(state: GameState, assignments: Sequence[Assignment]) -> TurnOutcome:
    """Module-level shortcut for CombatResolver.resolve_turn."""
    return CombatResolver.resolve_turn(state, assignments)
