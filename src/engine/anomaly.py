"""
Fatebound Breach - Anomaly Engine

Turn-scoped global modifiers. An anomaly is not a separate phase: the combat
resolver calls the start-of-turn and end-of-turn hooks below, and asks for the
ATTACK bonus while computing effective magnitudes.

Anomaly Table:
    | Anomaly          | Byte 12 | Effect                                  |
    |------------------|---------|-----------------------------------------|
    | DRAIN_HAZARD     | 0-30    | End of turn: 5 damage to player & foes  |
    | REGEN_LEAK       | 31-60   | Start of turn: player regenerates 5 hp  |
    | DAMAGE_OVERCLOCK | 61-90   | ATTACK packets deal +5                  |
    | STABLE           | 91-255  | No effect                               |

Adding an anomaly is a change to ANOMALY_THRESHOLDS and ANOMALY_EFFECTS only.
"""

from dataclasses import dataclass, replace

from src.engine.base import Enemy, PacketKind, Player, TurnAnomaly


@dataclass(frozen=True)
class AnomalyEffect:
    """
    Numeric effect of an anomaly.

    Attributes:
        start_of_turn_heal: Player hp regenerated before packets resolve
        attack_bonus: Flat bonus added to ATTACK packet magnitude
        end_of_turn_damage: Damage dealt to the player and every live enemy
    """
    start_of_turn_heal: int = 0
    attack_bonus: int = 0
    end_of_turn_damage: int = 0


# Inclusive upper bounds, checked in order; anything above is STABLE
ANOMALY_THRESHOLDS: tuple[tuple[int, TurnAnomaly], ...] = (
    (30, TurnAnomaly.DRAIN_HAZARD),
    (60, TurnAnomaly.REGEN_LEAK),
    (90, TurnAnomaly.DAMAGE_OVERCLOCK),
)

ANOMALY_EFFECTS: dict[TurnAnomaly, AnomalyEffect] = {
    TurnAnomaly.STABLE: AnomalyEffect(),
    TurnAnomaly.DRAIN_HAZARD: AnomalyEffect(end_of_turn_damage=5),
    TurnAnomaly.REGEN_LEAK: AnomalyEffect(start_of_turn_heal=5),
    TurnAnomaly.DAMAGE_OVERCLOCK: AnomalyEffect(attack_bonus=5),
}


def absorb_damage(player: Player, damage: int) -> Player:
    """
    Apply damage to the player, shield first.

    Shield absorbs up to its value; the remainder reduces hp, floored at 0.
    """
    if damage <= 0:
        return player
    absorbed = min(player.shield, damage)
    remaining = damage - absorbed
    return replace(
        player,
        shield=player.shield - absorbed,
        hp=max(0, player.hp - remaining),
    )


class AnomalyEngine:
    """
    Stateless hooks for turn anomalies.

    All methods are class methods operating on immutable data.
    """

    @classmethod
    def select(cls, anomaly_byte: int) -> TurnAnomaly:
        """
        Map the anomaly byte to a TurnAnomaly.

        Raises:
            ValueError: If the byte is outside 0-255
        """
        if not (0 <= anomaly_byte <= 255):
            raise ValueError(f"Invalid byte value: {anomaly_byte}. Must be 0-255.")
        for upper, anomaly in ANOMALY_THRESHOLDS:
            if anomaly_byte <= upper:
                return anomaly
        return TurnAnomaly.STABLE

    @classmethod
    def effect(cls, anomaly: TurnAnomaly) -> AnomalyEffect:
        return ANOMALY_EFFECTS[anomaly]

    @classmethod
    def attack_bonus(cls, anomaly: TurnAnomaly, kind: PacketKind) -> int:
        """Additive bonus for a packet of this kind under the anomaly."""
        if kind != PacketKind.ATTACK:
            return 0
        return ANOMALY_EFFECTS[anomaly].attack_bonus

    @classmethod
    def apply_start_of_turn(cls, anomaly: TurnAnomaly, player: Player) -> Player:
        """Run the start-of-turn hook (passive regeneration)."""
        heal = ANOMALY_EFFECTS[anomaly].start_of_turn_heal
        if heal <= 0:
            return player
        return replace(player, hp=min(player.hp + heal, player.max_hp))

    @classmethod
    def apply_end_of_turn(
        cls,
        anomaly: TurnAnomaly,
        player: Player,
        enemies: tuple[Enemy, ...],
    ) -> tuple[Player, tuple[Enemy, ...]]:
        """
        Run the end-of-turn hook.

        Damage hits the player (shield first) and every live enemy at the same
        time; enemies brought to 0 are swept from the live set.

        Returns:
            (player, surviving enemies)
        """
        damage = ANOMALY_EFFECTS[anomaly].end_of_turn_damage
        if damage <= 0:
            return player, enemies

        player = absorb_damage(player, damage)
        damaged = tuple(
            replace(e, hp=max(0, e.hp - damage)) if e.is_alive else e
            for e in enemies
        )
        return player, tuple(e for e in damaged if e.is_alive)
