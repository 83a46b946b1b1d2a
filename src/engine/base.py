"""
Fatebound Breach - Game Engine Base Classes

This module defines the foundational data structures and enums used throughout
the game engine. All classes are immutable (frozen dataclasses) so that a prior
snapshot stays available for commitment comparison after a turn resolves.
"""

from dataclasses import dataclass, field
from enum import Enum

from src.engine.errors import InvalidAssignment


class PacketKind(Enum):
    """Kind of a packet, derived from its type byte."""
    MISS = "MISS"
    ATTACK = "ATTACK"
    DEFEND = "DEFEND"
    CRIT = "CRIT"
    HEAL = "HEAL"


class Rarity(Enum):
    """Packet rarity, derived from its rarity byte."""
    COMMON = "COMMON"
    RARE = "RARE"
    LEGENDARY = "LEGENDARY"


class TurnAnomaly(Enum):
    """Turn-scoped global rule modifier."""
    STABLE = "STABLE"
    DRAIN_HAZARD = "DRAIN_HAZARD"          # end of turn: 5 damage to everyone
    REGEN_LEAK = "REGEN_LEAK"              # start of turn: player regenerates 5
    DAMAGE_OVERCLOCK = "DAMAGE_OVERCLOCK"  # ATTACK packets +5


class EnemyIntent(Enum):
    """What an enemy will do after the player acts. Shown before planning."""
    ATTACK = "ATTACK"
    DEFEND = "DEFEND"
    IDLE = "IDLE"


class TargetKind(Enum):
    """Kinds of assignment target."""
    DISCARD = "trash"
    SELF = "player"
    ENEMY = "enemy"


class TurnResult(Enum):
    """Outcome of a turn resolution."""
    VICTORY = "VICTORY"
    DEFEAT = "DEFEAT"
    CONTINUE = "CONTINUE"


class GameStatus(Enum):
    """Lifecycle of a game session."""
    AWAITING_SEED = "awaiting_seed"
    ACTIVE = "active"               # hand dealt, waiting for assignments
    AWAITING_HAND = "awaiting_hand"  # turn resolved, next hand not dealt yet
    RESOLVED = "resolved"
    ABANDONED = "abandoned"


# Fixed effect magnitude per kind
PACKET_MAGNITUDES: dict[PacketKind, int] = {
    PacketKind.MISS: 0,
    PacketKind.ATTACK: 5,
    PacketKind.DEFEND: 5,
    PacketKind.CRIT: 15,
    PacketKind.HEAL: 10,
}


@dataclass(frozen=True)
class Packet:
    """
    A single per-turn resource card.

    Attributes:
        index: Position in the hand (0-based)
        type_byte: Sub-seed byte that chose the kind
        rarity_byte: Sub-seed byte that chose the rarity
        kind: Derived packet kind
        rarity: Derived rarity
        magnitude: Base effect value, fixed by kind
    """
    index: int
    type_byte: int
    rarity_byte: int
    kind: PacketKind
    rarity: Rarity = Rarity.COMMON
    magnitude: int = 0

    def __post_init__(self) -> None:
        """Validate source bytes are within byte range."""
        for name, value in (("type_byte", self.type_byte), ("rarity_byte", self.rarity_byte)):
            if not (0 <= value <= 255):
                raise ValueError(f"Invalid {name} {value}. Must be between 0 and 255.")

    @property
    def packet_id(self) -> str:
        """Display identifier, e.g. 'packet-0'."""
        return f"packet-{self.index}"

    @property
    def hex_value(self) -> str:
        """Type byte formatted for display, e.g. '0x64'."""
        return f"0x{self.type_byte:02X}"

    @property
    def is_damage(self) -> bool:
        return self.kind in (PacketKind.ATTACK, PacketKind.CRIT)


@dataclass(frozen=True)
class Target:
    """
    Where a packet is sent.

    Attributes:
        kind: DISCARD, SELF or ENEMY
        enemy_id: Identifier of the targeted enemy (ENEMY only)
    """
    kind: TargetKind
    enemy_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind == TargetKind.ENEMY and not self.enemy_id:
            raise InvalidAssignment("Enemy target requires an enemy_id.")
        if self.kind != TargetKind.ENEMY and self.enemy_id is not None:
            raise InvalidAssignment(f"{self.kind.name} target cannot carry an enemy_id.")

    @classmethod
    def discard(cls) -> "Target":
        return cls(TargetKind.DISCARD)

    @classmethod
    def self_(cls) -> "Target":
        return cls(TargetKind.SELF)

    @classmethod
    def enemy(cls, enemy_id: str) -> "Target":
        return cls(TargetKind.ENEMY, enemy_id)

    @classmethod
    def parse(cls, target_id: str) -> "Target":
        """Parse the wire form: 'trash', 'player', or an enemy identifier."""
        if not target_id:
            raise InvalidAssignment("Target selector must not be empty.")
        if target_id == TargetKind.DISCARD.value:
            return cls.discard()
        if target_id == TargetKind.SELF.value:
            return cls.self_()
        return cls.enemy(target_id)

    def __str__(self) -> str:
        if self.kind == TargetKind.ENEMY:
            return str(self.enemy_id)
        return self.kind.value


@dataclass(frozen=True)
class Assignment:
    """
    A player's choice of target for one packet.

    Attributes:
        packet_index: Index of the packet in the current hand
        target: Where the packet goes
    """
    packet_index: int
    target: Target

    @classmethod
    def from_wire(cls, packet_index: int, target_id: str) -> "Assignment":
        """Create an Assignment from a packet index and a target string."""
        return cls(packet_index=packet_index, target=Target.parse(target_id))


@dataclass(frozen=True)
class Player:
    """
    The player's health pool and shield.

    Attributes:
        hp: Current hit points
        max_hp: Hit point ceiling
        shield: Damage absorbed before hp
    """
    hp: int = 100
    max_hp: int = 100
    shield: int = 0

    def __post_init__(self) -> None:
        if self.hp < 0 or self.max_hp < 0 or self.shield < 0:
            raise ValueError("Player hp, max_hp and shield must be non-negative.")
        if self.hp > self.max_hp:
            raise ValueError(f"Player hp {self.hp} exceeds max_hp {self.max_hp}.")

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def is_untouched(self) -> bool:
        """True when hp is at its ceiling (flawless)."""
        return self.hp == self.max_hp


@dataclass(frozen=True)
class Enemy:
    """
    An enemy actor with a pre-calculated intent.

    Attributes:
        id: Stable identifier, used for targeting and commitment ordering
        name: Display name
        kind: Enemy archetype (e.g. 'drone', 'sentinel', 'CACHE_GOLD')
        hp: Current hit points
        max_hp: Hit point ceiling
        intended_damage: Damage dealt when intent is ATTACK
        intent: Action taken after the player's packets resolve
        is_immune_except_crit: Only a CRIT packet can destroy this actor
    """
    id: str
    hp: int
    max_hp: int
    intended_damage: int = 0
    intent: EnemyIntent = EnemyIntent.ATTACK
    is_immune_except_crit: bool = False
    name: str = ""
    kind: str = "drone"

    def __post_init__(self) -> None:
        if self.hp < 0 or self.intended_damage < 0:
            raise ValueError(f"Enemy {self.id} hp and intended_damage must be non-negative.")
        if self.hp > self.max_hp:
            raise ValueError(f"Enemy {self.id} hp {self.hp} exceeds max_hp {self.max_hp}.")

    @property
    def is_alive(self) -> bool:
        return self.hp > 0


@dataclass(frozen=True)
class Grid:
    """Board dimensions (cosmetic, carried for the presentation layer)."""
    width: int = 6
    height: int = 6


@dataclass(frozen=True)
class Hand:
    """
    Everything derived from one turn's sub-seed.

    Attributes:
        packets: Ordered packets for the turn
        anomaly: Active anomaly for the turn
        jackpot: Whether the jackpot bonus is pending
    """
    packets: tuple[Packet, ...]
    anomaly: TurnAnomaly = TurnAnomaly.STABLE
    jackpot: bool = False

    def __len__(self) -> int:
        return len(self.packets)

    def __getitem__(self, index: int) -> Packet:
        return self.packets[index]


@dataclass(frozen=True)
class GameState:
    """
    Complete state of a game session at a turn boundary.

    Attributes:
        session_seed: The 32-byte session seed
        player: Player actor
        enemies: Live enemies
        turn_counter: Current turn (1-indexed)
        score: Accumulated score
        status: Lifecycle status
        hand: Current hand (empty between turns)
        assignments: Pending assignments (cleared each turn)
        anomaly: Active anomaly for the current turn
        jackpot: Pending jackpot bonus
        grid: Board dimensions
    """
    session_seed: bytes
    player: Player
    enemies: tuple[Enemy, ...] = field(default_factory=tuple)
    turn_counter: int = 1
    score: int = 0
    status: GameStatus = GameStatus.AWAITING_HAND
    hand: tuple[Packet, ...] = field(default_factory=tuple)
    assignments: tuple[Assignment, ...] = field(default_factory=tuple)
    anomaly: TurnAnomaly = TurnAnomaly.STABLE
    jackpot: bool = False
    grid: Grid = field(default_factory=Grid)

    @property
    def live_enemy_ids(self) -> frozenset[str]:
        """Identifiers of enemies that can still be targeted."""
        return frozenset(e.id for e in self.enemies if e.is_alive)

    @property
    def is_terminal(self) -> bool:
        return self.status in (GameStatus.RESOLVED, GameStatus.ABANDONED)

    def enemy(self, enemy_id: str) -> Enemy | None:
        """Look up an enemy by identifier."""
        for enemy in self.enemies:
            if enemy.id == enemy_id:
                return enemy
        return None
