"""
Fatebound Breach - Hand Deriver

Maps a turn's sub-seed into the ordered packets the player receives. All
methods are stateless class methods that operate on immutable inputs.

Byte Mapping (type byte, inclusive ranges):
    | Range   | Kind   | Magnitude |
    |---------|--------|-----------|
    | 0-19    | MISS   | 0         |
    | 20-150  | ATTACK | 5         |
    | 151-200 | DEFEND | 5         |
    | 201-240 | CRIT   | 15        |
    | 241-255 | HEAL   | 10        |

Rarity (rarity byte):
    - > 240: LEGENDARY
    - > 200: RARE
    - else:  COMMON

Layout of the 32-byte sub-seed:
    - Packet i reads bytes 2i (type) and 2i+1 (rarity), wrapping at 32
    - Byte 12 selects the turn anomaly
    - Byte 31 is the jackpot byte (jackpot when >= 250)
"""

from dataclasses import replace

from src.engine.anomaly import AnomalyEngine
from src.engine.base import (
    PACKET_MAGNITUDES,
    GameState,
    GameStatus,
    Hand,
    Packet,
    PacketKind,
    Rarity,
)
from src.engine.errors import InvalidTurn
from src.engine.seed import SeedExpander
from src.engine.validators import validate_turn


class HandDeriver:
    """
    Stateless derivation of a turn's hand from its sub-seed.

    All methods are class methods operating on immutable data.
    """

    BASE_HAND_SIZE = 5
    HAND_SIZE_CYCLE = 3
    BYTES_PER_PACKET = 2

    ANOMALY_BYTE_INDEX = 12
    JACKPOT_BYTE_INDEX = 31
    JACKPOT_THRESHOLD = 250

    # Inclusive upper bound of each kind, checked in order
    KIND_THRESHOLDS: tuple[tuple[int, PacketKind], ...] = (
        (19, PacketKind.MISS),
        (150, PacketKind.ATTACK),
        (200, PacketKind.DEFEND),
        (240, PacketKind.CRIT),
        (255, PacketKind.HEAL),
    )

    LEGENDARY_THRESHOLD = 240
    RARE_THRESHOLD = 200

    @classmethod
    def byte_to_kind(cls, byte: int) -> PacketKind:
        """
        Map a type byte to its PacketKind.

        Raises:
            ValueError: If the byte is outside 0-255
        """
        if not (0 <= byte <= 255):
            raise ValueError(f"Invalid byte value: {byte}. Must be 0-255.")
        for upper, kind in cls.KIND_THRESHOLDS:
            if byte <= upper:
                return kind
        raise AssertionError("unreachable: thresholds cover 0-255")

    @classmethod
    def byte_to_rarity(cls, byte: int) -> Rarity:
        """Map a rarity byte to its Rarity."""
        if not (0 <= byte <= 255):
            raise ValueError(f"Invalid byte value: {byte}. Must be 0-255.")
        if byte > cls.LEGENDARY_THRESHOLD:
            return Rarity.LEGENDARY
        if byte > cls.RARE_THRESHOLD:
            return Rarity.RARE
        return Rarity.COMMON

    @classmethod
    def make_packet(cls, index: int, type_byte: int, rarity_byte: int = 0) -> Packet:
        """Create a Packet from its source bytes."""
        kind = cls.byte_to_kind(type_byte)
        return Packet(
            index=index,
            type_byte=type_byte,
            rarity_byte=rarity_byte,
            kind=kind,
            rarity=cls.byte_to_rarity(rarity_byte),
            magnitude=PACKET_MAGNITUDES[kind],
        )

    @classmethod
    def hand_size(cls, turn: int) -> int:
        """
        Number of packets for a turn: 5 + (turn % 3).

        Turn 1 → 6, turn 2 → 7, turn 3 → 5, turn 4 → 6, ...

        Raises:
            InvalidTurn: If turn < 1
        """
        validate_turn(turn)
        return cls.BASE_HAND_SIZE + (turn % cls.HAND_SIZE_CYCLE)

    @classmethod
    def is_jackpot(cls, sub_seed: bytes) -> bool:
        return sub_seed[cls.JACKPOT_BYTE_INDEX % len(sub_seed)] >= cls.JACKPOT_THRESHOLD

    @classmethod
    def derive_hand(cls, sub_seed: bytes, turn: int) -> Hand:
        """
        Derive the full hand for a turn from its sub-seed.

        Args:
            sub_seed: Turn sub-seed from SeedExpander
            turn: Current turn number (1-indexed)

        Returns:
            Hand with packets, anomaly and jackpot flag

        Raises:
            InvalidTurn: If turn < 1
        """
        if not sub_seed:
            raise InvalidTurn("Cannot derive a hand from an empty sub-seed.")

        count = cls.hand_size(turn)
        length = len(sub_seed)

        packets = []
        for i in range(count):
            base = i * cls.BYTES_PER_PACKET
            packets.append(cls.make_packet(
                index=i,
                type_byte=sub_seed[base % length],
                rarity_byte=sub_seed[(base + 1) % length],
            ))

        return Hand(
            packets=tuple(packets),
            anomaly=AnomalyEngine.select(sub_seed[cls.ANOMALY_BYTE_INDEX % length]),
            jackpot=cls.is_jackpot(sub_seed),
        )

    @classmethod
    def derive_from_seed(cls, session_seed: bytes | str, turn: int) -> Hand:
        """Expand the session seed for a turn and derive its hand."""
        validate_turn(turn)
        return cls.derive_hand(SeedExpander.derive_turn_seed(session_seed, turn), turn)

    @classmethod
    def deal(cls, state: GameState) -> GameState:
        """
        Deal the hand for state.turn_counter.

        Returns:
            New ACTIVE state carrying the hand, anomaly and jackpot flag
        """
        hand = cls.derive_from_seed(state.session_seed, state.turn_counter)
        return replace(
            state,
            hand=hand.packets,
            assignments=tuple(),
            anomaly=hand.anomaly,
            jackpot=hand.jackpot,
            status=GameStatus.ACTIVE,
        )
