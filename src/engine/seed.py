"""
Fatebound Breach - Seed Expander

Derives the per-turn sub-seed from the session seed:

    sub_seed = keccak256(session_seed || ASCII("Turn" + str(turn)))

Keccak-256 (the pre-standard SHA-3 padding) is used so the sub-seed matches
the on-chain verifier byte for byte. hashlib.sha3_256 is a different function.
"""

from Crypto.Hash import keccak

from src.engine.validators import validate_seed


def keccak256(data: bytes) -> bytes:
    """Return the 32-byte Keccak-256 digest of data."""
    return keccak.new(digest_bits=256, data=data).digest()


class SeedExpander:
    """
    Stateless expansion of a session seed into per-turn sub-seeds.

    All methods are class methods operating on immutable data.
    """

    TURN_MARKER = "Turn"

    @classmethod
    def turn_marker(cls, turn: int) -> bytes:
        """ASCII marker appended to the seed, e.g. b'Turn3'."""
        return f"{cls.TURN_MARKER}{turn}".encode("ascii")

    @classmethod
    def derive_turn_seed(cls, session_seed: bytes | str, turn: int) -> bytes:
        """
        Derive the sub-seed for a turn.

        Args:
            session_seed: 32-byte seed (raw or hex)
            turn: Turn number

        Returns:
            32-byte sub-seed
        """
        seed = validate_seed(session_seed)
        return keccak256(seed + cls.turn_marker(turn))


def derive_turn_seed(session_seed: bytes | str, turn: int) -> bytes:
    """Module-level shortcut for SeedExpander.derive_turn_seed."""
    return SeedExpander.derive_turn_seed(session_seed, turn)
