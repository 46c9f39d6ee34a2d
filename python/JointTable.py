from typing import Dict, Optional, Sequence, Tuple

JOINT_COUNT = 25
WRIST_JOINT = 0

FINGER_ORDER: Tuple[str, ...] = ("thumb", "index", "middle", "ring", "pinky")

# Joint indices per finger, proximal -> distal, in the 25-joint hand skeleton.
FINGER_JOINTS: Dict[str, Tuple[int, ...]] = {
    "thumb": (1, 2, 3, 4),
    "index": (5, 6, 7, 8, 9),
    "middle": (10, 11, 12, 13, 14),
    "ring": (15, 16, 17, 18, 19),
    "pinky": (20, 21, 22, 23, 24),
}

THUMB_CHAIN_LENGTH = 4
FINGER_CHAIN_LENGTH = 5


def chain_length(finger: str) -> int:
    return THUMB_CHAIN_LENGTH if finger == "thumb" else FINGER_CHAIN_LENGTH


def build_finger_chains(
    definitions: Optional[Dict[str, Sequence[int]]] = None,
) -> Dict[str, Tuple[int, ...]]:
    """
    Validate a finger -> joint chain table once, up front.
    Raises ValueError for a missing finger, a wrong chain length,
    an out-of-range index or indices that are not strictly increasing.
    """
    if definitions is None:
        definitions = FINGER_JOINTS
    chains: Dict[str, Tuple[int, ...]] = {}
    for finger in FINGER_ORDER:
        if finger not in definitions:
            raise ValueError(f"Joint table has no chain for '{finger}'")
        chain = tuple(int(i) for i in definitions[finger])
        expected = chain_length(finger)
        if len(chain) != expected:
            raise ValueError(
                f"Chain for '{finger}' has {len(chain)} joints, expected {expected}"
            )
        for idx in chain:
            if idx < 0 or idx >= JOINT_COUNT:
                raise ValueError(
                    f"Chain for '{finger}' uses joint {idx}, outside 0..{JOINT_COUNT - 1}"
                )
        if any(b <= a for a, b in zip(chain, chain[1:])):
            raise ValueError(f"Chain for '{finger}' is not strictly increasing: {chain}")
        chains[finger] = chain
    return chains


FINGER_CHAINS = build_finger_chains()
