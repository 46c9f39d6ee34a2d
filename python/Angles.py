import math
from typing import Dict, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from HandData import HandFrame, JointPose
from JointTable import FINGER_CHAINS, FINGER_ORDER

AngleSample = Tuple[float, float]  # (flexion, adduction)


class InsufficientJointData(ValueError):
    """Raised when the pose list cannot cover a finger chain."""

    def __init__(self, finger: str, required: int, available: int):
        super().__init__(
            f"Insufficient joint data for {finger.capitalize()} "
            f"(needs {required} joints, got {available})"
        )
        self.finger = finger
        self.required = required
        self.available = available


def normalize_angle(angle: float) -> float:
    """Wrap degrees into (-180, 180]."""
    wrapped = float(angle) % 360.0
    if wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def _rotation(pose: JointPose) -> Rotation:
    return Rotation.from_quat(pose.rotation)


def relative_rotation(parent: JointPose, child: JointPose) -> Rotation:
    """Rotation of child expressed in the parent's frame: inverse(parent) * child."""
    return _rotation(parent).inv() * _rotation(child)


def flexion_adduction(rel: Rotation) -> AngleSample:
    # rel = Ry(y) * Rx(x) * Rz(z); x is flexion, y adduction, z is not modelled.
    y, x, _ = rel.as_euler("YXZ", degrees=True)
    return normalize_angle(x), normalize_angle(y)


def hinge_angle(rel: Rotation) -> float:
    """Angle-axis angle of rel (2 * acos(w)), normalized."""
    w = float(np.clip(rel.as_quat()[3], -1.0, 1.0))
    return normalize_angle(math.degrees(2.0 * math.acos(w)))


def _check_chain(joints: Sequence[JointPose], finger: str, chain: Tuple[int, ...]) -> None:
    required = max(chain) + 1
    if joints is None or len(joints) < required:
        raise InsufficientJointData(finger, required, 0 if joints is None else len(joints))


def thumb_angles(
    joints: Sequence[JointPose], chain: Tuple[int, ...]
) -> Tuple[float, float, float, float]:
    _check_chain(joints, "thumb", chain)
    cmc_flexion, cmc_adduction = flexion_adduction(relative_rotation(joints[chain[0]], joints[chain[1]]))
    mcp_flexion, mcp_adduction = flexion_adduction(relative_rotation(joints[chain[1]], joints[chain[2]]))
    return cmc_flexion, cmc_adduction, mcp_flexion, mcp_adduction


def finger_angles(
    joints: Sequence[JointPose], finger: str, chain: Tuple[int, ...]
) -> Tuple[float, float, float]:
    _check_chain(joints, finger, chain)
    mcp_flexion, mcp_adduction = flexion_adduction(relative_rotation(joints[chain[1]], joints[chain[2]]))

    # Poses share one reference frame, so the PIP reading is reported as
    # cumulative flexion along the finger: MCP flexion is added on top.
    pip_flexion = hinge_angle(relative_rotation(joints[chain[2]], joints[chain[3]]))
    pip_flexion += mcp_flexion
    return mcp_flexion, mcp_adduction, pip_flexion


def compute_hand_frame(
    joints: Sequence[JointPose],
    chains: Optional[Dict[str, Tuple[int, ...]]] = None,
) -> HandFrame:
    """
    Walk every finger chain and build the 16-value HandFrame.
    Any finger without enough joints aborts the whole frame.
    `chains` is expected to come from build_finger_chains.
    """
    if chains is None:
        chains = FINGER_CHAINS
    values = {}
    for finger in FINGER_ORDER:
        if finger == "thumb":
            values[finger] = thumb_angles(joints, chains[finger])
        else:
            values[finger] = finger_angles(joints, finger, chains[finger])
    return HandFrame(**values)
