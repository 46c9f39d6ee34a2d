"""
MediaPipe landmarks -> 25-joint hand skeleton with per-joint orientation.

MediaPipe reports 21 positions only. Each skeleton joint gets the frame of the
bone arriving at it: Z along the bone, X the palm's lateral axis (towards the
thumb on a right hand) projected off the bone, Y = Z x X (back of the hand).
Curling towards the palm is then a positive rotation about X.
"""

from typing import List, MutableMapping, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation

from HandData import JointPose
from JointTable import FINGER_JOINTS, FINGER_ORDER, JOINT_COUNT, WRIST_JOINT

LANDMARK_COUNT = 21

# skeleton joint -> MediaPipe landmark.
# Finger metacarpal bases are not tracked by MediaPipe and sit at the wrist.
LANDMARK_FOR_JOINT: Tuple[int, ...] = (
    0,
    1, 2, 3, 4,
    0, 5, 6, 7, 8,
    0, 9, 10, 11, 12,
    0, 13, 14, 15, 16,
    0, 17, 18, 19, 20,
)


def _build_parents() -> Tuple[int, ...]:
    parents = [-1] * JOINT_COUNT
    for finger in FINGER_ORDER:
        chain = FINGER_JOINTS[finger]
        parents[chain[0]] = WRIST_JOINT
        for prev, joint in zip(chain, chain[1:]):
            parents[joint] = prev
    return tuple(parents)


JOINT_PARENT = _build_parents()

LandmarkLike = Union[Sequence[float], MutableMapping[str, float]]


def _extract_point(entry: Union[LandmarkLike, object]) -> np.ndarray:
    if hasattr(entry, "x") and hasattr(entry, "y") and hasattr(entry, "z"):
        return np.array([entry.x, entry.y, entry.z], dtype=float)
    if isinstance(entry, dict):
        return np.array([entry.get("x", 0.0), entry.get("y", 0.0), entry.get("z", 0.0)], dtype=float)
    if isinstance(entry, (list, tuple, np.ndarray)) and len(entry) >= 3:
        return np.array(entry[:3], dtype=float)
    raise ValueError("Unsupported landmark format; expected object with x,y,z or sequence of 3 values.")


def _unit(v: np.ndarray) -> Optional[np.ndarray]:
    n = float(np.linalg.norm(v))
    if n <= 1e-9:
        return None
    return v / n


def _frame(z: np.ndarray, lateral: np.ndarray) -> Optional[np.ndarray]:
    x = _unit(lateral - np.dot(lateral, z) * z)
    if x is None:
        return None
    y = np.cross(z, x)
    return np.column_stack([x, y, z])


def palm_frame(points: np.ndarray, handedness: str) -> Optional[np.ndarray]:
    """
    Root orientation: Z wrist -> middle MCP, X across the knuckles.
    MediaPipe labels assume a mirrored image, so the geometric chirality of
    the landmarks is the opposite of the label.
    """
    forward = _unit(points[9] - points[0])
    across = _unit(points[5] - points[17])  # pinky MCP -> index MCP
    if forward is None or across is None:
        return None
    sign = -1.0 if (handedness or "").lower() == "right" else 1.0
    return _frame(forward, sign * across)


def _to_pose(position: np.ndarray, frame: np.ndarray) -> JointPose:
    quat = Rotation.from_matrix(frame).as_quat()
    return JointPose(
        position=tuple(float(v) for v in position),
        rotation=tuple(float(v) for v in quat),
    )


def landmarks_to_joints(landmarks: Sequence[object], handedness: str) -> Optional[List[JointPose]]:
    """
    Build the 25 JointPose list, or None when the landmarks are incomplete
    or the palm is degenerate.
    """
    if landmarks is None or len(landmarks) < LANDMARK_COUNT:
        return None
    points = np.array([_extract_point(landmarks[i]) for i in range(LANDMARK_COUNT)])

    palm = palm_frame(points, handedness)
    if palm is None:
        return None
    lateral = palm[:, 0]

    frames: List[np.ndarray] = [palm] * JOINT_COUNT
    for joint in range(1, JOINT_COUNT):
        parent = JOINT_PARENT[joint]
        bone = _unit(points[LANDMARK_FOR_JOINT[joint]] - points[LANDMARK_FOR_JOINT[parent]])
        frame = None
        if bone is not None:
            frame = _frame(bone, lateral)
            if frame is None:
                # bone running along the lateral axis
                frame = _frame(bone, frames[parent][:, 0])
        frames[joint] = frame if frame is not None else frames[parent]

    return [_to_pose(points[LANDMARK_FOR_JOINT[j]], frames[j]) for j in range(JOINT_COUNT)]
