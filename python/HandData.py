from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

Vec3 = Tuple[float, float, float]
Quat = Tuple[float, float, float, float]  # (x, y, z, w)

IDENTITY: Quat = (0.0, 0.0, 0.0, 1.0)


class JointPose(NamedTuple):
    position: Vec3
    rotation: Quat = IDENTITY


class PoseState(Enum):
    UNKNOWN = "unknown"
    NOT_TRACKED = "not tracked"
    ERROR = "error"
    OPEN = "open"
    CLOSED = "closed"


class HandFrame(NamedTuple):
    """
    Angles (degrees) produced by one extraction pass.
    thumb: (cmc flexion, cmc adduction, mcp flexion, mcp adduction)
    other fingers: (mcp flexion, mcp adduction, compensated pip flexion)
    """

    thumb: Tuple[float, float, float, float]
    index: Tuple[float, float, float]
    middle: Tuple[float, float, float]
    ring: Tuple[float, float, float]
    pinky: Tuple[float, float, float]

    def values(self) -> List[float]:
        """All 16 values in wire order."""
        out: List[float] = []
        for finger in self:
            out.extend(finger)
        return out

    def primary_flexions(self) -> List[float]:
        """Thumb CMC flexion, then MCP flexion of index..pinky."""
        return [finger[0] for finger in self]


class WristSample(NamedTuple):
    position: Vec3
    euler: Vec3  # display only, degrees in [0, 360)
    rotation: Quat


class HandData:
    """
    Simple container for one tracking update of one hand.
    """

    def __init__(self, handedness="Unknown"):
        # "Left" / "Right"
        self.handedness = handedness

        # tracking validity flag
        self.visible = False

        # 25 JointPose entries, or None when the provider failed to supply them
        self.joints: Optional[List[JointPose]] = None

        # wrist/root pose, or None when unavailable
        self.root: Optional[JointPose] = None

        # absolute time (seconds)
        self.timestamp = 0.0

        # raw mediapipe landmark object (for drawing)
        self.raw_landmarks = None

    @classmethod
    def from_joints(cls, handedness, joints, root=None, visible=True, timestamp=0.0):
        hand = cls(handedness)
        hand.visible = visible
        hand.joints = list(joints) if joints is not None else None
        if root is None and hand.joints:
            root = hand.joints[0]
        hand.root = root
        hand.timestamp = timestamp
        return hand

    @classmethod
    def not_tracked(cls, handedness, timestamp=0.0):
        hand = cls(handedness)
        hand.timestamp = timestamp
        return hand
