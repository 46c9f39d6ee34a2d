"""
Scripted hand poses in the 25-joint layout, for smoke testing receivers
without a camera.
"""

from typing import Dict, Iterator, List

from scipy.spatial.transform import Rotation

from HandData import IDENTITY, HandData, JointPose
from JointTable import FINGER_JOINTS, FINGER_ORDER, JOINT_COUNT

# lateral offset (m) of each finger's chain from the wrist
_FINGER_OFFSET: Dict[str, float] = {
    "thumb": -0.035,
    "index": -0.02,
    "middle": 0.0,
    "ring": 0.018,
    "pinky": 0.034,
}
_SEGMENT = 0.03


def _bend(angle_deg: float):
    return tuple(float(v) for v in Rotation.from_euler("x", angle_deg, degrees=True).as_quat())


def straight_joints() -> List[JointPose]:
    """Flat hand: every joint shares the wrist orientation."""
    joints = [JointPose((0.0, 0.0, 0.0), IDENTITY) for _ in range(JOINT_COUNT)]
    for finger in FINGER_ORDER:
        for pos, joint in enumerate(FINGER_JOINTS[finger]):
            joints[joint] = JointPose((_FINGER_OFFSET[finger], 0.0, 0.02 + pos * _SEGMENT), IDENTITY)
    return joints


def bent_joints(fingers=("index", "middle", "ring", "pinky"), angle: float = 60.0) -> List[JointPose]:
    """
    Bend the listed fingers by `angle` about X at their primary joint
    (thumb CMC, MCP for the others); distal joints follow rigidly.
    """
    joints = straight_joints()
    rotation = _bend(angle)
    for finger in fingers:
        chain = FINGER_JOINTS[finger]
        first = 1 if finger == "thumb" else 2
        for joint in chain[first:]:
            joints[joint] = JointPose(joints[joint].position, rotation)
    return joints


def open_hand(side: str, timestamp: float = 0.0) -> HandData:
    return HandData.from_joints(side, straight_joints(), timestamp=timestamp)


def fist(side: str, angle: float = 60.0, timestamp: float = 0.0) -> HandData:
    return HandData.from_joints(side, bent_joints(angle=angle), timestamp=timestamp)


class SyntheticHandSource:
    """
    Endless open -> fist -> open cycle with a short tracking gap each cycle.
    Yields (HandData, dt) pairs at a fixed frame interval.
    """

    def __init__(self, side="Left", frame_dt=1.0 / 72.0, hold=1.0, gap=0.25):
        self.side = side
        self.frame_dt = frame_dt
        self.hold = hold
        self.gap = gap

    def __iter__(self) -> Iterator:
        t = 0.0
        period = 2.0 * self.hold + self.gap
        while True:
            phase = t % period
            if phase < self.hold:
                hand = open_hand(self.side, timestamp=t)
            elif phase < 2.0 * self.hold:
                hand = fist(self.side, timestamp=t)
            else:
                hand = HandData.not_tracked(self.side, timestamp=t)
            yield hand, self.frame_dt
            t += self.frame_dt
