from typing import Optional

from scipy.spatial.transform import Rotation

from HandData import HandData, WristSample


def extract_wrist(hand: HandData) -> Optional[WristSample]:
    """
    Position, display Euler angles and raw quaternion of the root pose.
    Returns None when tracking is invalid or the root pose is unavailable.
    """
    if hand is None or not hand.visible or hand.root is None:
        return None

    root = hand.root
    try:
        rotation = Rotation.from_quat(root.rotation)
    except ValueError:
        # zero-norm quaternion from the provider
        return None

    # Same axis convention as the joint angles, reported as x, y, z in [0, 360).
    y, x, z = rotation.as_euler("YXZ", degrees=True)
    euler = (float(x) % 360.0, float(y) % 360.0, float(z) % 360.0)
    position = tuple(float(v) for v in root.position)
    quat = tuple(float(v) for v in root.rotation)
    return WristSample(position=position, euler=euler, rotation=quat)
