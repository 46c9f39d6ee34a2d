"""
Text telemetry frames.

Every frame is one self-contained, comma-separated line:

    Left wrist:, 0.100, 1.200, -0.300, 0.000, 0.000, 0.000, 1.000
    Left hand:, 12.0, -3.5, ... (16 angles)
    Fist: closed
"""

from typing import Iterable

from HandData import HandFrame, PoseState, WristSample

FIST_TAG = "Fist"

ANGLE_LABELS = {
    "thumb": ("Thumb CMC Flexion", "Thumb CMC Adduction", "Thumb MCP Flexion", "Thumb MCP Adduction"),
    "index": ("Index MCP Flexion", "Index MCP Adduction", "Index PIP Flexion"),
    "middle": ("Middle MCP Flexion", "Middle MCP Adduction", "Middle PIP Flexion"),
    "ring": ("Ring MCP Flexion", "Ring MCP Adduction", "Ring PIP Flexion"),
    "pinky": ("Pinky MCP Flexion", "Pinky MCP Adduction", "Pinky PIP Flexion"),
}


def fmt(value: float, places: int) -> str:
    """Fixed-point text without a sign on zero ("-0.0" -> "0.0")."""
    text = f"{float(value):.{places}f}"
    if text.startswith("-") and float(text) == 0.0:
        text = text[1:]
    return text


def _join(tag: str, values: Iterable[float], places: int) -> str:
    return tag + "".join(f", {fmt(v, places)}" for v in values)


def encode_wrist(side: str, wrist: WristSample) -> str:
    return _join(f"{side} wrist:", list(wrist.position) + list(wrist.rotation), 3)


def encode_angles(side: str, frame: HandFrame) -> str:
    return _join(f"{side} hand:", frame.values(), 1)


def encode_pose(state: PoseState) -> str:
    return f"{FIST_TAG}: {state.value}"


# ---------- display text (log sink / HUD) ----------
def describe_wrist(side: str, wrist: WristSample) -> str:
    px, py, pz = wrist.position
    ex, ey, ez = wrist.euler
    qx, qy, qz, qw = wrist.rotation
    return (
        f"{side} Wrist Data:\n"
        f"Position: ({fmt(px, 3)}, {fmt(py, 3)}, {fmt(pz, 3)})\n"
        f"Rotation (Euler): ({fmt(ex, 1)}°, {fmt(ey, 1)}°, {fmt(ez, 1)}°)\n"
        f"Rotation (Quat): ({fmt(qx, 3)}, {fmt(qy, 3)}, {fmt(qz, 3)}, {fmt(qw, 3)})\n"
    )


def describe_angles(side: str, frame: HandFrame) -> str:
    lines = [f"{side} hand Angles:"]
    for finger, values in zip(HandFrame._fields, frame):
        for label, value in zip(ANGLE_LABELS[finger], values):
            lines.append(f"{label}: {fmt(value, 1)}°")
    return "\n".join(lines) + "\n"


def describe_pose(state: PoseState, bent_count: int, finger_count: int = 5) -> str:
    return f"Fist State: {state.value.upper()} (Bent fingers: {bent_count}/{finger_count})"
