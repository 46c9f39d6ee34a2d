import cv2
import mediapipe as mp

mp_drawing = mp.solutions.drawing_utils
mp_styles = mp.solutions.drawing_styles


# ---------- debug drawing ----------
def draw_hand_debug(frame, hand_data):
    """Draw the MediaPipe landmarks of a single hand."""
    if hand_data is None or hand_data.raw_landmarks is None:
        return
    mp_drawing.draw_landmarks(
        frame,
        hand_data.raw_landmarks,
        mp.solutions.hands.HAND_CONNECTIONS,
        mp_styles.get_default_hand_landmarks_style(),
        mp_styles.get_default_hand_connections_style(),
    )


def hud_lines(log, source, count):
    """Last `count` text lines logged under `source`."""
    lines = []
    for entry in log.latest(source, count):
        lines.extend(line for line in entry.splitlines() if line)
    return lines[-count:] if count > 0 else []


def draw_text_block(frame, lines, x0, y0, color=(0, 255, 0), font_scale=0.5, thickness=1, dy=18):
    for i, line in enumerate(lines):
        y = y0 + i * dy
        (tw, th), baseline = cv2.getTextSize(line, cv2.FONT_HERSHEY_SIMPLEX, font_scale, thickness)
        cv2.rectangle(frame, (x0 - 2, y - th - 2), (x0 + tw + 2, y + baseline), (0, 0, 0), -1)
        cv2.putText(
            frame,
            line,
            (x0, y),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            color,
            thickness,
            cv2.LINE_AA,
        )


def draw_hud(frame, log, processors, count=6):
    """
    One text column per hand side: current state, then the latest log lines.
    Left side column on the left, Right on the right.
    """
    h, w, _ = frame.shape
    for col, (side, proc) in enumerate(sorted(processors.items())):
        lines = [f"{side}: {proc.state.value}"] + hud_lines(log, side, count)
        x0 = 10 if col == 0 else w // 2 + 10
        draw_text_block(frame, lines, x0, 30)
