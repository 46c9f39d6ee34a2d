import mediapipe as mp
from HandData import HandData
from Skeleton import landmarks_to_joints


class HandTracker:
    def __init__(
        self,
        cfg,
    ):
        self.cfg = cfg
        tcfg = cfg.get("tracker", {})

        self.mp_hands = mp.solutions.hands.Hands(
            model_complexity=tcfg.get("model_complexity", 1),
            min_detection_confidence=tcfg.get("min_detection_confidence", 0.5),
            min_tracking_confidence=tcfg.get("min_tracking_confidence", 0.5),
            max_num_hands=tcfg.get("max_num_hands", 2),
        )

    def process_frame(self, frame_rgb, timestamp):
        """
        Process an RGB frame (BGR->RGB already done by caller).
        Returns list of HandData instances in the 25-joint layout, one per detected hand.
        A hand whose landmarks cannot be turned into joint poses keeps joints=None.
        timestamp: absolute time (seconds) for this frame.
        """
        result = self.mp_hands.process(frame_rgb)
        hands = []

        if not result.multi_hand_landmarks:
            return hands

        world = result.multi_hand_world_landmarks or [None] * len(result.multi_hand_landmarks)
        for lm, world_lm, handed in zip(result.multi_hand_landmarks, world, result.multi_handedness):
            label = handed.classification[0].label
            # metric world landmarks when available, image-normalized otherwise
            points = world_lm.landmark if world_lm is not None else lm.landmark
            joints = landmarks_to_joints(points, label)

            h = HandData.from_joints(label, joints, timestamp=timestamp)
            h.raw_landmarks = lm
            hands.append(h)

        return hands

    def close(self):
        self.mp_hands.close()
