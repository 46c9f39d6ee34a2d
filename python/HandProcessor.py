from contextlib import ExitStack

from Angles import InsufficientJointData, compute_hand_frame
from HandData import HandData, PoseState
from helpers import merge_config, with_defaults
from JointTable import FINGER_CHAINS, build_finger_chains
from LogSink import LogSink
from Network import FAIL_OPEN, FAIL_STOP, DatagramBroadcaster
from PoseClassifier import PoseClassifier
from Scheduler import UpdateGate
from Telemetry import (
    describe_angles,
    describe_pose,
    describe_wrist,
    encode_angles,
    encode_pose,
    encode_wrist,
)
from Wrist import extract_wrist


# ==========================================
# PER-HAND PIPELINE
# ==========================================
class HandProcessor:
    """
    Runs the telemetry pipeline for one hand side.

    process(hand, dt) is called once per tracking update. Passes are rate
    limited by an UpdateGate; each pass sends joint angles and the wrist pose
    through a fail-open sender. The open/closed state is classified for every
    side, but only the side named by cfg["classifier"]["pose_side"] owns a
    fail-stop pose sender and puts `Fist:` lines on the wire, so a receiver
    never sees two hands on one untagged stream.
    """

    def __init__(self, side, cfg=None, log=None, angle_sender=None, pose_sender=None, chains=None):
        self.side = side
        self.cfg = with_defaults(cfg)
        self.log = log if log is not None else LogSink()
        self.chains = FINGER_CHAINS if chains is None else build_finger_chains(chains)

        self.gate = UpdateGate(self.cfg["scheduler"]["min_interval"])
        self.classifier = PoseClassifier(self.cfg, chains=self.chains)

        self.last_frame = None
        self.last_wrist = None

        # Transports are released exactly once, also when the second fails to open.
        with ExitStack() as stack:
            self.angle_sender = angle_sender or self._open_sender(FAIL_OPEN)
            stack.callback(self.angle_sender.close)
            self.pose_sender = pose_sender
            if self.pose_sender is None and self.reports_pose:
                self.pose_sender = self._open_sender(FAIL_STOP)
            if self.pose_sender is not None:
                stack.callback(self.pose_sender.close)
            self._resources = stack.pop_all()
        self._closed = False

        self.log.log(self.side, "Hand telemetry active")

    def _open_sender(self, policy):
        net = self.cfg["network"]
        return DatagramBroadcaster(
            host=net["address"],
            port=net["port"],
            policy=policy,
            log=self.log,
            source=self.side,
        )

    @property
    def reports_pose(self):
        return self.cfg["classifier"].get("pose_side") == self.side

    # ---------- configuration / lifecycle ----------
    def update_config(self, cfg):
        if not cfg:
            return
        was_reporting = self.reports_pose
        self.cfg = merge_config(self.cfg, cfg)
        self.gate.min_interval = max(0.0, float(self.cfg["scheduler"]["min_interval"]))
        self.classifier.update_config(self.cfg)

        if self.reports_pose and not was_reporting:
            if self.pose_sender is None and not self._closed:
                self.pose_sender = self._open_sender(FAIL_STOP)
                self._resources.callback(self.pose_sender.close)
            # report the current state on the next pass
            self.classifier.reset()

        net = self.cfg["network"]
        for sender in (self.angle_sender, self.pose_sender):
            if sender is not None:
                sender.set_destination(net["address"], net["port"])

    @property
    def state(self):
        return self.classifier.state

    @property
    def closed(self):
        return self._closed

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._resources.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ---------- per update ----------
    def process(self, hand, dt) -> bool:
        """
        Entry point for one tracking update.
        Returns True when the gate let a pass run. Never raises.
        """
        if self._closed:
            return False
        try:
            if not self.gate.tick(dt):
                return False
        except (TypeError, ValueError) as e:
            self.log.log(self.side, f"Bad update interval {dt!r}: {e}")
            return False
        try:
            self._run(hand)
        except Exception as e:
            self.log.log(self.side, f"Update failed: {type(e).__name__}: {e}")
        return True

    def _run(self, hand):
        if hand is None or hand.handedness != self.side:
            got = getattr(hand, "handedness", None)
            self.log.log(self.side, f"Ignoring sample for '{got}' hand")
            return
        # A failing stage does not stop the ones after it.
        for stage in (self._process_angles, self._process_wrist, self._process_pose):
            try:
                stage(hand)
            except Exception as e:
                self.log.log(self.side, f"Update failed: {type(e).__name__}: {e}")

    def _process_angles(self, hand):
        if not hand.visible:
            self.log.log(self.side, "Hand tracking not valid")
            return
        if hand.joints is None:
            self.log.log(self.side, "Failed to get joint poses")
            return
        try:
            frame = compute_hand_frame(hand.joints, self.chains)
        except InsufficientJointData as e:
            self.log.log(self.side, str(e))
            return
        except ValueError as e:
            self.log.log(self.side, f"Failed to compute joint angles: {e}")
            return
        self.last_frame = frame
        self.log.log(self.side, describe_angles(self.side, frame))
        self.angle_sender.send(encode_angles(self.side, frame))

    def _process_wrist(self, hand):
        if not hand.visible:
            return
        wrist = extract_wrist(hand)
        if wrist is None:
            self.log.log(self.side, "Failed to get wrist pose")
            return
        self.last_wrist = wrist
        self.log.log(self.side, describe_wrist(self.side, wrist))
        self.angle_sender.send(encode_wrist(self.side, wrist))

    def _process_pose(self, hand):
        new_state = self.classifier.classify(hand)
        for finger in self.classifier.missing:
            self.log.log(self.side, f"Insufficient joint data for {finger.capitalize()}")
        if new_state is None:
            return

        if new_state == PoseState.NOT_TRACKED:
            self.log.log(self.side, "State: Not Tracked")
        elif new_state == PoseState.ERROR:
            self.log.log(self.side, "State: Failed to get joint poses")
        else:
            self.log.log(self.side, describe_pose(new_state, self.classifier.bent_count))
            if self.reports_pose and self.pose_sender is not None:
                self.pose_sender.send(encode_pose(new_state))


def dispatch_hands(processors, hands, dt, timestamp=0.0):
    """
    Route one tracking update to the processor of each side.
    Sides with no detected hand receive an untracked sample.
    Returns the sides whose gate let a pass run.
    """
    by_side = {}
    for hand in hands:
        by_side.setdefault(hand.handedness, hand)
    ran = []
    for side, proc in processors.items():
        hand = by_side.get(side) or HandData.not_tracked(side, timestamp)
        if proc.process(hand, dt):
            ran.append(side)
    return ran
