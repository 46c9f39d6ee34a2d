from typing import Dict, List, Optional, Sequence

from Angles import flexion_adduction, relative_rotation
from HandData import HandData, JointPose, PoseState
from JointTable import FINGER_CHAINS, FINGER_ORDER, build_finger_chains


def primary_flexions(
    joints: Sequence[JointPose], chains=None
) -> Dict[str, Optional[float]]:
    """
    Thumb CMC flexion and MCP flexion of the other fingers.
    A finger whose chain is not covered by the pose list maps to None.
    `chains` is expected to come from build_finger_chains.
    """
    if chains is None:
        chains = FINGER_CHAINS
    out: Dict[str, Optional[float]] = {}
    for finger in FINGER_ORDER:
        chain = chains[finger]
        # thumb: CMC -> MCP, others: MCP -> PIP
        parent, child = (chain[0], chain[1]) if finger == "thumb" else (chain[1], chain[2])
        if len(joints) <= max(chain):
            out[finger] = None
            continue
        flexion, _ = flexion_adduction(relative_rotation(joints[parent], joints[child]))
        out[finger] = flexion
    return out


class PoseClassifier:
    """
    Open/closed hand classification from per-finger flexion.
    classify() reports a state only when it differs from the previous one.
    """

    def __init__(self, cfg=None, chains=None):
        self.cfg = {
            "classifier": {
                "bend_threshold": 40.0,
                "closure_threshold": 4,
            },
        }
        self.chains = FINGER_CHAINS if chains is None else build_finger_chains(chains)
        self.update_config(cfg or {})

        self.state = PoseState.UNKNOWN
        self.bent_count = 0
        self.missing: List[str] = []

    def update_config(self, cfg):
        for k, v in (cfg or {}).items():
            if isinstance(v, dict):
                self.cfg.setdefault(k, {}).update(v)
            else:
                self.cfg[k] = v

        c = self.cfg.get("classifier", {})
        self.bend_threshold = float(c.get("bend_threshold", 40.0))
        self.closure_threshold = int(c.get("closure_threshold", 4))

    def reset(self):
        """Start of a new tracking session."""
        self.state = PoseState.UNKNOWN
        self.bent_count = 0
        self.missing = []

    def is_bent(self, flexion: Optional[float]) -> bool:
        return flexion is not None and flexion > self.bend_threshold

    def count_bent(self, flexions: Dict[str, Optional[float]]) -> int:
        return sum(1 for value in flexions.values() if self.is_bent(value))

    def state_for_count(self, count: int) -> PoseState:
        return PoseState.CLOSED if count >= self.closure_threshold else PoseState.OPEN

    def evaluate(self, hand: HandData) -> PoseState:
        """Classify one sample without touching the stored state."""
        self.missing = []
        self.bent_count = 0
        if not hand.visible:
            return PoseState.NOT_TRACKED
        if hand.joints is None:
            return PoseState.ERROR

        try:
            flexions = primary_flexions(hand.joints, self.chains)
        except ValueError:
            # unusable rotation (zero quaternion) from the provider
            return PoseState.ERROR
        self.missing = [name for name, value in flexions.items() if value is None]
        self.bent_count = self.count_bent(flexions)
        return self.state_for_count(self.bent_count)

    def classify(self, hand: HandData) -> Optional[PoseState]:
        """
        Run one classification pass.
        Returns the new state on a transition, None when nothing changed.
        """
        new_state = self.evaluate(hand)
        if new_state == self.state:
            return None
        self.state = new_state
        return new_state
