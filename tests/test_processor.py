import socket

import pytest

from HandData import HandData, PoseState
from HandProcessor import HandProcessor, dispatch_hands
from Network import FAIL_STOP, DatagramBroadcaster
from SyntheticHand import fist, open_hand, straight_joints

DT = 0.02  # above the default 0.01 s gate


@pytest.fixture
def processor(log, angle_sender, pose_sender):
    proc = HandProcessor("Left", log=log, angle_sender=angle_sender, pose_sender=pose_sender)
    yield proc
    proc.close()


def test_straight_fist_straight_sequence(processor, angle_sender, pose_sender):
    for hand in (open_hand("Left"), fist("Left"), open_hand("Left")):
        assert processor.process(hand, DT)

    # Unknown -> Open is a transition, so the first frame is reported too.
    assert pose_sender.messages == ["Fist: open", "Fist: closed", "Fist: open"]

    # per pass: angle frame then wrist frame
    assert len(angle_sender.messages) == 6
    assert angle_sender.messages[0] == (
        "Left hand:, " + ", ".join(["0.0"] * 16)
    )
    assert angle_sender.messages[1] == (
        "Left wrist:, 0.000, 0.000, 0.000, 0.000, 0.000, 0.000, 1.000"
    )
    closed_frame = angle_sender.messages[2].split(", ")[1:]
    assert closed_frame[4:7] == ["60.0", "0.0", "60.0"]


def test_repeated_state_sends_nothing_more(processor, pose_sender):
    for _ in range(5):
        processor.process(fist("Left"), DT)
    assert pose_sender.messages == ["Fist: closed"]
    assert processor.state == PoseState.CLOSED


def test_gate_skips_fast_updates(processor, angle_sender, pose_sender):
    assert processor.process(open_hand("Left"), 0.004) is False
    assert processor.process(open_hand("Left"), 0.004) is False
    assert angle_sender.messages == []
    assert pose_sender.messages == []
    assert processor.process(open_hand("Left"), 0.004) is True
    assert pose_sender.messages == ["Fist: open"]


def test_untracked_pass_logs_and_sends_nothing(processor, log, angle_sender, pose_sender):
    processor.process(HandData.not_tracked("Left"), DT)
    assert angle_sender.messages == []
    assert pose_sender.messages == []
    assert processor.state == PoseState.NOT_TRACKED
    messages = log.get("Left")
    assert "Hand tracking not valid" in messages
    assert "State: Not Tracked" in messages


def test_tracking_loss_then_recovery_reports_state_again(processor, pose_sender):
    processor.process(fist("Left"), DT)
    processor.process(HandData.not_tracked("Left"), DT)
    processor.process(fist("Left"), DT)
    assert pose_sender.messages == ["Fist: closed", "Fist: closed"]


def test_retrieval_failure_is_error_state(processor, log, angle_sender, pose_sender):
    broken = HandData.from_joints("Left", None)
    processor.process(broken, DT)
    assert processor.state == PoseState.ERROR
    assert angle_sender.messages == []
    assert pose_sender.messages == []
    assert "Failed to get joint poses" in log.get("Left")
    assert "Failed to get wrist pose" in log.get("Left")


def test_insufficient_joints_sends_no_angle_frame(processor, log, angle_sender):
    hand = HandData.from_joints("Left", straight_joints()[:20])
    processor.process(hand, DT)
    assert not any(m.startswith("Left hand:") for m in angle_sender.messages)
    # the root pose is still available
    assert [m for m in angle_sender.messages if m.startswith("Left wrist:")]
    messages = log.get("Left")
    assert any(m.startswith("Insufficient joint data for Pinky") for m in messages)


def test_errors_never_escape(log, sender_factory):
    angle = sender_factory(fail_with=RuntimeError("boom"))
    pose = sender_factory()
    with HandProcessor("Left", log=log, angle_sender=angle, pose_sender=pose) as proc:
        assert proc.process(open_hand("Left"), DT) is True
    assert any(m.startswith("Update failed: RuntimeError") for m in log.get("Left"))


def test_other_side_ignored(processor, log, angle_sender):
    processor.process(open_hand("Right"), DT)
    assert angle_sender.messages == []
    assert "Ignoring sample for 'Right' hand" in log.get("Left")


def test_transports_released_once(log, angle_sender, pose_sender):
    proc = HandProcessor("Left", log=log, angle_sender=angle_sender, pose_sender=pose_sender)
    with proc:
        pass
    proc.close()
    assert proc.closed
    assert angle_sender.close_calls == 1
    assert pose_sender.close_calls == 1
    assert proc.process(open_hand("Left"), DT) is False


def test_partial_init_releases_opened_transport(monkeypatch, log, angle_sender):
    def fail_to_open(self, policy):
        raise OSError("no socket for %s" % policy)

    monkeypatch.setattr(HandProcessor, "_open_sender", fail_to_open)
    with pytest.raises(OSError):
        HandProcessor("Left", log=log, angle_sender=angle_sender)
    assert angle_sender.close_calls == 1


def test_update_config(processor, angle_sender, pose_sender):
    processor.update_config(
        {
            "network": {"address": "127.0.0.1", "port": 9100},
            "scheduler": {"min_interval": 0.05},
            "classifier": {"closure_threshold": 5},
        }
    )
    assert angle_sender.addr == ("127.0.0.1", 9100)
    assert pose_sender.addr == ("127.0.0.1", 9100)
    assert processor.gate.min_interval == 0.05
    assert processor.classifier.closure_threshold == 5
    assert processor.classifier.bend_threshold == 40.0

    assert processor.process(fist("Left"), 0.06)
    assert pose_sender.messages == ["Fist: open"]


def test_bad_dt_is_logged_not_raised(processor, log, pose_sender):
    assert processor.process(open_hand("Left"), None) is False
    assert processor.process(open_hand("Left"), "soon") is False
    assert any(m.startswith("Bad update interval None") for m in log.get("Left"))
    assert pose_sender.messages == []

    assert processor.process(open_hand("Left"), DT) is True
    assert pose_sender.messages == ["Fist: open"]


def test_unusable_joint_rotation_keeps_later_stages(processor, log, angle_sender, pose_sender):
    joints = straight_joints()
    joints[6] = joints[6]._replace(rotation=(0.0, 0.0, 0.0, 0.0))
    processor.process(HandData.from_joints("Left", joints), DT)

    assert not any(m.startswith("Left hand:") for m in angle_sender.messages)
    assert [m for m in angle_sender.messages if m.startswith("Left wrist:")]
    assert processor.state == PoseState.ERROR
    assert pose_sender.messages == []
    messages = log.get("Left")
    assert any(m.startswith("Failed to compute joint angles") for m in messages)
    assert "State: Failed to get joint poses" in messages
    assert not any(m.startswith("Update failed") for m in messages)


def test_malformed_chains_rejected(log, angle_sender, pose_sender):
    with pytest.raises(ValueError, match="strictly increasing"):
        HandProcessor(
            "Left",
            log=log,
            angle_sender=angle_sender,
            pose_sender=pose_sender,
            chains={
                "thumb": (1, 2, 3, 4),
                "index": (5, 7, 6, 8, 9),
                "middle": (10, 11, 12, 13, 14),
                "ring": (15, 16, 17, 18, 19),
                "pinky": (20, 21, 22, 23, 24),
            },
        )


def test_dispatch_marks_missing_side_untracked(log, sender_factory):
    senders = {side: (sender_factory(), sender_factory()) for side in ("Left", "Right")}
    processors = {
        side: HandProcessor(side, log=log, angle_sender=a, pose_sender=p)
        for side, (a, p) in senders.items()
    }
    try:
        ran = dispatch_hands(processors, [fist("Left")], DT)
        assert sorted(ran) == ["Left", "Right"]
        assert processors["Left"].state == PoseState.CLOSED
        assert processors["Right"].state == PoseState.NOT_TRACKED
        assert senders["Right"][0].messages == []
    finally:
        for proc in processors.values():
            proc.close()


def test_two_hands_share_one_wire(log, sender_factory):
    wire = sender_factory()
    processors = {
        side: HandProcessor(side, log=log, angle_sender=wire, pose_sender=wire)
        for side in ("Left", "Right")
    }
    try:
        for _ in range(2):
            dispatch_hands(processors, [fist("Left"), open_hand("Right")], DT)
    finally:
        for proc in processors.values():
            proc.close()

    # only the configured pose side reports, once per transition
    assert [m for m in wire.messages if m.startswith("Fist:")] == ["Fist: closed"]
    assert processors["Right"].state == PoseState.OPEN
    assert [m.split(":")[0] for m in wire.messages if not m.startswith("Fist:")] == [
        "Left hand",
        "Left wrist",
        "Right hand",
        "Right wrist",
    ] * 2


def test_pose_side_follows_config(log, angle_sender, pose_sender):
    with HandProcessor("Right", log=log, angle_sender=angle_sender, pose_sender=pose_sender) as proc:
        assert not proc.reports_pose
        proc.process(fist("Right"), DT)
        assert proc.state == PoseState.CLOSED
        assert pose_sender.messages == []

        proc.update_config({"classifier": {"pose_side": "Right"}})
        assert proc.reports_pose
        proc.process(fist("Right"), DT)
    assert pose_sender.messages == ["Fist: closed"]


def test_pose_sender_opened_only_for_pose_side(log, angle_sender):
    cfg = {"network": {"address": "127.0.0.1", "port": 9000}}
    with HandProcessor("Right", cfg, log=log, angle_sender=angle_sender) as proc:
        assert proc.pose_sender is None
        proc.update_config({"classifier": {"pose_side": "Right"}})
        assert isinstance(proc.pose_sender, DatagramBroadcaster)
        assert proc.pose_sender.policy == FAIL_STOP
    assert proc.pose_sender.closed


def test_pose_telemetry_over_udp(log):
    receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    receiver.bind(("127.0.0.1", 0))
    receiver.settimeout(2.0)
    cfg = {
        "network": {"address": "127.0.0.1", "port": receiver.getsockname()[1]},
        "classifier": {"pose_side": "Right"},
    }
    try:
        with HandProcessor("Right", cfg, log=log) as proc:
            assert isinstance(proc.pose_sender, DatagramBroadcaster)
            assert proc.pose_sender.policy == FAIL_STOP
            proc.process(fist("Right"), DT)

        lines = [receiver.recvfrom(4096)[0].decode("utf-8") for _ in range(3)]
    finally:
        receiver.close()

    assert lines[0].startswith("Right hand:, ")
    assert lines[1].startswith("Right wrist:, ")
    assert lines[2] == "Fist: closed"
