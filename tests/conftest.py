import pytest

from LogSink import LogSink


class RecordingSender:
    """Stands in for a DatagramBroadcaster; keeps every line it is asked to send."""

    def __init__(self, fail_with=None):
        self.messages = []
        self.addr = None
        self.close_calls = 0
        self.fail_with = fail_with

    def send(self, message):
        if self.fail_with is not None:
            raise self.fail_with
        self.messages.append(message)
        return True

    def set_destination(self, host, port):
        self.addr = (host, port)

    def close(self):
        self.close_calls += 1


@pytest.fixture
def log():
    return LogSink(echo=False)


@pytest.fixture
def angle_sender():
    return RecordingSender()


@pytest.fixture
def pose_sender():
    return RecordingSender()


@pytest.fixture
def sender_factory():
    return RecordingSender
