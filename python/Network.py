import socket

FAIL_OPEN = "fail-open"  # keep sending after a failed datagram
FAIL_STOP = "fail-stop"  # stop sending for the rest of the session


# ==========================================
# UDP TELEMETRY SENDER
# ==========================================
class DatagramBroadcaster:
    """
    Send-only UDP socket. send() never raises; failures go to the log sink
    and are handled according to the policy.
    """

    def __init__(self, host="255.255.255.255", port=9000, policy=FAIL_OPEN, log=None, source="NET"):
        if policy not in (FAIL_OPEN, FAIL_STOP):
            raise ValueError(f"Unknown send policy: {policy}")
        self.addr = (host, int(port))
        self.policy = policy
        self.log = log
        self.source = source
        self.sock = None
        self.enabled = False
        self.sent = 0
        self.failures = 0
        self._setup_socket()

    def _setup_socket(self):
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        self.sock = sock
        self.enabled = True
        self._report(f"UDP sender ready for {self.addr[0]}:{self.addr[1]} ({self.policy})")

    def _report(self, message):
        if self.log is not None:
            self.log.log(self.source, message)
        else:
            print(f"[NET] {message}")

    @property
    def closed(self):
        return self.sock is None

    def set_destination(self, host, port):
        self.addr = (host, int(port))

    def send(self, message: str) -> bool:
        """Fire one datagram. Returns True when the OS accepted it."""
        if self.sock is None or not self.enabled:
            return False
        try:
            self.sock.sendto(message.encode("utf-8"), self.addr)
        except OSError as e:
            self.failures += 1
            self._report(f"UDP Send Error: {e}")
            if self.policy == FAIL_STOP:
                self.enabled = False
                self._report("UDP sending disabled for this session")
            return False
        self.sent += 1
        return True

    def close(self):
        if self.sock is None:
            return
        sock, self.sock = self.sock, None
        self.enabled = False
        sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
