from collections import defaultdict, deque
from typing import Dict, List


class LogSink:
    """
    Tagged message collector handed to every component that reports.
    log(source, message) appends; get(source) returns that tag's history
    in append order. History per tag is bounded.
    """

    def __init__(self, history: int = 200, echo: bool = True):
        self.history = max(1, int(history))
        self.echo = echo
        self._messages: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self.history))

    def log(self, source: str, message: str) -> None:
        self._messages[source].append(message)
        if self.echo:
            print(f"[{source}] {message}")

    def get(self, source: str) -> List[str]:
        if source not in self._messages:
            return []
        return list(self._messages[source])

    def latest(self, source: str, count: int = 1) -> List[str]:
        entries = self.get(source)
        return entries[-count:] if count > 0 else []

