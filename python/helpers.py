import copy
import json
import os
import time

DEFAULT_CONFIG = {
    "network": {"address": "255.255.255.255", "port": 9000},
    "scheduler": {"min_interval": 0.01},
    "classifier": {"bend_threshold": 40.0, "closure_threshold": 4, "pose_side": "Left"},
    "log": {"echo": True, "history": 200, "hud_lines": 6},
    "tracker": {
        "model_complexity": 1,
        "min_detection_confidence": 0.5,
        "min_tracking_confidence": 0.5,
        "max_num_hands": 2,
    },
    "debug": {"draw_landmarks": True, "show_log": True},
}


def merge_config(base, override):
    """Return a copy of base with override deep-merged into it."""
    merged = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            merged[k] = merge_config(merged[k], v)
        else:
            merged[k] = copy.deepcopy(v)
    return merged


def with_defaults(cfg):
    return merge_config(DEFAULT_CONFIG, cfg)


def load_config(path="config.json"):
    if not os.path.exists(path):
        print(f"[PY] config '{path}' not found, using defaults.")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        print("[PY] Failed to load config:", e)
        return {}


class ConfigWatcher:
    """
    Watches a JSON config file and reloads it when the file changes.
    Usage:
        watcher = ConfigWatcher("config.json")
        cfg = watcher.get_config()        # initial load
        # later:
        cfg = watcher.check_reload()      # returns new cfg or same dict
    """

    def __init__(self, path="config.json", min_check_interval=0.5, clock=time.time):
        self.path = path
        self._cfg = {}
        self._mtime = 0.0
        self._last_checked = 0.0
        self._min_check_interval = min_check_interval  # seconds between checks
        self._clock = clock
        self._load()  # load now

    def _load(self):
        try:
            if not os.path.exists(self.path):
                self._cfg = {}
                self._mtime = 0.0
                return
            m = os.path.getmtime(self.path)
            with open(self.path, "r", encoding="utf-8") as f:
                self._cfg = json.load(f)
            self._mtime = m
        except (OSError, ValueError) as e:
            print("[ConfigWatcher] failed to load config:", e)
            self._cfg = {}

    def get_config(self):
        return self._cfg

    def check_reload(self):
        """
        Call frequently (cheap). Will only stat the file every _min_check_interval seconds.
        Returns current config (reloaded if changed).
        """
        now = self._clock()
        if now - self._last_checked < self._min_check_interval:
            return self._cfg
        self._last_checked = now

        try:
            if not os.path.exists(self.path):
                # file missing -> keep existing config
                return self._cfg
            m = os.path.getmtime(self.path)
            if m != self._mtime:
                print(f"[ConfigWatcher] Detected {os.path.basename(self.path)} change, reloading...")
                self._load()
        except OSError as e:
            print("[ConfigWatcher] check_reload error:", e)

        return self._cfg
