import time
import cv2
import threading
from contextlib import ExitStack
from queue import Queue, Empty

from HandProcessor import HandProcessor, dispatch_hands
from HandTracker import HandTracker
from LogSink import LogSink
from Overlay import draw_hand_debug, draw_hud
from helpers import ConfigWatcher, load_config, with_defaults


# --------------------------------------------------------
# Queue for latest frame only (overwrite when full)
# --------------------------------------------------------
FRAME_QUEUE_MAX = 1
SIDES = ("Left", "Right")


# --------------------------------------------------------
# CAPTURE THREAD
# --------------------------------------------------------
def capture_thread(frame_queue, stop_event, cfg):
    cap = cv2.VideoCapture(0)
    if not cap.isOpened():
        print("[PY] ERROR: Cannot open camera")
        stop_event.set()
        return

    tracker = HandTracker(cfg)

    print("[PY] Capture thread started.")

    try:
        while not stop_event.is_set():
            ok, frame = cap.read()
            if not ok:
                time.sleep(0.01)
                continue

            now = time.time()

            # Mirror view, as MediaPipe handedness labels expect.
            frame = cv2.flip(frame, 1)
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            hands = tracker.process_frame(rgb, now)

            # Keep only the latest sample (frame, hands, timestamp)
            if frame_queue.full():
                try:
                    frame_queue.get_nowait()  # remove older frame
                except Empty:
                    pass
            frame_queue.put_nowait((frame, hands, now))
    finally:
        tracker.close()
        cap.release()
        print("[PY] Capture thread exiting.")


# --------------------------------------------------------
# TELEMETRY THREAD
# --------------------------------------------------------
def telemetry_thread(frame_queue, stop_event, cfg, config_path="config.json"):
    cfg_watcher = ConfigWatcher(config_path)
    raw_cfg = cfg_watcher.get_config() or cfg or {}
    current_cfg = with_defaults(raw_cfg)

    log_cfg = current_cfg["log"]
    log = LogSink(history=log_cfg["history"], echo=log_cfg["echo"])

    debug_window = "Hand Telemetry"
    cv2.namedWindow(debug_window, cv2.WINDOW_NORMAL)

    print("[PY] Telemetry thread started.")

    with ExitStack() as stack:
        processors = {
            side: stack.enter_context(HandProcessor(side, current_cfg, log=log))
            for side in SIDES
        }
        last_time = None

        while not stop_event.is_set():
            try:
                frame, hands, timestamp = frame_queue.get(timeout=0.1)
            except Empty:
                continue

            new_cfg = cfg_watcher.check_reload()
            if new_cfg and new_cfg != raw_cfg:
                raw_cfg = new_cfg
                current_cfg = with_defaults(raw_cfg)
                for proc in processors.values():
                    proc.update_config(raw_cfg)

            dt = 0.0 if last_time is None else timestamp - last_time
            last_time = timestamp

            dispatch_hands(processors, hands, dt, timestamp)

            debug_cfg = current_cfg["debug"]
            if debug_cfg.get("draw_landmarks", True):
                for h in hands:
                    draw_hand_debug(frame, h)
            if debug_cfg.get("show_log", True):
                draw_hud(frame, log, processors, current_cfg["log"]["hud_lines"])

            cv2.imshow(debug_window, frame)
            if cv2.waitKey(1) & 0xFF == 27:
                stop_event.set()
                break

    cv2.destroyAllWindows()
    print("[PY] Telemetry thread exiting.")


# --------------------------------------------------------
# MAIN ENTRY
# --------------------------------------------------------
def main(config_path="config.json"):
    cfg = load_config(config_path)
    if not cfg:
        print(f"[PY] WARNING: no {config_path} or failed to load, using defaults.")
    cfg = with_defaults(cfg)

    frame_queue = Queue(maxsize=FRAME_QUEUE_MAX)
    stop_event = threading.Event()

    # --------------- start threads ----------------
    cap_thread = threading.Thread(
        target=capture_thread, args=(frame_queue, stop_event, cfg), daemon=True
    )
    tel_thread = threading.Thread(
        target=telemetry_thread, args=(frame_queue, stop_event, cfg, config_path), daemon=True
    )

    cap_thread.start()
    tel_thread.start()

    # Keep main thread alive
    try:
        while not stop_event.is_set():
            time.sleep(0.1)
    except KeyboardInterrupt:
        stop_event.set()

    cap_thread.join(timeout=1.0)
    tel_thread.join(timeout=1.0)

    print("[PY] Shutdown complete.")


if __name__ == "__main__":
    main()
