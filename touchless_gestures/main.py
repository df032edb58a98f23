#!/usr/bin/env python3
"""
Touchless Gestures - command-line entry point.

Usage:
    touchless-gestures replay frames.jsonl          # Recorded landmarks -> events
    touchless-gestures live                         # Camera + MediaPipe (live extra)
    touchless-gestures replay frames.jsonl --config my.yaml --log-level DEBUG

Replay file format (JSON lines, one frame per line):
    [[x, y, z], ...]                                # landmarks, no timestamp
    {"t_ms": 1234, "landmarks": [[x, y, z], ...]}   # with timestamp
    null  /  []                                     # no hand in this frame
"""

import sys
import json
import time
import signal
import argparse
import logging

from touchless_gestures.core.events import EventBus, Events
from touchless_gestures.core.pipeline import GestureSession
from touchless_gestures.models.gesture_classifier import GestureClassifier
from touchless_gestures.modules.utils.config import Config
from touchless_gestures.modules.utils.logger import GestureLogger, setup_logging

logger = logging.getLogger(__name__)


def read_frames(path, fps=30.0):
    """Yield (timestamp_ms, landmarks_or_None) from a JSON-lines replay file."""
    frame_ms = 1000.0 / fps
    with open(path, "r", encoding="utf-8") as f:
        for index, line in enumerate(f):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except ValueError as e:
                logger.warning("Skipping line %d: %s", index + 1, e)
                continue
            if isinstance(record, dict):
                t_ms = record.get("t_ms")
                if t_ms is None:
                    t_ms = index * frame_ms
                try:
                    t_ms = float(t_ms)
                except (TypeError, ValueError):
                    logger.warning("Skipping line %d: bad t_ms %r", index + 1, t_ms)
                    continue
                yield t_ms, record.get("landmarks")
            else:
                yield index * frame_ms, record


def run_replay(session, classifier, args) -> int:
    if not classifier.wait_until_ready(timeout=args.load_timeout):
        logger.error("Classifier failed to load (state: %s)", classifier.state.value)
        return 1

    fired = 0
    for t_ms, landmarks in read_frames(args.input, fps=args.fps):
        event = session.process_landmarks(landmarks, now_ms=t_ms)
        if event is not None:
            fired += 1
            print("%10.0f ms  %-10s %.2f  -> %s" % (
                t_ms, event.label, event.confidence, event.action.name))
    logger.info("Replay finished: %d frames, %d events", session.frame_count, fired)
    return 0


def run_live(session, classifier, config) -> int:
    import cv2
    from touchless_gestures.modules.detection.hand_detector import HandDetector

    camera_cfg = config.camera
    cap = cv2.VideoCapture(camera_cfg.get("device_id", 0))
    if not cap.isOpened():
        logger.error("Cannot open camera %s", camera_cfg.get("device_id", 0))
        return 1
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, camera_cfg.get("width", 640))
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, camera_cfg.get("height", 480))

    running = {"value": True}

    def _stop(*_):
        running["value"] = False

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    classifier.initialize()
    session.reset()
    try:
        with HandDetector(config.mediapipe) as detector:
            while running["value"]:
                ok, frame = cap.read()
                if not ok:
                    logger.warning("Camera read failed; stopping")
                    break
                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                event = session.process_landmarks(detector.detect(rgb))
                if event is not None:
                    print("%-10s %.2f  -> %s" % (event.label, event.confidence, event.action.name))
    finally:
        cap.release()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="touchless-gestures",
        description="Hand gesture recognition and action dispatch",
    )
    parser.add_argument("--config", help="YAML file overriding the bundled config")
    parser.add_argument("--gestures", help="YAML file overriding gesture -> action mapping")
    parser.add_argument("--model", help="Model file (overrides classifier.model_path)")
    parser.add_argument("--labels", help="Label file (overrides classifier.labels_path)")
    parser.add_argument("--threshold", type=float,
                        help="Detection confidence threshold (0-1)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")

    sub = parser.add_subparsers(dest="mode", required=True)

    replay = sub.add_parser("replay", help="Run recorded landmark frames through a session")
    replay.add_argument("input", help="JSON-lines landmark file")
    replay.add_argument("--fps", type=float, default=30.0,
                        help="Frame rate used when records carry no timestamp")
    replay.add_argument("--load-timeout", type=float, default=30.0,
                        help="Seconds to wait for the model to load")

    sub.add_parser("live", help="Camera + MediaPipe detection (requires the live extra)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = Config().load(args.config, args.gestures)
    log_cfg = config.logging
    setup_logging(
        level=args.log_level or log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    classifier_cfg = dict(config.classifier)
    if args.model:
        classifier_cfg["model_path"] = args.model
    if args.labels:
        classifier_cfg["labels_path"] = args.labels

    bus = EventBus()
    gesture_logger = GestureLogger()
    bus.subscribe(Events.ACTION_REQUESTED, gesture_logger.log_event)

    classifier = GestureClassifier(classifier_cfg, event_bus=bus)
    session = GestureSession.from_config(classifier, config, name=args.mode, event_bus=bus)
    if args.threshold is not None:
        session.detection_threshold = args.threshold

    start = time.time()
    try:
        if args.mode == "replay":
            return run_replay(session, classifier, args)
        return run_live(session, classifier, config)
    finally:
        classifier.close()
        logger.info("Done in %.1fs, %d action events", time.time() - start,
                    gesture_logger.total_events)


if __name__ == "__main__":
    sys.exit(main())
