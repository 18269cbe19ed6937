"""
Gesture Light Control - Main Application
==========================================

Entry point for the hand gesture light controller.
Wires camera, detection, recognition and light control into the gesture
pipeline and runs it until interrupted.
"""

import argparse
import logging
import signal
import sys
import time
from typing import Optional

from .capture.camera import Camera
from .capture.frame_throttle import FrameThrottle
from .control.command_dispatcher import CommandDispatcher
from .control.govee_client import GoveeClient
from .core.events import EventBus, Events
from .core.pipeline import GesturePipeline
from .detection.hand_detector import HandDetector
from .recognition.gesture_classifier import GestureClassifier
from .recognition.gesture_state import GestureStateManager
from .utils.config import AppConfig, create_app_config, load_config
from .utils.logger import GestureLogger, setup_logging
from .utils.performance import PerformanceMonitor

logger = logging.getLogger(__name__)

STATUS_INTERVAL_FRAMES = 120
IDLE_SLEEP_S = 0.005  # back-off when the camera has no new frame


class GestureLightApp:
    """
    Main application class for gesture light control.

    Coordinates all components:
    - Camera capture (I420 frames)
    - Hand detection (MediaPipe)
    - Gesture classification and state machine
    - Govee light control
    - Performance monitoring
    """

    def __init__(self, config: AppConfig):
        self.config = config

        self.event_bus = EventBus()
        self.performance = PerformanceMonitor()
        self.gesture_logger = GestureLogger()

        self.camera = Camera(config.camera)
        self.detector = HandDetector(config.mediapipe)
        self.light = GoveeClient(config.govee)
        self.state_manager = GestureStateManager(config.gesture)
        self.dispatcher = CommandDispatcher(self.light, self.state_manager, self.event_bus)
        self.pipeline = GesturePipeline(
            detector=self.detector,
            classifier=GestureClassifier(config.gesture),
            state_manager=self.state_manager,
            dispatcher=self.dispatcher,
            throttle=FrameThrottle(config.gesture.frame_skip_count, config.gestures_enabled),
            config=config.gesture,
            event_bus=self.event_bus,
            performance=self.performance,
            gesture_logger=self.gesture_logger,
        )

        self.dispatcher.on_action(self.gesture_logger.log_action)
        self.event_bus.subscribe(Events.ACTION_FAILED, self._on_action_failed)

        self._running = False

    def start(self) -> bool:
        """Start all components."""
        logger.info("Starting gesture light controller...")

        if not self.detector.start():
            logger.error("Failed to start hand detector")
            return False

        if not self.camera.start():
            logger.error("Failed to start camera")
            self.detector.stop()
            return False

        self.pipeline.start()
        self._running = True
        logger.info("Gesture light controller started")
        return True

    def stop(self) -> None:
        """Stop all components."""
        logger.info("Stopping gesture light controller...")
        self._running = False

        self.pipeline.stop()
        self.camera.stop()
        # Never close the landmarker under a running detect(); leave it to process exit
        if self.pipeline.is_busy:
            logger.info("Classification still in flight, leaving hand detector to close at exit")
        else:
            self.detector.stop()
        self.light.close()
        logger.info("Gesture light controller stopped")

    def run(self) -> None:
        """Run the capture loop until a signal arrives."""
        if not self.start():
            return

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            self._main_loop()
        finally:
            self.stop()
            self._print_final_report()

    def _main_loop(self) -> None:
        last_frame_number: Optional[int] = None
        while self._running:
            frame = self.camera.read()
            # Threaded capture can hand back the same frame twice
            if frame is None or frame.frame_number == last_frame_number:
                time.sleep(IDLE_SLEEP_S)
                continue
            last_frame_number = frame.frame_number

            self.pipeline.submit_frame(frame)

            if frame.frame_number % STATUS_INTERVAL_FRAMES == 0:
                status = self.pipeline.build_status()
                logger.info(
                    "Status: light=%s brightness=%d%% gesture=%s fps=%.1f",
                    "ON" if status["light_on"] else "OFF",
                    status["brightness"],
                    status["gesture"],
                    status["fps"],
                )

    def _on_action_failed(self, label=None, error=None, **kwargs) -> None:
        logger.warning("Light did not accept '%s': %s", label, error)

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self._running = False

    def _print_final_report(self) -> None:
        print("\n" + "=" * 50)
        print("FINAL PERFORMANCE REPORT")
        print("=" * 50)
        print(self.performance.get_report())
        print(f"Commands sent: {self.dispatcher.sent_count}, "
              f"failed: {self.dispatcher.failed_count}")
        print("=" * 50)


def list_devices(config: AppConfig) -> int:
    """Print the Govee devices registered to the configured account."""
    client = GoveeClient(config.govee)
    if not client.config.api_key:
        print("No Govee API key configured (set govee.api_key or GOVEE_API_KEY)")
        return 1

    devices = client.get_devices()
    client.close()
    if not devices:
        print(f"No devices found: {client.last_error or 'empty account'}")
        return 1

    for device in devices:
        instances = ", ".join(cap.instance for cap in device.capabilities)
        print(f"{device.device_name:<24} sku={device.sku:<8} id={device.device}  [{instances}]")
    return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Hand gesture light controller",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Gestures:
  open palm          - Light on
  closed fist        - Light off
  rotate open palm   - Brightness up (clockwise) / down (counter-clockwise)

Examples:
  gesture-light
  gesture-light --config my_config.yaml --debug
  gesture-light --list-devices
        """
    )

    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--no-gestures",
        action="store_true",
        help="Start with gesture recognition disabled"
    )

    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List Govee devices for the configured API key and exit"
    )

    parser.add_argument(
        "--camera",
        type=int,
        default=None,
        help="Camera device index (overrides config)"
    )

    args = parser.parse_args(argv)

    config_dict = load_config(args.config)
    app_config = create_app_config(config_dict)

    level = "DEBUG" if args.debug else app_config.log_level
    setup_logging(level, app_config.log_file)

    if args.camera is not None:
        app_config.camera.device_id = args.camera
    if args.no_gestures:
        app_config.gestures_enabled = False

    if args.list_devices:
        return list_devices(app_config)

    app = GestureLightApp(app_config)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
