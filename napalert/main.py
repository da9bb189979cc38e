#!/usr/bin/env python3
"""NapAlert - Main Entry Point.

This is the main entry point for the drowsiness alert system.
It initializes all components and starts the detection loop.

Usage:
    python -m napalert.main [--config CONFIG] [--debug] [--mock] [--start]

The system watches:
- Heart rate (bpm) from the wearable's heart-rate sensor
- Wrist motion from the accelerometer

When heart rate drops below the wearer's baseline by more than the
sensitivity threshold while the wrist is still, it triggers an alert.
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
import threading
from logging.handlers import RotatingFileHandler
from typing import Optional

from napalert.alerting import AlertManager
from napalert.config import load_config
from napalert.preferences import SensitivityStore
from napalert.sensors import get_sensors
from napalert.state_machine import DetectionStateMachine
from napalert.web.app import create_app

logger = logging.getLogger(__name__)


def setup_logging(config, debug: bool = False) -> None:
    """Configure logging based on config settings.

    Args:
        config: Configuration object
        debug: Enable debug mode
    """
    level = logging.DEBUG if debug else getattr(
        logging, config.logging.level.upper(), logging.INFO
    )

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.logging.file:
        log_dir = os.path.dirname(config.logging.file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            config.logging.file,
            maxBytes=config.logging.max_size_mb * 1024 * 1024,
            backupCount=config.logging.backup_count,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Reduce verbosity of some noisy libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logger.info(f"Logging configured (level: {logging.getLevelName(level)})")


class NapAlertApp:
    """Main application class for NapAlert.

    Coordinates all components and manages the application lifecycle.
    """

    def __init__(self, config_path: str, debug: bool = False, mock: bool = False,
                 start_detection: bool = False):
        """Initialize the application.

        Args:
            config_path: Path to configuration file
            debug: Enable debug logging
            mock: Force mock mode regardless of config
            start_detection: Turn detection on at launch
        """
        self.config_path = config_path
        self.debug = debug
        self.force_mock = mock
        self.force_start = start_detection

        # Components (initialized in start())
        self.config = None
        self.alert_manager: Optional[AlertManager] = None
        self.state_machine: Optional[DetectionStateMachine] = None
        self.web_app = None
        self._web_thread: Optional[threading.Thread] = None

    async def start(self) -> None:
        """Start the application and run until stopped."""
        self.config = load_config(self.config_path)

        if self.force_mock:
            self.config.mock_mode = True
        if self.force_start:
            self.config.detection.start_on_launch = True

        setup_logging(self.config, self.debug)

        logger.info("=" * 50)
        logger.info("NapAlert Starting")
        logger.info("=" * 50)
        logger.info(f"Config loaded from: {self.config_path}")
        logger.info(f"Mock mode: {self.config.mock_mode}")

        await self._initialize_components()

        try:
            self._start_web_server()
            await self.state_machine.run()
        except asyncio.CancelledError:
            logger.info("Detection loop cancelled")
        finally:
            await self._shutdown()

    async def _initialize_components(self) -> None:
        """Initialize all system components."""
        logger.info("Initializing components...")

        logger.info("  - Alert Manager")
        self.alert_manager = AlertManager(self.config)
        await self.alert_manager.initialize()

        logger.info("  - Sensors")
        heart_rate_sensor, motion_sensor = get_sensors(self.config)

        logger.info("  - State Machine")
        self.state_machine = DetectionStateMachine(
            config=self.config,
            heart_rate_sensor=heart_rate_sensor,
            motion_sensor=motion_sensor,
            alert_manager=self.alert_manager,
            preferences=SensitivityStore(self.config.resolve_path(self.config.preferences.path)),
        )

        if self.config.web.enabled:
            logger.info("  - Web Server")
            self.web_app = create_app(config=self.config, state_machine=self.state_machine)

        logger.info("All components initialized")

    def _start_web_server(self) -> None:
        """Start the web server in a background thread."""
        if self.web_app is None:
            return

        host = self.config.web.host
        port = self.config.web.port

        def run_flask():
            self.web_app.run(
                host=host,
                port=port,
                debug=False,
                use_reloader=False,
                threaded=True,
            )

        self._web_thread = threading.Thread(target=run_flask, daemon=True)
        self._web_thread.start()
        logger.info(f"Web server started on http://{host}:{port}")

    async def _shutdown(self) -> None:
        """Clean shutdown of all components."""
        logger.info("Shutting down...")

        if self.alert_manager:
            await self.alert_manager.close()

        logger.info("Shutdown complete")

    def stop(self) -> None:
        """Request application stop."""
        if self.state_machine:
            self.state_machine.stop()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="NapAlert drowsiness detection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run with default config
    python -m napalert.main

    # Simulated sensors, detection on immediately, debug logging
    python -m napalert.main --mock --start --debug

    # Use custom config file
    python -m napalert.main --config /path/to/config.yaml
        """
    )
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to configuration file (default: config.yaml)"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--mock", "-m",
        action="store_true",
        help="Use simulated sensors"
    )
    parser.add_argument(
        "--start", "-s",
        action="store_true",
        help="Turn detection on at launch"
    )
    args = parser.parse_args()

    if not os.path.exists(args.config):
        print(f"Error: Config file not found: {args.config}")
        sys.exit(1)

    app = NapAlertApp(
        config_path=args.config,
        debug=args.debug,
        mock=args.mock,
        start_detection=args.start,
    )

    def handle_signal(sig, frame):
        logger.info(f"Received signal {sig}")
        app.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        asyncio.run(app.start())
    except KeyboardInterrupt:
        print("\nInterrupted")
    except Exception as e:
        print(f"Error: {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
