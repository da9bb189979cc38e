# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""State machine for NapAlert.

This module owns the detection session and is its only writer:
- Receives heart-rate samples and motion flags from sensor threads
- Receives start/stop/sensitivity commands from the CLI or web API
- Applies every message to the session, one at a time, on the event loop
- Forwards drowsiness events to the alert manager

Message flow:
    sensor thread --submit_*()--> queue --run()--> DetectionSession
    web thread ---start/stop()--> queue --run()--> DetectionSession + sensors

Samples are tagged with a detection epoch when submitted. stop_detection()
halts the sensors and bumps the epoch before the reset is queued, so samples
submitted earlier are discarded instead of feeding a new baseline.

Usage:
    from napalert.state_machine import DetectionStateMachine

    sm = DetectionStateMachine(config, hr_sensor, motion_sensor, alert_manager, store)
    await sm.run()
"""

import asyncio
import logging
import threading
from typing import Optional, Set

from napalert.models import (
    DrowsinessEvent, Evaluation, SessionSnapshot, Sensitivity
)
from napalert.session import DetectionSession

logger = logging.getLogger(__name__)

_HEART_RATE = "heart_rate"
_MOTION = "motion"
_START = "start"
_STOP = "stop"
_SENSITIVITY = "sensitivity"
_SHUTDOWN = "shutdown"


class DetectionStateMachine:
    """Serializes all detection state changes through one asyncio queue.

    Attributes:
        session: The DetectionSession being driven
        current_status: Latest SessionSnapshot (safe to read from any thread)
    """

    def __init__(
        self,
        config,
        heart_rate_sensor,
        motion_sensor,
        alert_manager,
        preferences=None,
    ):
        """Initialize state machine.

        Args:
            config: Configuration object
            heart_rate_sensor: Heart-rate adapter (real, replay or mock)
            motion_sensor: Motion adapter (real, replay or mock)
            alert_manager: AlertManager instance
            preferences: Optional SensitivityStore for the saved sensitivity
        """
        self.config = config
        self.heart_rate_sensor = heart_rate_sensor
        self.motion_sensor = motion_sensor
        self.alert_manager = alert_manager
        self.preferences = preferences

        if preferences is not None:
            sensitivity = preferences.load()
        else:
            sensitivity = Sensitivity.parse(config.detection.default_sensitivity)

        self.session = DetectionSession(
            sensitivity=sensitivity,
            baseline_sample_count=config.detection.baseline_sample_count,
        )
        self.session.add_drowsiness_listener(self._on_drowsiness)
        self.session.add_state_listener(self._on_state)
        self._status: SessionSnapshot = self.session.snapshot()

        self.heart_rate_sensor.callback = self.submit_heart_rate
        self.motion_sensor.callback = self.submit_motion

        # Epoch tagging for samples
        self._epoch = 0
        self._epoch_lock = threading.Lock()
        self._discarded = 0

        # Control
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._running = False
        self._alert_tasks: Set[asyncio.Task] = set()

        logger.info(f"DetectionStateMachine initialized (sensitivity: {sensitivity.value})")

    # ==================== Properties ====================

    @property
    def current_status(self) -> SessionSnapshot:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def discarded_samples(self) -> int:
        """Samples dropped because they were submitted before a stop."""
        return self._discarded

    def get_status(self) -> SessionSnapshot:
        """Get the most recent session snapshot."""
        return self._status

    # ==================== Inbound channels ====================

    def submit_heart_rate(self, bpm: float) -> None:
        """Queue a heart-rate sample (thread-safe)."""
        self._post((_HEART_RATE, bpm, self._current_epoch()))

    def submit_motion(self, is_moving: bool) -> None:
        """Queue a motion state change (thread-safe)."""
        self._post((_MOTION, bool(is_moving), self._current_epoch()))

    def start_detection(self) -> None:
        """Request detection on (thread-safe)."""
        self._post((_START, None, None))

    def stop_detection(self) -> None:
        """Request detection off (thread-safe).

        Sensors are stopped and the epoch advanced before returning, so no
        sample delivered up to now can be applied after the reset.
        """
        self._stop_sensors()
        with self._epoch_lock:
            self._epoch += 1
        self._post((_STOP, None, None))

    def set_sensitivity(self, level: Sensitivity) -> None:
        """Request a sensitivity change (thread-safe)."""
        self._post((_SENSITIVITY, level, None))

    def _current_epoch(self) -> int:
        with self._epoch_lock:
            return self._epoch

    def _post(self, message) -> None:
        loop = self._loop
        if loop is None or loop.is_closed() or self._on_loop_thread(loop):
            # Not running yet (only the constructing thread can be here),
            # or already on the loop thread
            self._queue.put_nowait(message)
        else:
            loop.call_soon_threadsafe(self._queue.put_nowait, message)

    @staticmethod
    def _on_loop_thread(loop: asyncio.AbstractEventLoop) -> bool:
        try:
            return asyncio.get_running_loop() is loop
        except RuntimeError:
            return False

    # ==================== Main Loop ====================

    async def run(self) -> None:
        """Process queued messages until stop() is called."""
        self._loop = asyncio.get_running_loop()
        self._running = True
        logger.info("State machine starting")

        if self.config.detection.start_on_launch:
            self.start_detection()

        try:
            while True:
                message = await self._queue.get()
                try:
                    if message[0] == _SHUTDOWN:
                        break
                    self._handle(message)
                except Exception as e:
                    logger.error(f"Error handling {message[0]} message: {e}")
                finally:
                    self._queue.task_done()
        finally:
            await self._cleanup()

    def stop(self) -> None:
        """Signal shutdown (thread-safe)."""
        logger.info("State machine stopping")
        self._post((_SHUTDOWN, None, None))

    async def wait_idle(self) -> None:
        """Wait until all queued messages and alert deliveries are done."""
        await self._queue.join()
        if self._alert_tasks:
            await asyncio.gather(*list(self._alert_tasks), return_exceptions=True)

    async def _cleanup(self) -> None:
        """Clean up on shutdown."""
        self._stop_sensors()
        if self.session.is_active:
            self.session.stop()

        if self._alert_tasks:
            await asyncio.gather(*list(self._alert_tasks), return_exceptions=True)

        # Drain anything left so wait_idle() never hangs
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()

        self._running = False
        self._loop = None
        logger.info("State machine cleanup complete")

    # ==================== Message handling ====================

    def _handle(self, message) -> None:
        kind, value, epoch = message

        if kind in (_HEART_RATE, _MOTION) and epoch != self._current_epoch():
            self._discarded += 1
            logger.debug(f"Discarding {kind} sample submitted before stop")
            return

        if kind == _HEART_RATE:
            result = self.session.on_heart_rate(value)
            if result == Evaluation.MOVING:
                logger.debug("Wrist is moving (active)")
        elif kind == _MOTION:
            self.session.on_motion(value)
        elif kind == _START:
            self._handle_start()
        elif kind == _STOP:
            self._handle_stop()
        elif kind == _SENSITIVITY:
            self._handle_sensitivity(value)
        else:
            logger.warning(f"Unknown message type: {kind}")

    def _handle_start(self) -> None:
        if self.session.is_active:
            logger.debug("Detection already on")
            return
        self.session.start()
        self.heart_rate_sensor.start()
        self.motion_sensor.start()

    def _handle_stop(self) -> None:
        # Covers a start that was queued before this stop
        self._stop_sensors()
        if not self.session.is_active:
            logger.debug("Detection already off")
            return
        self.session.stop()

    def _handle_sensitivity(self, level: Sensitivity) -> None:
        self.session.set_sensitivity(level)
        if self.preferences is not None:
            try:
                self.preferences.save(level)
            except OSError as e:
                logger.error(f"Failed to save sensitivity: {e}")

    def _stop_sensors(self) -> None:
        self.heart_rate_sensor.stop()
        self.motion_sensor.stop()

    # ==================== Session listeners ====================

    def _on_state(self, snapshot: SessionSnapshot) -> None:
        self._status = snapshot

    def _on_drowsiness(self, event: DrowsinessEvent) -> None:
        """Hand the event to the alert manager without blocking evaluation."""
        task = asyncio.get_running_loop().create_task(self._deliver(event))
        self._alert_tasks.add(task)
        task.add_done_callback(self._alert_tasks.discard)

    async def _deliver(self, event: DrowsinessEvent) -> None:
        try:
            await self.alert_manager.notify(event)
        except Exception as e:
            logger.error(f"Alert delivery failed: {e}")
