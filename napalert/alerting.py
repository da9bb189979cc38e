"""Alerting system for NapAlert.

This module delivers the physical alert for each drowsiness event:
- Local audio pulse via pygame (the host's stand-in for a haptic tap)
- JSON webhook via aiohttp (e.g. a phone push relay)

Every event is delivered; there is no deduplication or cooldown.
Delivery failures are logged and never raised to the caller.

Usage:
    from napalert.alerting import AlertManager

    manager = AlertManager(config)
    await manager.initialize()
    await manager.notify(event)
    await manager.close()
"""

import asyncio
import logging
import os
from typing import Optional

import aiohttp
import pygame

from napalert.models import DrowsinessEvent

logger = logging.getLogger(__name__)


class AudioAlert:
    """Local audio alerting via pygame.

    Plays a short alert sound once per drowsiness event.
    """

    def __init__(self, alert_sound: str = "sounds/alert.wav", volume: int = 90):
        """Initialize audio alerting.

        Args:
            alert_sound: Path to alert sound file
            volume: Default volume (0-100)
        """
        self.alert_sound = alert_sound
        self._volume = volume / 100.0
        self._initialized = False

    async def initialize(self) -> bool:
        """Initialize pygame mixer.

        Returns:
            True if initialization successful
        """
        try:
            pygame.mixer.init()
            pygame.mixer.music.set_volume(self._volume)
            self._initialized = True
            logger.info("Audio alerting initialized")
            return True
        except pygame.error as e:
            logger.error(f"Failed to initialize pygame mixer: {e}")
            return False

    def close(self) -> None:
        """Stop audio and cleanup pygame."""
        if self._initialized:
            pygame.mixer.music.stop()
            pygame.mixer.quit()
            self._initialized = False

    def play_alert(self) -> bool:
        """Play the alert sound once.

        Returns:
            True if playback started
        """
        if not self._initialized:
            return False

        if not os.path.exists(self.alert_sound):
            logger.error(f"Sound file not found: {self.alert_sound}")
            return False

        try:
            pygame.mixer.music.load(self.alert_sound)
            pygame.mixer.music.play()
            return True
        except pygame.error as e:
            logger.error(f"Error playing sound: {e}")
            return False


class WebhookClient:
    """Posts drowsiness events as JSON to a configured URL."""

    def __init__(self, url: str, timeout_seconds: float = 10.0):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def send_event(self, event: DrowsinessEvent) -> bool:
        """Send one event.

        Returns:
            True if the webhook accepted the event
        """
        payload = {
            "event": "drowsiness_detected",
            "message": event.message,
            **event.to_dict(),
        }
        try:
            session = await self._get_session()
            async with session.post(
                self.url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as resp:
                if 200 <= resp.status < 300:
                    logger.debug(f"Webhook delivered event {event.id}")
                    return True
                logger.warning(f"Webhook rejected event: HTTP {resp.status}")
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Webhook error: {e}")
            return False


class AlertManager:
    """Central alert delivery for NapAlert.

    Coordinates the local audio pulse and the webhook.
    """

    def __init__(self, config):
        """Initialize alert manager.

        Args:
            config: Config object with alerting settings
        """
        self.config = config

        self._audio: Optional[AudioAlert] = None
        self._webhook: Optional[WebhookClient] = None

        self._events_sent = 0
        self._last_event: Optional[DrowsinessEvent] = None

        logger.info("AlertManager initialized")

    async def initialize(self) -> None:
        """Initialize all alerting components."""
        local_audio = self.config.alerting.local_audio
        if local_audio.enabled:
            self._audio = AudioAlert(
                alert_sound=str(self.config.resolve_path(local_audio.alert_sound)),
                volume=local_audio.volume,
            )
            await self._audio.initialize()

        webhook = self.config.alerting.webhook
        if webhook.enabled and webhook.url:
            self._webhook = WebhookClient(webhook.url, webhook.timeout_seconds)

        logger.info("AlertManager components initialized")

    async def close(self) -> None:
        """Close all alerting components."""
        if self._audio:
            self._audio.close()

        if self._webhook:
            await self._webhook.close()

        logger.info("AlertManager closed")

    @property
    def events_sent(self) -> int:
        return self._events_sent

    @property
    def last_event(self) -> Optional[DrowsinessEvent]:
        return self._last_event

    async def notify(self, event: DrowsinessEvent) -> None:
        """Issue the physical alert for one drowsiness event.

        Args:
            event: Event produced by the detection session
        """
        self._events_sent += 1
        self._last_event = event
        logger.warning(f"ALERT: {event.message}")

        if self._audio:
            self._audio.play_alert()

        if self._webhook:
            await self._webhook.send_event(event)
