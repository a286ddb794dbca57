"""MQTT telemetry transport."""

from __future__ import annotations

import logging
from typing import Any, cast

import paho.mqtt.client as mqtt

from kegscale.config import ScaleConfig
from kegscale.exceptions import ParseError
from kegscale.ingestion.coordinator import IngestionCoordinator


class MqttTelemetryReceiver:
    """Threaded paho-mqtt client feeding telemetry into the coordinator.

    Payloads use the same pipe delimited grammar as the HTTP route and
    are applied on paho's network thread.
    """

    def __init__(
        self,
        coordinator: IngestionCoordinator,
        *,
        host: str,
        port: int = 1883,
        topic: str = "kegscale/telemetry",
        username: str | None = None,
        password: str | None = None,
        keepalive: int = 120,
        client_id: str = "",
        logger: logging.Logger | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._host = host
        self._port = port
        self._topic = topic
        self._username = username
        self._password = password
        self._keepalive = keepalive
        self._client_id = client_id
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @classmethod
    def from_config(cls, coordinator: IngestionCoordinator, config: ScaleConfig) -> MqttTelemetryReceiver:
        if not config.mqtt_host:
            raise ValueError("mqtt_host is not configured")
        return cls(
            coordinator,
            host=config.mqtt_host,
            port=config.mqtt_port,
            topic=config.mqtt_topic,
            username=config.mqtt_username,
            password=config.mqtt_password,
            keepalive=config.mqtt_keepalive,
        )

    @property
    def is_running(self) -> bool:
        """Whether the MQTT network loop is active."""
        return self._running

    @property
    def topic(self) -> str:
        return self._topic

    def handle_payload(self, topic: str, payload: bytes) -> None:
        """Apply one publish. Malformed payloads are logged and dropped."""
        try:
            result = self._coordinator.handle_message(payload)
        except ParseError as exc:
            self._logger.warning("Could not parse scale message on %s: %r because %s", topic, payload, exc)
            return
        for warning in result.warnings:
            self._logger.warning("Scale message %d: %s", result.message_id, warning)

    def start(self) -> None:
        """Connect, subscribe and start the network loop."""
        self.stop()
        self._logger.debug(
            "MQTT receiver start requested host=%s port=%s topic=%s",
            self._host,
            self._port,
            self._topic,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
        )
        client.enable_logger(self._logger)
        if self._username:
            client.username_pw_set(self._username, self._password)

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.info("MQTT connected, subscribing topic=%s", self._topic)
            c.subscribe(self._topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            self.handle_payload(msg.topic, msg.payload)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.warning("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        client.connect(self._host, self._port, keepalive=self._keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect the client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
