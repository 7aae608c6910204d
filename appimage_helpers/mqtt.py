"""Announcing new AppImage versions over MQTT."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.parse import quote_plus, urlsplit

import paho.mqtt.client as mqtt

log = logging.getLogger(__name__)

MQTT_SERVER_URI = "http://broker.hivemq.com:1883"
MQTT_NAMESPACE = "p9q358t"
DEFAULT_PORT = 1883
CLIENT_ID = "pub"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PubSubData:
    """Data exchanged between AppImage authoring and desktop integration tools."""

    name: str
    version: str
    fs_time: datetime = field(default_factory=_now)

    def to_json(self) -> str:
        """Serialise with the field names used on the wire."""
        return json.dumps(
            {"Name": self.name, "Version": self.version, "FSTime": self.fs_time.isoformat()}
        )

    @classmethod
    def from_json(cls, text: str) -> "PubSubData":
        """Parse the wire form produced by to_json."""
        data = json.loads(text)
        return cls(
            name=data["Name"],
            version=data["Version"],
            fs_time=datetime.fromisoformat(data["FSTime"]),
        )


def version_topic(update_information: str) -> str:
    """Return the topic on which versions for update_information are announced."""
    escaped = quote_plus(update_information, safe="")
    if not escaped:
        raise ValueError("empty update information")
    return f"{MQTT_NAMESPACE}/{escaped}/version"


def publish_mqtt_message(update_information: str, version: str) -> None:
    """Publish version as the retained latest version for update_information (QoS 2)."""
    if not update_information:
        return
    topic = version_topic(update_information)
    uri = urlsplit(MQTT_SERVER_URI)
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=CLIENT_ID)
    if uri.username:
        client.username_pw_set(uri.username, uri.password)
    client.connect(uri.hostname or "localhost", uri.port or DEFAULT_PORT)
    client.loop_start()
    try:
        log.info("Publishing version %s for %s", version, update_information)
        info = client.publish(topic, version, qos=2, retain=True)
        info.wait_for_publish()
    finally:
        client.loop_stop()
        client.disconnect()