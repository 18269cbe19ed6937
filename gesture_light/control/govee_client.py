"""
Govee Light Client
===================

Light actuator backed by the Govee OpenAPI (v1):
https://developer.govee.com/reference/control-you-devices

Every call returns success/failure; the text of the last failure is kept in
``last_error`` for logging and user notices. Commands go out on parallel
threads, so ``last_error`` is per thread.
"""

import os
import uuid
import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

import requests

logger = logging.getLogger(__name__)

GOVEE_API_BASE = "https://openapi.api.govee.com/router/api/v1"
API_KEY_ENV = "GOVEE_API_KEY"


@dataclass
class GoveeConfig:
    """Credentials and endpoint for one light."""
    api_key: str = ""
    device_id: str = ""
    sku: str = ""
    base_url: str = GOVEE_API_BASE
    timeout_s: float = 5.0

    @classmethod
    def from_dict(cls, config: dict) -> "GoveeConfig":
        """Create config from dictionary; the API key may come from the environment."""
        return cls(
            api_key=config.get("api_key") or os.environ.get(API_KEY_ENV, ""),
            device_id=config.get("device_id", ""),
            sku=config.get("sku", ""),
            base_url=config.get("base_url", GOVEE_API_BASE),
            timeout_s=config.get("timeout_s", 5.0),
        )


@dataclass
class GoveeCapability:
    type: str       # e.g. "devices.capabilities.on_off"
    instance: str   # e.g. "powerSwitch", "brightness"
    parameters: dict = field(default_factory=dict)


@dataclass
class GoveeDevice:
    device: str     # Device ID used for control commands
    sku: str
    device_name: str
    type: str
    capabilities: List[GoveeCapability] = field(default_factory=list)


class GoveeClient:
    """
    HTTP client for one Govee light.

    Example:
        >>> client = GoveeClient(GoveeConfig(api_key="...", device_id="...", sku="H605C"))
        >>> client.set_power(True)
        >>> client.set_brightness(70)
    """

    def __init__(self, config: Optional[GoveeConfig] = None,
                 session: Optional[requests.Session] = None):
        self.config = config or GoveeConfig()
        self._session = session or requests.Session()
        self._local = threading.local()

    @property
    def last_error(self) -> Optional[str]:
        """Text of the last failure on the calling thread."""
        return getattr(self._local, "last_error", None)

    @last_error.setter
    def last_error(self, value: Optional[str]) -> None:
        self._local.last_error = value

    @property
    def is_configured(self) -> bool:
        """Control calls need both an API key and a device ID."""
        return bool(self.config.api_key) and bool(self.config.device_id)

    @property
    def _headers(self) -> dict:
        return {
            "Govee-API-Key": self.config.api_key,
            "Content-Type": "application/json",
        }

    def get_devices(self) -> List[GoveeDevice]:
        """Fetch the devices registered to the account (empty list on failure)."""
        self.last_error = None
        url = f"{self.config.base_url}/user/devices"
        try:
            resp = self._session.get(url, headers=self._headers, timeout=self.config.timeout_s)
        except requests.RequestException as e:
            self.last_error = f"Exception: {e}"
            logger.error("get_devices failed: %s", self.last_error)
            return []

        if not resp.ok:
            self.last_error = f"HTTP {resp.status_code}: {resp.text}"
            logger.error("get_devices failed: %s", self.last_error)
            return []

        try:
            body = resp.json()
        except ValueError as e:
            self.last_error = f"Parse error: {e}"
            logger.error("Could not parse devices response: %s", e)
            return []

        code = body.get("code", -1)
        if code != 200:
            self.last_error = f"Govee Error {code}: {body.get('message', 'Unknown error')}"
            logger.error(self.last_error)
            return []

        devices = []
        for item in body.get("data") or []:
            capabilities = [
                GoveeCapability(
                    type=cap.get("type", ""),
                    instance=cap.get("instance", ""),
                    parameters=cap.get("parameters") or {},
                )
                for cap in item.get("capabilities") or []
            ]
            devices.append(GoveeDevice(
                device=item.get("device", ""),
                sku=item.get("sku", ""),
                device_name=item.get("deviceName", "Unknown"),
                type=item.get("type", ""),
                capabilities=capabilities,
            ))

        logger.info("Found %d Govee devices", len(devices))
        return devices

    def set_power(self, on: bool) -> bool:
        """Turn the light on or off."""
        return self._control("devices.capabilities.on_off", "powerSwitch", 1 if on else 0)

    def set_brightness(self, value: int) -> bool:
        """Set brightness; the device range is 1-100, not 0-100."""
        value = max(1, min(100, int(value)))
        return self._control("devices.capabilities.range", "brightness", value)

    def set_color(self, red: int, green: int, blue: int) -> bool:
        """Set an RGB color, packed as a single 24-bit integer."""
        r, g, b = (max(0, min(255, int(c))) for c in (red, green, blue))
        return self._control("devices.capabilities.color_setting", "colorRgb",
                             (r << 16) | (g << 8) | b)

    def _control(self, cap_type: str, instance: str, value: int) -> bool:
        self.last_error = None
        body = {
            "requestId": str(uuid.uuid4()),
            "payload": {
                "sku": self.config.sku,
                "device": self.config.device_id,
                "capability": {
                    "type": cap_type,
                    "instance": instance,
                    "value": value,
                },
            },
        }
        url = f"{self.config.base_url}/device/control"
        logger.debug("POST %s %s=%s", url, instance, value)

        try:
            resp = self._session.post(url, json=body, headers=self._headers,
                                      timeout=self.config.timeout_s)
        except requests.RequestException as e:
            self.last_error = f"Exception: {e}"
            logger.error("%s failed: %s", instance, self.last_error)
            return False

        if not resp.ok:
            self.last_error = f"HTTP {resp.status_code}: {resp.text}"
            logger.error("%s failed: %s", instance, self.last_error)
            return False

        try:
            reply = resp.json()
        except ValueError:
            logger.warning("Could not parse response as JSON: %s", resp.text)
            return True

        code = reply.get("code", -1)
        if code != 200:
            message = reply.get("msg") or reply.get("message", "")
            self.last_error = f"Govee Error {code}: {message}"
            logger.error("%s failed: %s", instance, self.last_error)
            return False

        logger.debug("%s set to %s", instance, value)
        return True

    def close(self) -> None:
        self._session.close()
