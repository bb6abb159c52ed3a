import asyncio
from dataclasses import dataclass
import logging
import sys
import time
from typing import Any, Dict, List, Optional, Tuple
import uuid

import aiohttp

from .const import (
    API_BASE_URL,
    API_DEVICE_DETAILS,
    API_LOGIN,
    API_SET_BRIGHTNESS,
    API_SET_COLOR_TEMPERATURE,
    API_SET_ON_OFF,
    API_SET_RGB_COLOR,
    API_USER_INFO,
    ATTR_DEVICE_UUID,
    ATTR_RGB_COLOR_B,
    ATTR_RGB_COLOR_G,
    ATTR_RGB_COLOR_R,
    DEFAULT_TIMEOUT,
    DEVICE_CACHE_SECONDS,
    MAX_BRIGHTNESS,
    MAX_BYTE,
    MIN_BRIGHTNESS,
    MIN_BYTE,
    OS_TYPE,
    RET_SESSION_EXPIRED,
    RET_SUCCESS,
    SESSION_COOKIE,
    SESSION_LIFETIME,
    VENDOR_MAX_COLOR_TEMPERATURE,
    VENDOR_MIN_COLOR_TEMPERATURE,
)
from .exceptions import AuthError, NotFoundError, RemoteWriteError, SessionExpiredError
from .models import DeviceAttributes

if sys.version_info[:2] < (3, 11):
    from async_timeout import timeout as asyncio_timeout
else:
    from asyncio import timeout as asyncio_timeout

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """A logged in Sengled cloud session."""

    session_id: str
    created_at: float
    expires_at: float

    def is_expired(self, now: Optional[float] = None) -> bool:
        if now is None:
            now = time.monotonic()
        return now >= self.expires_at


def _ret_code(data: Dict[str, Any]) -> Optional[int]:
    ret = data.get("ret")
    if ret is None or ret == "":
        return None
    try:
        return int(ret)
    except (TypeError, ValueError):
        return None


class SengledClient:
    """A client for the Sengled Element cloud."""

    def __init__(
        self,
        username: str,
        password: str,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = API_BASE_URL,
        session_lifetime: float = SESSION_LIFETIME,
    ) -> None:
        self._username = username
        self._password = password
        self._http = session
        self._owns_http = session is None
        self.timeout = timeout
        self.base_url = base_url
        self.session_lifetime = session_lifetime
        self.uuid = str(uuid.uuid4())
        self._session: Optional[Session] = None
        self._login_lock = asyncio.Lock()
        self._devices: Optional[List[DeviceAttributes]] = None
        self._devices_time: float = 0.0

    @property
    def session(self) -> Optional[Session]:
        """Return the current session, if logged in."""
        return self._session

    def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession()
            self._owns_http = True
        return self._http

    async def async_close(self) -> None:
        """Close the http session if this client created it."""
        if self._owns_http and self._http is not None and not self._http.closed:
            await self._http.close()
        self._http = None

    async def _async_post(
        self, path: str, payload: Dict[str, Any], session_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Post json and return the decoded body, transport errors propagate."""
        cookies = {SESSION_COOKIE: session_id} if session_id else None
        _LOGGER.debug("POST %s", path)
        async with asyncio_timeout(self.timeout):
            async with self._get_http().post(
                f"{self.base_url}{path}", json=payload, cookies=cookies
            ) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        if not isinstance(data, dict):
            raise RemoteWriteError(f"Unexpected response to {path}: {data!r}")
        return data

    def invalidate_session(self) -> None:
        """Forget the session so the next call logs in again."""
        self._session = None

    async def async_login(self) -> Session:
        """Log in, or return the session while it is still valid."""
        session = self._session
        if session is not None and not session.is_expired():
            return session
        async with self._login_lock:
            session = self._session
            if session is not None and not session.is_expired():
                return session
            _LOGGER.debug("Logging in to Sengled as %s", self._username)
            data = await self._async_post(
                API_LOGIN,
                {
                    "uuid": self.uuid,
                    "user": self._username,
                    "pwd": self._password,
                    "os_type": OS_TYPE,
                },
            )
            session_id = data.get("jsessionid")
            if not session_id:
                raise AuthError(
                    f"Login failed for {self._username}: {data.get('msg') or data.get('ret')}"
                )
            now = time.monotonic()
            self._session = Session(
                session_id=session_id,
                created_at=now,
                expires_at=now + self.session_lifetime,
            )
            return self._session

    async def _async_call_once(
        self, path: str, payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        session = await self.async_login()
        data = await self._async_post(path, payload, session.session_id)
        ret = _ret_code(data)
        if ret == RET_SESSION_EXPIRED:
            raise SessionExpiredError(f"Session expired calling {path}")
        if ret is not None and ret != RET_SUCCESS:
            raise RemoteWriteError(f"Request to {path} failed", ret, data)
        return data

    async def _async_call(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Call the api, logging in again and retrying once on an expired session."""
        try:
            return await self._async_call_once(path, payload)
        except SessionExpiredError:
            _LOGGER.debug("Session expired, logging in again to retry %s", path)
            self.invalidate_session()
        return await self._async_call_once(path, payload)

    async def async_get_user_info(self) -> Dict[str, Any]:
        """Return the account info."""
        return await self._async_call(API_USER_INFO, {})

    async def async_get_devices(self, use_cache: bool = True) -> List[DeviceAttributes]:
        """Return every bulb on the account."""
        now = time.monotonic()
        if (
            use_cache
            and self._devices is not None
            and now - self._devices_time <= DEVICE_CACHE_SECONDS
        ):
            _LOGGER.debug("Using cached device list")
            return list(self._devices)
        data = await self._async_call(API_DEVICE_DETAILS, {})
        devices = [
            DeviceAttributes.from_lamp_info(lamp_info)
            for device_info in data.get("deviceInfos") or []
            for lamp_info in device_info.get("lampInfos") or []
        ]
        self._devices = devices
        self._devices_time = time.monotonic()
        _LOGGER.debug("Found %s devices", len(devices))
        return list(devices)

    def _check_known_device(self, device_id: str) -> None:
        if self._devices is not None and not any(
            device.id == device_id for device in self._devices
        ):
            raise NotFoundError(device_id)

    async def _async_write(
        self, device_id: str, path: str, payload: Dict[str, Any]
    ) -> None:
        self._check_known_device(device_id)
        _LOGGER.debug("%s: Sending %s", device_id, payload)
        await self._async_call(path, {**payload, ATTR_DEVICE_UUID: device_id})

    async def async_set_on_off(self, device_id: str, on: bool) -> None:
        await self._async_write(device_id, API_SET_ON_OFF, {"onoff": 1 if on else 0})

    async def async_set_brightness(self, device_id: str, brightness: int) -> None:
        if not (MIN_BRIGHTNESS <= brightness <= MAX_BRIGHTNESS):
            raise ValueError(
                f"Brightness of {brightness} is not valid and must be between {MIN_BRIGHTNESS} and {MAX_BRIGHTNESS}"
            )
        await self._async_write(
            device_id, API_SET_BRIGHTNESS, {"brightness": brightness}
        )

    async def async_set_color_temperature(
        self, device_id: str, color_temperature: int
    ) -> None:
        if not (
            VENDOR_MIN_COLOR_TEMPERATURE
            <= color_temperature
            <= VENDOR_MAX_COLOR_TEMPERATURE
        ):
            raise ValueError(
                f"Color temperature of {color_temperature} is not valid and must be between"
                f" {VENDOR_MIN_COLOR_TEMPERATURE} and {VENDOR_MAX_COLOR_TEMPERATURE}"
            )
        await self._async_write(
            device_id,
            API_SET_COLOR_TEMPERATURE,
            {"colorTemperature": color_temperature},
        )

    async def async_set_rgb_color(
        self, device_id: str, rgb: Tuple[int, int, int]
    ) -> None:
        if any(not (MIN_BYTE <= channel <= MAX_BYTE) for channel in rgb):
            raise ValueError(
                f"Invalid rgb color {rgb}, values must be between {MIN_BYTE}-{MAX_BYTE}"
            )
        red, green, blue = rgb
        await self._async_write(
            device_id,
            API_SET_RGB_COLOR,
            {ATTR_RGB_COLOR_R: red, ATTR_RGB_COLOR_G: green, ATTR_RGB_COLOR_B: blue},
        )
