import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock, call, patch

import aiohttp
import pytest

from sengled_bulbs.aioclient import SengledClient, Session
from sengled_bulbs.const import (
    API_DEVICE_DETAILS,
    API_LOGIN,
    API_SET_ON_OFF,
    API_SET_RGB_COLOR,
    API_USER_INFO,
    CachePolicy,
    ColorMode,
)
from sengled_bulbs.exceptions import (
    AuthError,
    NotFoundError,
    RemoteWriteError,
    SessionExpiredError,
)
from sengled_bulbs.host import AccessoryHost, LoggingHost
from sengled_bulbs.light import SengledLight
from sengled_bulbs.models import DeviceAttributes, DeviceRecord, PlatformConfig
from sengled_bulbs.platform import SengledPlatform
from sengled_bulbs.state import ColorWritePolicy

logging.getLogger("sengled_bulbs").setLevel(logging.DEBUG)

DEVICE_ID = "B0CE1814030004AA"
WHITE_DEVICE_ID = "B0CE1814030004BB"

COLOR_ATTRIBUTES = {
    "name": "Living Room",
    "onoff": "1",
    "brightness": "128",
    "colorTemperature": "50",
    "colorMode": "2",
    "rgbColorR": "255",
    "rgbColorG": "0",
    "rgbColorB": "0",
    "productCode": "E12-N1E",
}

WHITE_ATTRIBUTES = {
    "name": "Hallway",
    "onoff": "0",
    "brightness": "255",
    "productCode": "E11-G13",
}

DEVICE_DETAILS = {
    "ret": 0,
    "deviceInfos": [
        {
            "lampInfos": [
                {"deviceUuid": DEVICE_ID, "attributes": COLOR_ATTRIBUTES},
                {"deviceUuid": WHITE_DEVICE_ID, "attributes": WHITE_ATTRIBUTES},
            ]
        }
    ],
}


def login_response(session_id="session-1"):
    return {"ret": 0, "jsessionid": session_id}


def color_attrs(**attributes) -> DeviceAttributes:
    return DeviceAttributes.from_lamp_info(
        {"deviceUuid": DEVICE_ID, "attributes": {**COLOR_ATTRIBUTES, **attributes}}
    )


def white_attrs(**attributes) -> DeviceAttributes:
    return DeviceAttributes.from_lamp_info(
        {
            "deviceUuid": WHITE_DEVICE_ID,
            "attributes": {**WHITE_ATTRIBUTES, **attributes},
        }
    )


@pytest.fixture
async def client():
    """Fixture for a client with a mocked http session."""
    yield SengledClient("user@example.com", "secret", session=MagicMock(closed=False))


@pytest.fixture
def mock_client():
    """Fixture for a client that records writes."""
    client = MagicMock()
    client.async_set_on_off = AsyncMock()
    client.async_set_brightness = AsyncMock()
    client.async_set_color_temperature = AsyncMock()
    client.async_set_rgb_color = AsyncMock()
    client.async_get_devices = AsyncMock(return_value=[color_attrs(), white_attrs()])
    client.async_login = AsyncMock()
    client.async_close = AsyncMock()
    return client


def make_light(client, attrs=None, host=None, policy=None, **kwargs) -> SengledLight:
    record = DeviceRecord.from_attributes(attrs or color_attrs())
    return SengledLight(
        client, record, host=host or MagicMock(), policy=policy, **kwargs
    )


@pytest.mark.asyncio
async def test_post(client: SengledClient):
    """Test the request sent to the cloud."""
    http = client._http
    resp = http.post.return_value.__aenter__.return_value
    resp.raise_for_status = MagicMock()
    resp.json = AsyncMock(return_value={"ret": 0})

    assert await client._async_post(API_SET_ON_OFF, {"onoff": 1}, "abc") == {"ret": 0}
    assert http.post.call_args == call(
        "https://us-elements.cloud.sengled.com/zigbee/device/deviceSetOnOff.json",
        json={"onoff": 1},
        cookies={"JSESSIONID": "abc"},
    )
    resp.raise_for_status.assert_called_once()

    resp.json = AsyncMock(return_value=["unexpected"])
    with pytest.raises(RemoteWriteError):
        await client._async_post(API_SET_ON_OFF, {"onoff": 1}, "abc")


@pytest.mark.asyncio
async def test_login(client: SengledClient):
    with patch.object(
        client, "_async_post", AsyncMock(return_value=login_response())
    ) as mock_post:
        session = await client.async_login()
        assert session.session_id == "session-1"
        assert not session.is_expired()
        assert await client.async_login() is session
    assert mock_post.call_count == 1
    assert mock_post.call_args == call(
        API_LOGIN,
        {
            "uuid": client.uuid,
            "user": "user@example.com",
            "pwd": "secret",
            "os_type": "android",
        },
    )


@pytest.mark.asyncio
async def test_login_failed(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(return_value={"ret": 1, "msg": "wrong password"}),
    ), pytest.raises(AuthError):
        await client.async_login()
    assert client.session is None


@pytest.mark.asyncio
async def test_login_when_session_expired(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(side_effect=[login_response("old"), login_response("new")]),
    ):
        old = await client.async_login()
        assert old.is_expired(old.expires_at)
        client._session = Session(old.session_id, old.created_at, old.created_at)
        assert (await client.async_login()).session_id == "new"


@pytest.mark.asyncio
async def test_session_expired_retry(client: SengledClient):
    """Test we log in again and retry once when the session expired."""
    with patch.object(
        client,
        "_async_post",
        AsyncMock(
            side_effect=[
                login_response("session-1"),
                {"ret": 100},
                login_response("session-2"),
                DEVICE_DETAILS,
            ]
        ),
    ) as mock_post:
        devices = await client.async_get_devices()
    assert [device.id for device in devices] == [DEVICE_ID, WHITE_DEVICE_ID]
    assert client.session.session_id == "session-2"
    assert mock_post.call_args_list[1] == call(API_DEVICE_DETAILS, {}, "session-1")
    assert mock_post.call_args_list[3] == call(API_DEVICE_DETAILS, {}, "session-2")


@pytest.mark.asyncio
async def test_session_expired_twice(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(
            side_effect=[
                login_response("session-1"),
                {"ret": 100},
                login_response("session-2"),
                {"ret": 100},
            ]
        ),
    ), pytest.raises(SessionExpiredError):
        await client.async_get_user_info()


@pytest.mark.asyncio
async def test_get_user_info(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(side_effect=[login_response(), {"ret": 0, "nickName": "me"}]),
    ) as mock_post:
        assert (await client.async_get_user_info())["nickName"] == "me"
    assert mock_post.call_args == call(API_USER_INFO, {}, "session-1")


@pytest.mark.asyncio
async def test_device_cache(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(side_effect=[login_response(), DEVICE_DETAILS, DEVICE_DETAILS]),
    ) as mock_post:
        first = await client.async_get_devices()
        second = await client.async_get_devices()
        assert first == second
        assert mock_post.call_count == 2
        await client.async_get_devices(use_cache=False)
        assert mock_post.call_count == 3


@pytest.mark.asyncio
async def test_device_attributes(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(side_effect=[login_response(), DEVICE_DETAILS]),
    ):
        color, white = await client.async_get_devices()
    assert color.display_name == "Living Room"
    assert color.rgb == (255, 0, 0)
    assert white.color_temperature is None
    assert white.rgb is None
    assert not white.onoff


@pytest.mark.asyncio
async def test_remote_write_error(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(side_effect=[login_response(), DEVICE_DETAILS, {"ret": 3}]),
    ):
        await client.async_get_devices()
        with pytest.raises(RemoteWriteError) as exc_info:
            await client.async_set_rgb_color(DEVICE_ID, (0, 255, 0))
    assert exc_info.value.code == 3
    assert exc_info.value.payload == {"ret": 3}


@pytest.mark.asyncio
async def test_write_payloads(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(side_effect=[login_response(), {"ret": 0}, {"ret": 0}]),
    ) as mock_post:
        await client.async_set_on_off(DEVICE_ID, False)
        await client.async_set_rgb_color(DEVICE_ID, (1, 2, 3))
    assert mock_post.call_args_list[1] == call(
        API_SET_ON_OFF, {"onoff": 0, "deviceUuid": DEVICE_ID}, "session-1"
    )
    assert mock_post.call_args_list[2] == call(
        API_SET_RGB_COLOR,
        {"rgbColorR": 1, "rgbColorG": 2, "rgbColorB": 3, "deviceUuid": DEVICE_ID},
        "session-1",
    )


@pytest.mark.asyncio
async def test_write_validation(client: SengledClient):
    with patch.object(client, "_async_post", AsyncMock()) as mock_post:
        with pytest.raises(ValueError):
            await client.async_set_brightness(DEVICE_ID, 256)
        with pytest.raises(ValueError):
            await client.async_set_color_temperature(DEVICE_ID, 101)
        with pytest.raises(ValueError):
            await client.async_set_rgb_color(DEVICE_ID, (0, 0, 300))
    mock_post.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_device(client: SengledClient):
    with patch.object(
        client,
        "_async_post",
        AsyncMock(side_effect=[login_response(), DEVICE_DETAILS]),
    ) as mock_post:
        await client.async_get_devices()
        with pytest.raises(NotFoundError) as exc_info:
            await client.async_set_on_off("B0CE1814030004CC", True)
    assert exc_info.value.device_id == "B0CE1814030004CC"
    assert mock_post.call_count == 2


@pytest.mark.asyncio
async def test_close(client: SengledClient):
    http = client._http
    http.close = AsyncMock()
    await client.async_close()
    http.close.assert_not_called()

    owned = SengledClient("user@example.com", "secret")
    with patch("sengled_bulbs.aioclient.aiohttp.ClientSession") as mock_session:
        mock_session.return_value.closed = False
        mock_session.return_value.close = AsyncMock()
        assert owned._get_http() is mock_session.return_value
        await owned.async_close()
    mock_session.return_value.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_characteristics(mock_client):
    light = make_light(mock_client)
    chars = light.characteristics()
    assert list(chars) == ["On", "Brightness", "ColorTemperature", "Hue", "Saturation"]
    assert chars["Brightness"].min_value == 0
    assert chars["Brightness"].max_value == 255
    assert chars["ColorTemperature"].min_value == 154
    assert chars["ColorTemperature"].max_value == 500
    assert await chars["On"].get() is True
    assert await chars["ColorTemperature"].get() == 327

    white = make_light(mock_client, white_attrs())
    assert list(white.characteristics()) == ["On", "Brightness"]
    with pytest.raises(ValueError):
        await white.async_set_hue(10)
    with pytest.raises(ValueError):
        await white.async_set_color_temperature(300)


@pytest.mark.asyncio
async def test_accessory_information(mock_client):
    light = make_light(mock_client, color_attrs(firmwareVersion="V3.0.34"))
    assert light.accessory_information() == {
        "manufacturer": "Sengled",
        "model": "E12-N1E",
        "serial_number": DEVICE_ID,
        "firmware_revision": "V3.0.34",
    }
    light = make_light(mock_client, color_attrs(productCode=""))
    assert light.accessory_information()["model"] == "Sengled Hub"


@pytest.mark.asyncio
async def test_turn_on_off(mock_client, caplog: pytest.LogCaptureFixture):
    light = make_light(mock_client)
    await light.async_set_power_state(False)
    mock_client.async_set_on_off.assert_awaited_once_with(DEVICE_ID, False)
    assert not light.is_on

    mock_client.async_set_on_off.side_effect = asyncio.TimeoutError
    with pytest.raises(asyncio.TimeoutError):
        await light.async_set_power_state(True)
    assert not light.is_on
    assert "Failed to set power state" in caplog.text


@pytest.mark.asyncio
async def test_set_brightness(mock_client):
    light = make_light(mock_client)
    await light.async_set_brightness(300)
    mock_client.async_set_brightness.assert_awaited_once_with(DEVICE_ID, 255)
    assert await light.async_get_brightness() == 255

    await light.async_set_brightness(None)
    assert mock_client.async_set_brightness.call_args == call(DEVICE_ID, 0)

    mock_client.async_set_brightness.side_effect = RemoteWriteError("failed", 7)
    with pytest.raises(RemoteWriteError):
        await light.async_set_brightness(100)
    assert light.brightness.get_value() == 0


@pytest.mark.asyncio
async def test_set_color_temperature(mock_client):
    host = MagicMock()
    light = make_light(mock_client, host=host)
    await light.async_set_color_temperature(100)
    # clamped to the coolest temperature of the model
    mock_client.async_set_color_temperature.assert_awaited_once_with(DEVICE_ID, 100)
    assert light.color.get_color_temperature() == 154
    assert light.color.color_mode == ColorMode.TEMPERATURE
    assert call(light, "Hue", light.color.get_hue()) in host.update_characteristic.call_args_list
    assert (
        call(light, "Saturation", light.color.get_saturation())
        in host.update_characteristic.call_args_list
    )

    await light.async_set_color_temperature(0)
    assert mock_client.async_set_color_temperature.call_args == call(DEVICE_ID, 100)


@pytest.mark.asyncio
async def test_set_color_temperature_failed(mock_client):
    light = make_light(mock_client)
    before = light.color.copy_snapshot()
    mock_client.async_set_color_temperature.side_effect = aiohttp.ClientError("boom")
    with pytest.raises(aiohttp.ClientError):
        await light.async_set_color_temperature(400)
    assert light.color.state == before


@pytest.mark.asyncio
async def test_set_hue_and_saturation(mock_client):
    """Test hue is only sent together with the saturation that follows."""
    host = MagicMock()
    light = make_light(mock_client, color_attrs(onoff="0"), host=host)
    await light.async_set_hue(120)
    mock_client.async_set_rgb_color.assert_not_called()
    assert light.color.color_mode == ColorMode.RGB

    await light.async_set_saturation(100)
    mock_client.async_set_rgb_color.assert_awaited_once_with(DEVICE_ID, (0, 255, 0))
    assert await light.async_get_hue() == 120
    assert await light.async_get_saturation() == 100
    # the rgb call turns the bulb on
    assert light.is_on
    host.update_characteristic.assert_called_with(light, "On", True)


@pytest.mark.asyncio
async def test_set_saturation_failed(mock_client, caplog: pytest.LogCaptureFixture):
    light = make_light(mock_client, color_attrs(onoff="0"))
    await light.async_set_hue(240)
    before = light.color.copy_snapshot()
    mock_client.async_set_rgb_color.side_effect = RemoteWriteError("failed", 7)
    with pytest.raises(RemoteWriteError):
        await light.async_set_saturation(100)
    assert light.color.state == before
    assert not light.is_on
    assert "Failed to set rgb color" in caplog.text


@pytest.mark.asyncio
async def test_cache_color_while_off(mock_client):
    """Test color changes are held back until the bulb is turned on."""
    order = []
    mock_client.async_set_color_temperature.side_effect = lambda *args: order.append(
        ("color_temperature", *args)
    )
    mock_client.async_set_on_off.side_effect = lambda *args: order.append(
        ("on_off", *args)
    )
    light = make_light(
        mock_client,
        color_attrs(onoff="0"),
        policy=ColorWritePolicy(CachePolicy.ALWAYS, CachePolicy.NEVER),
    )
    await light.async_set_color_temperature(500)
    mock_client.async_set_color_temperature.assert_not_called()
    assert light.cache.has_cached_color

    await light.async_set_power_state(True)
    assert order == [("color_temperature", DEVICE_ID, 0), ("on_off", DEVICE_ID, True)]
    assert not light.cache.has_cached_color
    assert light.is_on


@pytest.mark.asyncio
async def test_cache_rgb_while_off(mock_client):
    light = make_light(
        mock_client,
        color_attrs(onoff="0"),
        policy=ColorWritePolicy(CachePolicy.ALWAYS, CachePolicy.NEVER),
    )
    await light.async_set_hue(240)
    await light.async_set_saturation(100)
    mock_client.async_set_rgb_color.assert_not_called()
    assert not light.is_on

    await light.async_set_power_state(True)
    mock_client.async_set_rgb_color.assert_awaited_once_with(DEVICE_ID, (0, 0, 255))
    mock_client.async_set_on_off.assert_awaited_once_with(DEVICE_ID, True)


@pytest.mark.asyncio
async def test_no_cache_when_on(mock_client):
    light = make_light(
        mock_client, policy=ColorWritePolicy(CachePolicy.ALWAYS, CachePolicy.NEVER)
    )
    await light.async_set_color_temperature(500)
    mock_client.async_set_color_temperature.assert_awaited_once_with(DEVICE_ID, 0)
    assert not light.cache.has_cached_color


@pytest.mark.asyncio
async def test_redundant_sets(mock_client):
    policy = ColorWritePolicy(CachePolicy.NEVER, CachePolicy.ALWAYS)
    light = make_light(mock_client, policy=policy)
    # 328 mireds is still 50 on the vendor scale
    await light.async_set_color_temperature(328)
    mock_client.async_set_color_temperature.assert_not_called()
    assert light.color.get_color_temperature() == 328

    light = make_light(mock_client, color_attrs(colorMode="1"), policy=policy)
    assert light.color.color_mode == ColorMode.RGB
    await light.async_set_hue(0)
    await light.async_set_saturation(100)
    mock_client.async_set_rgb_color.assert_not_called()

    await light.async_set_hue(120)
    await light.async_set_saturation(100)
    mock_client.async_set_rgb_color.assert_awaited_once_with(DEVICE_ID, (0, 255, 0))


@pytest.mark.asyncio
async def test_adaptive_lighting(mock_client):
    light = make_light(
        mock_client,
        color_attrs(onoff="0"),
        enable_adaptive_lighting=True,
        custom_temperature_adjustment=10,
    )
    assert light.adaptive_lighting_options() == {
        "controller_mode": "automatic",
        "custom_temperature_adjustment": 10,
    }
    assert not light.adaptive_lighting_active
    await light.async_set_color_temperature(400)
    mock_client.async_set_color_temperature.assert_awaited_once()

    light.set_adaptive_lighting_active(True)
    assert light.adaptive_lighting_active
    await light.async_set_color_temperature(450)
    assert mock_client.async_set_color_temperature.await_count == 1
    assert light.cache.has_cached_color

    assert make_light(mock_client).adaptive_lighting_options() is None
    white = make_light(mock_client, white_attrs(), enable_adaptive_lighting=True)
    assert white.adaptive_lighting_options() is None
    white.set_adaptive_lighting_active(True)
    assert not white.adaptive_lighting_active


@pytest.mark.asyncio
async def test_not_found(mock_client):
    on_not_found = MagicMock()
    light = make_light(mock_client, on_not_found=on_not_found)
    mock_client.async_set_on_off.side_effect = NotFoundError(DEVICE_ID)
    with pytest.raises(NotFoundError):
        await light.async_set_power_state(False)
    on_not_found.assert_called_once_with(DEVICE_ID)


@pytest.mark.asyncio
async def test_refresh(mock_client):
    light = make_light(mock_client)
    mock_client.async_get_devices.return_value = [color_attrs(onoff="0")]
    assert await light.async_get_power_state(refresh=True) is False

    on_not_found = MagicMock()
    light = make_light(mock_client, on_not_found=on_not_found)
    mock_client.async_get_devices.return_value = []
    with pytest.raises(NotFoundError):
        await light.async_get_brightness(refresh=True)
    on_not_found.assert_called_once_with(DEVICE_ID)


@pytest.fixture
async def platform(mock_client):
    host = MagicMock(spec=AccessoryHost)
    config = PlatformConfig(username="user@example.com", password="secret")
    platform = SengledPlatform(config, host, client=mock_client)
    yield platform
    await platform.async_stop()


@pytest.mark.asyncio
async def test_discover(platform: SengledPlatform):
    plan = await platform.async_discover()
    assert plan is not None
    assert plan.changed
    assert set(platform.accessories) == {DEVICE_ID, WHITE_DEVICE_ID}
    assert platform.host.register_accessory.call_count == 2
    platform.client.async_login.assert_awaited_once()
    platform.client.async_get_devices.assert_awaited_once_with(use_cache=False)
    light = platform.accessories[DEVICE_ID]
    platform.host.update_characteristic.assert_any_call(light, "On", True)

    # the same roster changes nothing
    plan = await platform.async_discover()
    assert not plan.changed
    assert platform.host.register_accessory.call_count == 2
    assert platform.accessories[DEVICE_ID] is light


@pytest.mark.asyncio
async def test_discover_rename_and_remove(
    platform: SengledPlatform, caplog: pytest.LogCaptureFixture
):
    await platform.async_discover()
    old = platform.accessories[DEVICE_ID]
    white = platform.accessories[WHITE_DEVICE_ID]
    platform.client.async_get_devices.return_value = [color_attrs(name="Kitchen")]

    plan = await platform.async_discover()
    assert [attrs.id for attrs in plan.replaced] == [DEVICE_ID]
    assert plan.removed == [WHITE_DEVICE_ID]
    assert platform.host.unregister_accessory.call_args_list == [
        call(white),
        call(old),
    ]
    assert platform.accessories[DEVICE_ID] is not old
    assert platform.accessories[DEVICE_ID].name == "Kitchen"
    assert platform.get_light("Kitchen") is platform.accessories[DEVICE_ID]
    assert platform.get_light("Hallway") is None
    assert "Renamed to Kitchen" in caplog.text


@pytest.mark.asyncio
async def test_discover_updates_state(platform: SengledPlatform):
    await platform.async_discover()
    platform.client.async_get_devices.return_value = [
        color_attrs(brightness="10"),
        white_attrs(onoff="1"),
    ]
    await platform.async_discover()
    assert platform.accessories[DEVICE_ID].brightness.get_value() == 10
    assert platform.accessories[WHITE_DEVICE_ID].is_on


@pytest.mark.asyncio
async def test_discover_single_flight(platform: SengledPlatform):
    started = asyncio.Event()
    release = asyncio.Event()

    async def _slow_get_devices(use_cache=True):
        started.set()
        await release.wait()
        return [color_attrs()]

    platform.client.async_get_devices.side_effect = _slow_get_devices
    task = asyncio.create_task(platform.async_discover())
    await started.wait()
    assert await platform.async_discover() is None
    release.set()
    plan = await task
    assert plan is not None
    platform.client.async_get_devices.assert_awaited_once()


@pytest.mark.asyncio
async def test_discover_failed(
    platform: SengledPlatform, caplog: pytest.LogCaptureFixture
):
    platform.client.async_get_devices.side_effect = aiohttp.ClientError("boom")
    assert await platform.async_discover() is None
    assert "Failed to discover devices: boom" in caplog.text
    assert platform.accessories == {}

    platform.client.async_login.side_effect = AuthError("bad password")
    with pytest.raises(AuthError):
        await platform.async_update_devices()


@pytest.mark.asyncio
async def test_configure_accessory(platform: SengledPlatform):
    record = DeviceRecord.from_attributes(color_attrs())
    first = platform.configure_accessory(record)
    platform.host.register_accessory.assert_not_called()
    second = platform.configure_accessory(DeviceRecord.from_dict(record.to_dict()))
    platform.host.unregister_accessory.assert_called_once_with(first)
    assert platform.accessories == {DEVICE_ID: second}

    # a restored accessory is updated in place by discovery
    platform.client.async_get_devices.return_value = [color_attrs()]
    await platform.async_discover()
    assert platform.accessories[DEVICE_ID] is second
    platform.host.register_accessory.assert_not_called()


@pytest.mark.asyncio
async def test_not_found_removes_accessory(platform: SengledPlatform):
    await platform.async_discover()
    light = platform.accessories[DEVICE_ID]
    platform.client.async_set_on_off.side_effect = NotFoundError(DEVICE_ID)
    with pytest.raises(NotFoundError):
        await light.async_set_power_state(False)
    assert DEVICE_ID not in platform.accessories
    platform.host.unregister_accessory.assert_called_once_with(light)


@pytest.mark.asyncio
async def test_start_stop(platform: SengledPlatform):
    platform.config.discovery_interval = 0
    await platform.async_start()
    assert len(platform.accessories) == 2
    # let the periodic loop run a few ticks
    for _ in range(5):
        await asyncio.sleep(0)
    assert platform.client.async_get_devices.await_count >= 2
    await platform.async_stop()
    platform.client.async_close.assert_awaited()
    count = platform.client.async_get_devices.await_count
    await asyncio.sleep(0)
    assert platform.client.async_get_devices.await_count == count


@pytest.mark.asyncio
async def test_debug_config(mock_client):
    logger = logging.getLogger("sengled_bulbs")
    logger.setLevel(logging.INFO)
    config = PlatformConfig(username="u", password="p", debug=True)
    SengledPlatform(config, LoggingHost(), client=mock_client)
    assert logger.level == logging.DEBUG


@pytest.mark.asyncio
async def test_logging_host(mock_client, caplog: pytest.LogCaptureFixture):
    host = LoggingHost()
    config = PlatformConfig(username="u", password="p")
    platform = SengledPlatform(config, host, client=mock_client)
    await platform.async_discover()
    assert set(host.accessories) == {DEVICE_ID, WHITE_DEVICE_ID}
    assert "Registered Living Room (E12-N1E)" in caplog.text
    platform.remove_device(WHITE_DEVICE_ID)
    assert set(host.accessories) == {DEVICE_ID}
