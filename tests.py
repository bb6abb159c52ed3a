import unittest
from unittest.mock import patch

import pytest

from sengled_bulbs.brightness import BrightnessModel
from sengled_bulbs.color import (
    ColorModel,
    RgbColorState,
    TemperatureColorState,
    TemperatureRgbColorState,
)
from sengled_bulbs.const import CachePolicy, ColorMode
from sengled_bulbs.models import DeviceAttributes, DeviceRecord, PlatformConfig
from sengled_bulbs.models_db import (
    DEFAULT_COLOR_CONFIG,
    ColorConfig,
    get_color_config,
    get_model,
)
from sengled_bulbs.reconcile import (
    AccessoryRegistry,
    ReconciliationEngine,
    plan_reconciliation,
)
from sengled_bulbs.state import ColorWritePolicy, DeviceStateCache, WriteState
from sengled_bulbs.utils import (
    HsvColor,
    RgbColor,
    byte_rgb_to_normalized_rgb,
    hsv_to_rgb,
    kelvins_to_mireds,
    kelvins_to_rgb,
    mireds_to_kelvins,
    mireds_to_vendor_color_temperature,
    normalized_rgb_to_byte_rgb,
    rgb_to_hsv,
    round_half_up,
    utils,
    vendor_color_temperature_to_mireds,
)

DEVICE_ID = "B0CE1814030004AA"

LAMP_INFO = {
    "deviceUuid": DEVICE_ID,
    "attributes": {
        "name": "Living Room",
        "onoff": "1",
        "brightness": "128",
        "colorTemperature": "50",
        "colorMode": "2",
        "rgbColorR": "255",
        "rgbColorG": "0",
        "rgbColorB": "0",
        "isOnline": "1",
        "deviceRssi": "4",
        "productCode": "E12-N1E",
        "firmwareVersion": "V3.0.34",
    },
}

WHITE_LAMP_INFO = {
    "deviceUuid": "B0CE1814030004BB",
    "attributes": {
        "name": "",
        "onoff": "0",
        "brightness": "255",
        "isOnline": "0",
        "productCode": "E11-G13",
    },
}


def _attrs(device_id: str, name: str) -> DeviceAttributes:
    return DeviceAttributes(id=device_id, name=name, onoff=True)


class TestConversions(unittest.TestCase):
    def test_kelvins_mireds(self):
        self.assertEqual(kelvins_to_mireds(5000), 200)
        self.assertEqual(mireds_to_kelvins(200), 5000)
        self.assertEqual(mireds_to_kelvins(153), 6536)
        self.assertEqual(kelvins_to_mireds(2000), 500)

    def test_kelvins_to_rgb(self):
        self.assertEqual(kelvins_to_rgb(6600), RgbColor(1.0, 1.0, 1.0))
        warm = kelvins_to_rgb(1000)
        self.assertEqual(warm.r, 1.0)
        self.assertAlmostEqual(warm.g, 0.2664, places=3)
        self.assertEqual(warm.b, 0.0)
        # out of range temperatures are clamped
        self.assertEqual(kelvins_to_rgb(500), kelvins_to_rgb(1000))
        self.assertEqual(kelvins_to_rgb(90000), kelvins_to_rgb(40000))
        cold = kelvins_to_rgb(10000)
        self.assertLess(cold.r, 1.0)
        self.assertEqual(cold.b, 1.0)

    def test_rgb_to_hsv(self):
        self.assertEqual(rgb_to_hsv(RgbColor(1.0, 0.0, 0.0)), HsvColor(0, 100, 100))
        self.assertEqual(rgb_to_hsv(RgbColor(0.0, 1.0, 0.0)), HsvColor(120, 100, 100))
        self.assertEqual(rgb_to_hsv(RgbColor(1.0, 1.0, 1.0)), HsvColor(0, 0, 100))
        self.assertEqual(rgb_to_hsv(RgbColor(0.0, 0.0, 0.0)), HsvColor(0, 0, 0))
        self.assertEqual(rgb_to_hsv(kelvins_to_rgb(1000)).h, 16)

    def test_hsv_to_rgb(self):
        self.assertEqual(
            normalized_rgb_to_byte_rgb(hsv_to_rgb(HsvColor(240, 100, 100))),
            (0, 0, 255),
        )
        self.assertEqual(
            normalized_rgb_to_byte_rgb(hsv_to_rgb(HsvColor(360, 100, 100))),
            (255, 0, 0),
        )
        self.assertEqual(
            normalized_rgb_to_byte_rgb(hsv_to_rgb(HsvColor(0, 0, 100))),
            (255, 255, 255),
        )

    def test_byte_rgb(self):
        for value in range(256):
            rgb = (value, 255 - value, value)
            self.assertEqual(
                normalized_rgb_to_byte_rgb(byte_rgb_to_normalized_rgb(rgb)), rgb
            )
        self.assertEqual(normalized_rgb_to_byte_rgb((1.2, -0.1, 0.5)), (255, 0, 128))

    def test_vendor_color_temperature(self):
        config = DEFAULT_COLOR_CONFIG
        self.assertEqual(vendor_color_temperature_to_mireds(0, config), 500)
        self.assertEqual(vendor_color_temperature_to_mireds(100, config), 140)
        self.assertEqual(vendor_color_temperature_to_mireds(50, config), 320)
        self.assertEqual(mireds_to_vendor_color_temperature(500, config), 0)
        self.assertEqual(mireds_to_vendor_color_temperature(140, config), 100)
        for vendor in range(101):
            mireds = vendor_color_temperature_to_mireds(vendor, config)
            self.assertLessEqual(
                abs(mireds_to_vendor_color_temperature(mireds, config) - vendor), 1
            )

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(3.5), 4)
        self.assertEqual(round_half_up(-2.5), -2)
        self.assertEqual(round_half_up(2.49), 2)
        self.assertEqual(kelvins_to_mireds(3200), 313)
        self.assertEqual(mireds_to_kelvins(3200), 313)
        self.assertEqual(
            vendor_color_temperature_to_mireds(75, get_color_config("E12-N1E")), 241
        )

    def test_mireds_vendor_round_trip(self):
        for config in (DEFAULT_COLOR_CONFIG, get_color_config("E12-N1E")):
            step = (
                config.max_color_temperature - config.min_color_temperature
            ) / 100
            previous = None
            for mireds in range(
                config.min_color_temperature, config.max_color_temperature + 1
            ):
                vendor = mireds_to_vendor_color_temperature(mireds, config)
                assert 0 <= vendor <= 100
                back = vendor_color_temperature_to_mireds(vendor, config)
                self.assertLessEqual(abs(back - mireds), step / 2 + 1)
                if previous is not None:
                    self.assertGreaterEqual(back, previous)
                previous = back

    def test_color_object_to_tuple(self):
        self.assertEqual(utils.color_object_to_tuple("red"), (255, 0, 0))
        self.assertEqual(utils.color_object_to_tuple("#00FF00"), (0, 255, 0))
        self.assertEqual(utils.color_object_to_tuple("0,0,255"), (0, 0, 255))
        self.assertEqual(utils.color_object_to_tuple((1, 2, 3)), (1, 2, 3))
        self.assertIsNone(utils.color_object_to_tuple("not a color"))
        self.assertIsNone(utils.color_object_to_tuple(42))  # type: ignore

    def test_color_tuple_to_string(self):
        self.assertEqual(utils.color_tuple_to_string((255, 0, 0)), "red")
        self.assertEqual(utils.color_tuple_to_string((1, 2, 3)), "(1, 2, 3)")

    def test_get_color_names_list(self):
        names = utils.get_color_names_list()
        assert "red" in names
        assert names == sorted(names)


class TestModelsDb(unittest.TestCase):
    def test_known_model(self):
        assert get_model("E12-N1E") is not None
        assert get_model("e12-n1e") is get_model("E12-N1E")
        self.assertEqual(get_color_config("E12-N1E").min_color_temperature, 154)

    def test_unknown_model(self):
        assert get_model("E11-G13") is None
        assert get_model(None) is None
        self.assertIs(get_color_config("E11-G13"), DEFAULT_COLOR_CONFIG)
        self.assertIs(get_color_config(None), DEFAULT_COLOR_CONFIG)

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            ColorConfig(max_color_temperature=140, min_color_temperature=500)
        with pytest.raises(ValueError):
            ColorConfig(max_color_temperature=200, min_color_temperature=200)


class TestBrightness(unittest.TestCase):
    def test_clamp(self):
        self.assertEqual(BrightnessModel(300).get_value(), 255)
        self.assertEqual(BrightnessModel(-5).get_value(), 0)
        brightness = BrightnessModel(128)
        brightness.set_value(400)
        self.assertEqual(brightness.get_value(), 255)
        brightness.set_value(-1)
        self.assertEqual(brightness.get_value(), 0)
        self.assertEqual((brightness.min, brightness.max), (0, 255))

    def test_unsupported(self):
        brightness = BrightnessModel(None)
        assert not brightness.supports_brightness()
        self.assertIsNone(brightness.get_value())
        with pytest.raises(ValueError):
            brightness.set_value(10)


class TestColorModel(unittest.TestCase):
    def test_temperature_and_rgb(self):
        color = ColorModel.from_values(
            DEFAULT_COLOR_CONFIG, ColorMode.TEMPERATURE, 200, RgbColor(1.0, 0.0, 0.0)
        )
        assert isinstance(color.state, TemperatureRgbColorState)
        assert color.supports_color_temperature()
        assert color.supports_rgb()
        self.assertEqual(color.color_mode, ColorMode.TEMPERATURE)
        # temperature was set last, so the rgb is the black body color
        self.assertEqual(color.get_rgb(), kelvins_to_rgb(5000))
        self.assertLess(color.get_saturation(), 30)

        color.set_hue(120)
        color.set_saturation(100)
        self.assertEqual(color.color_mode, ColorMode.RGB)
        self.assertEqual(color.vendor_rgb(), (0, 255, 0))
        self.assertEqual(color.get_color_temperature(), 200)

        color.set_color_temperature(153)
        self.assertEqual(color.color_mode, ColorMode.TEMPERATURE)
        self.assertEqual(color.get_color_temperature(), 153)
        self.assertEqual(color.get_hsv(), rgb_to_hsv(kelvins_to_rgb(6536)))

    def test_rgb_mode_keeps_rgb(self):
        color = ColorModel.from_values(
            DEFAULT_COLOR_CONFIG, ColorMode.RGB, 200, RgbColor(0.0, 0.0, 1.0)
        )
        self.assertEqual(color.color_mode, ColorMode.RGB)
        self.assertEqual(color.get_hue(), 240)
        self.assertEqual(color.get_saturation(), 100)

    def test_temperature_only(self):
        color = ColorModel.from_values(DEFAULT_COLOR_CONFIG, None, 300)
        assert isinstance(color.state, TemperatureColorState)
        assert not color.supports_rgb()
        with pytest.raises(ValueError):
            color.get_hue()
        with pytest.raises(ValueError):
            color.set_saturation(50)
        with pytest.raises(ValueError):
            color.set_color_temperature(600)
        with pytest.raises(ValueError):
            ColorModel.from_values(DEFAULT_COLOR_CONFIG, None, 600)

    def test_rgb_only(self):
        color = ColorModel.from_values(
            DEFAULT_COLOR_CONFIG, None, None, RgbColor(1.0, 0.0, 0.0)
        )
        assert isinstance(color.state, RgbColorState)
        assert not color.supports_color_temperature()
        self.assertEqual(color.get_hsv(), HsvColor(0, 100, 100))
        with pytest.raises(ValueError):
            color.set_color_temperature(300)

    def test_no_color(self):
        with pytest.raises(ValueError):
            ColorModel.from_values(DEFAULT_COLOR_CONFIG)

    def test_snapshot(self):
        color = ColorModel.from_values(
            DEFAULT_COLOR_CONFIG, ColorMode.TEMPERATURE, 300, RgbColor(1.0, 1.0, 1.0)
        )
        snapshot = color.copy_snapshot()
        color.set_hue(200)
        color.set_saturation(50)
        self.assertNotEqual(color.state, snapshot)
        color.restore_snapshot(snapshot)
        self.assertEqual(color.state, snapshot)
        self.assertEqual(color.color_mode, ColorMode.TEMPERATURE)

    def test_to_dict(self):
        color = ColorModel.from_values(
            DEFAULT_COLOR_CONFIG, ColorMode.RGB, 300, RgbColor(1.0, 0.0, 0.0)
        )
        data = color.to_dict()
        self.assertEqual(
            data,
            {
                "max_color_temperature": 500,
                "min_color_temperature": 140,
                "color_mode": 1,
                "color_temperature": 300,
                "rgb": [255, 0, 0],
            },
        )
        self.assertEqual(ColorModel.from_dict(data).state, color.state)

    def test_to_dict_gamut(self):
        config = ColorConfig(
            max_color_temperature=500,
            min_color_temperature=154,
            gamut=((0.68, 0.31), (0.11, 0.82), (0.13, 0.04)),
        )
        color = ColorModel.from_values(config, ColorMode.TEMPERATURE, 300, None)
        data = color.to_dict()
        self.assertEqual(data["gamut"], [[0.68, 0.31], [0.11, 0.82], [0.13, 0.04]])
        restored = ColorModel.from_dict(data)
        self.assertEqual(restored.config, config)
        self.assertEqual(restored.state, color.state)


class TestDeviceModels(unittest.TestCase):
    def test_from_lamp_info(self):
        attrs = DeviceAttributes.from_lamp_info(LAMP_INFO)
        self.assertEqual(attrs.id, DEVICE_ID)
        self.assertEqual(attrs.display_name, "Living Room")
        assert attrs.onoff
        self.assertEqual(attrs.brightness, 128)
        self.assertEqual(attrs.color_temperature, 50)
        self.assertEqual(attrs.color_mode, 2)
        self.assertEqual(attrs.rgb, (255, 0, 0))
        self.assertEqual(attrs.signal_quality, 4)

        record = DeviceRecord.from_attributes(attrs)
        self.assertEqual(record.manufacturer, "Sengled")
        self.assertEqual(record.model, "E12-N1E")
        self.assertEqual(record.firmware_version, "V3.0.34")
        self.assertEqual(record.brightness.get_value(), 128)
        assert record.color is not None
        self.assertEqual(record.color.color_mode, ColorMode.TEMPERATURE)
        self.assertEqual(record.color.get_color_temperature(), 327)
        self.assertEqual(record.color.vendor_color_temperature(), 50)

    def test_white_bulb(self):
        attrs = DeviceAttributes.from_lamp_info(WHITE_LAMP_INFO)
        self.assertEqual(attrs.display_name, "B0CE1814030004BB")
        assert not attrs.onoff
        assert not attrs.is_online
        record = DeviceRecord.from_attributes(attrs)
        self.assertIsNone(record.color)
        assert record.brightness.supports_brightness()

    def test_record_dict(self):
        record = DeviceRecord.from_attributes(DeviceAttributes.from_lamp_info(LAMP_INFO))
        restored = DeviceRecord.from_dict(record.to_dict())
        self.assertEqual(restored.display_name, "Living Room")
        self.assertEqual(restored.brightness.get_value(), 128)
        assert restored.color is not None
        self.assertEqual(restored.color.state, record.color.state)

    def test_update_from_attributes(self):
        record = DeviceRecord.from_attributes(DeviceAttributes.from_lamp_info(LAMP_INFO))
        record.update_from_attributes(
            DeviceAttributes.from_lamp_info(
                {
                    "deviceUuid": DEVICE_ID,
                    "attributes": {
                        **LAMP_INFO["attributes"],
                        "onoff": "0",
                        "brightness": "10",
                    },
                }
            )
        )
        assert not record.power_on
        self.assertEqual(record.brightness.get_value(), 10)


class TestPlatformConfig(unittest.TestCase):
    def test_from_dict(self):
        config = PlatformConfig.from_dict(
            {
                "platform": "SengledHub",
                "username": "user@example.com",
                "password": "secret",
                "Timeout": 2000,
                "EnableAdaptiveLighting": True,
                "ColorCachePolicy": "always",
            }
        )
        self.assertEqual(config.timeout, 2.0)
        assert config.enable_adaptive_lighting
        self.assertEqual(config.color_cache_policy, CachePolicy.ALWAYS)
        self.assertEqual(config.redundant_set_policy, CachePolicy.SCHEDULE)
        self.assertEqual(config.discovery_interval, 360)
        self.assertEqual(config.extra, {"platform": "SengledHub"})
        data = config.to_dict()
        self.assertEqual(data["Timeout"], 2000)
        self.assertEqual(data["platform"], "SengledHub")
        self.assertEqual(data["ColorCachePolicy"], "always")

    def test_defaults(self):
        config = PlatformConfig.from_dict({"username": "u", "password": "p"})
        self.assertEqual(config.timeout, 4.0)
        assert not config.debug

    def test_invalid(self):
        with pytest.raises(ValueError):
            PlatformConfig.from_dict({"username": "user@example.com"})
        with pytest.raises(ValueError):
            PlatformConfig.from_dict(
                {"username": "u", "password": "p", "RedundantSetPolicy": "sometimes"}
            )


class TestState(unittest.TestCase):
    def _cache(self, policy=None):
        return DeviceStateCache(
            DeviceRecord.from_attributes(DeviceAttributes.from_lamp_info(LAMP_INFO)),
            policy,
        )

    def test_policy(self):
        policy = ColorWritePolicy()
        assert not policy.should_cache(schedule_active=False, power_on=False)
        assert policy.should_cache(schedule_active=True, power_on=False)
        assert not policy.should_cache(schedule_active=True, power_on=True)
        assert policy.should_suppress_redundant(schedule_active=True)
        always = ColorWritePolicy(CachePolicy.ALWAYS, CachePolicy.NEVER)
        assert always.should_cache(schedule_active=False, power_on=False)
        assert not always.should_suppress_redundant(schedule_active=True)

    def test_optimistic_rollback(self):
        cache = self._cache()
        record = cache.record
        with pytest.raises(RuntimeError):
            with cache.optimistic(power=True, brightness=True, color=True):
                record.power_on = False
                record.brightness.set_value(1)
                record.color.set_hue(100)
                raise RuntimeError("write failed")
        assert record.power_on
        self.assertEqual(record.brightness.get_value(), 128)
        self.assertEqual(record.color.color_mode, ColorMode.TEMPERATURE)

    def test_optimistic_keeps_unselected(self):
        cache = self._cache()
        with pytest.raises(RuntimeError):
            with cache.optimistic(power=True):
                cache.record.brightness.set_value(1)
                raise RuntimeError("write failed")
        self.assertEqual(cache.record.brightness.get_value(), 1)

    def test_refresh_keeps_cached_color(self):
        cache = self._cache(ColorWritePolicy(CachePolicy.ALWAYS))
        cache.record.power_on = False
        assert cache.should_cache_color()
        cache.record.color.set_color_temperature(500)
        cache.mark_color_cached()
        self.assertEqual(cache.write_state, WriteState.CACHED_PENDING_FLUSH)
        cache.refresh(DeviceAttributes.from_lamp_info(LAMP_INFO))
        self.assertEqual(cache.record.color.get_color_temperature(), 500)
        cache.mark_flushed()
        self.assertEqual(cache.write_state, WriteState.LIVE)
        cache.refresh(DeviceAttributes.from_lamp_info(LAMP_INFO))
        self.assertEqual(cache.record.color.get_color_temperature(), 327)


class FakeRegistry(AccessoryRegistry):
    def __init__(self):
        self.names = {}
        self.calls = []

    def tracked_names(self):
        return dict(self.names)

    def add_device(self, attrs):
        self.calls.append(("add", attrs.id))
        self.names[attrs.id] = attrs.display_name

    def update_device(self, attrs):
        self.calls.append(("update", attrs.id))

    def remove_device(self, device_id):
        self.calls.append(("remove", device_id))
        del self.names[device_id]


class TestReconcile(unittest.TestCase):
    def test_plan(self):
        plan = plan_reconciliation(
            {"A": "Alpha", "B": "Beta"}, [_attrs("A", "Alpha"), _attrs("C", "Gamma")]
        )
        self.assertEqual([attrs.id for attrs in plan.added], ["C"])
        self.assertEqual([attrs.id for attrs in plan.updated], ["A"])
        self.assertEqual(plan.replaced, [])
        self.assertEqual(plan.removed, ["B"])
        assert plan.changed

    def test_plan_rename(self):
        plan = plan_reconciliation({"A": "Alpha"}, [_attrs("A", "Kitchen")])
        self.assertEqual([attrs.id for attrs in plan.replaced], ["A"])
        self.assertEqual(plan.added, [])
        self.assertEqual(plan.removed, [])

    def test_plan_duplicate_roster_entry(self):
        plan = plan_reconciliation({}, [_attrs("A", "Alpha"), _attrs("A", "Alpha")])
        self.assertEqual(len(plan.added), 1)

    def test_engine_idempotent(self):
        registry = FakeRegistry()
        registry.names = {"A": "Alpha", "B": "Beta"}
        engine = ReconciliationEngine(registry)
        roster = [_attrs("A", "Kitchen"), _attrs("C", "Gamma")]

        plan = engine.reconcile(roster)
        assert plan.changed
        self.assertEqual(
            registry.calls,
            [("remove", "B"), ("remove", "A"), ("add", "A"), ("add", "C")],
        )
        self.assertEqual(registry.names, {"A": "Kitchen", "C": "Gamma"})

        registry.calls.clear()
        plan = engine.reconcile(roster)
        assert not plan.changed
        self.assertEqual(registry.calls, [("update", "A"), ("update", "C")])

    def test_engine_empty_roster(self):
        registry = FakeRegistry()
        registry.names = {"A": "Alpha"}
        with patch.object(registry, "add_device") as mock_add:
            ReconciliationEngine(registry).reconcile([])
        mock_add.assert_not_called()
        self.assertEqual(registry.names, {})
