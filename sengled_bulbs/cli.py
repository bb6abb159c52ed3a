#!/usr/bin/env python
"""
This is a utility for controlling Sengled Element bulbs through the Sengled
cloud, the same way the Sengled Home app does.

##### Available:
* Listing the bulbs on an account
* Turning on/off bulbs
* Get state information
* Setting brightness
* Setting color temperature
* Setting a color
* Watching the account for added, renamed and removed bulbs

##### Cool feature:
* Specify colors with names or web hex values using the python "webcolors"
package. See the following for valid color names:
http://www.w3schools.com/html/html_colornames.asp

"""

import asyncio
import logging
from optparse import OptionGroup, OptionParser, Values
import os
import sys
from typing import Any, List, Tuple

from .const import DEFAULT_DISCOVERY_INTERVAL, DEFAULT_TIMEOUT
from .host import LoggingHost
from .light import SengledLight
from .models import PlatformConfig
from .platform import SengledPlatform
from .utils import (
    byte_rgb_to_normalized_rgb,
    kelvins_to_mireds,
    rgb_to_hsv,
    utils,
)

_LOGGER = logging.getLogger(__name__)


# =======================================================================
def showUsageExamples() -> None:
    example_text = """
Examples:

List the bulbs on the account:
    %prog% -u me@example.com -p secret -l

Show info about all bulbs:
    %prog% -i

Turn on:
    %prog% "Living Room" --on
    %prog% B0CE18140000D6C1 -1

Turn off:
    %prog% "Living Room" --off
    %prog% "Living Room" -0

Set brightness to half:
    %prog% "Living Room" -b 128

Set color temperature 2700K:
    %prog% "Living Room" -k 2700

Set fixed color red:
    %prog% "Living Room" -c Red
    %prog% "Living Room" -c 255,0,0
    %prog% "Living Room" -c "#FF0000"

Watch the account for changes every minute:
    %prog% -w --interval 60

Credentials can also be given as SENGLED_USERNAME and SENGLED_PASSWORD.
    """

    print(example_text.replace("%prog%", sys.argv[0]))


def parseArgs() -> Tuple[Values, Any]:  # noqa: C901

    parser = OptionParser()

    parser.description = "A utility to control Sengled Element bulbs. "
    power_group = OptionGroup(parser, "Power options (mutually exclusive)")
    mode_group = OptionGroup(parser, "Mode options (mutually exclusive)")
    info_group = OptionGroup(parser, "Program help and information option")
    other_group = OptionGroup(parser, "Other options")

    parser.add_option_group(info_group)
    info_group.add_option(
        "-e",
        "--examples",
        action="store_true",
        dest="showexamples",
        default=False,
        help="Show usage examples",
    )
    info_group.add_option(
        "--listcolors",
        action="store_true",
        dest="listcolors",
        default=False,
        help="List color names",
    )

    parser.add_option(
        "-u",
        "--username",
        dest="username",
        default=os.environ.get("SENGLED_USERNAME"),
        help="Sengled account user name",
    )
    parser.add_option(
        "-p",
        "--password",
        dest="password",
        default=os.environ.get("SENGLED_PASSWORD"),
        help="Sengled account password",
    )
    parser.add_option(
        "-l",
        "--list",
        action="store_true",
        dest="list",
        default=False,
        help="List the bulbs on the account",
    )
    power_group.add_option(
        "-1",
        "--on",
        action="store_true",
        dest="on",
        default=False,
        help="Turn on specified bulb(s)",
    )
    power_group.add_option(
        "-0",
        "--off",
        action="store_true",
        dest="off",
        default=False,
        help="Turn off specified bulb(s)",
    )
    parser.add_option_group(power_group)

    mode_group.add_option(
        "-c",
        "--color",
        dest="color",
        default=None,
        help="For setting a single color. Can be either color name, web hex, or comma-separated RGB triple.",
        metavar="COLOR",
    )
    mode_group.add_option(
        "-k",
        "--kelvin",
        dest="kelvin",
        default=None,
        help="Set white light with a color temperature in Kelvin",
        metavar="KELVIN",
        type="int",
    )
    parser.add_option_group(mode_group)

    parser.add_option(
        "-b",
        "--brightness",
        dest="brightness",
        default=None,
        help="Set brightness (0-255)",
        metavar="LEVEL",
        type="int",
    )
    parser.add_option(
        "-i",
        "--info",
        action="store_true",
        dest="info",
        default=False,
        help="Info about bulb(s) state",
    )
    parser.add_option(
        "-w",
        "--watch",
        action="store_true",
        dest="watch",
        default=False,
        help="Keep running and discover bulbs periodically",
    )

    other_group.add_option(
        "--interval",
        dest="interval",
        default=DEFAULT_DISCOVERY_INTERVAL,
        help="Seconds between discoveries when watching",
        type="int",
    )
    other_group.add_option(
        "--timeout",
        dest="timeout",
        default=DEFAULT_TIMEOUT,
        help="Seconds to wait for the Sengled cloud",
        type="float",
    )
    other_group.add_option(
        "--debug",
        action="store_true",
        dest="debug",
        default=False,
        help="Log debug output",
    )
    parser.add_option_group(other_group)

    parser.usage = "usage: %prog [-li10bkcwe] [device1 [device2 [device3] ...]."
    (options, args) = parser.parse_args()

    if options.showexamples:
        showUsageExamples()
        sys.exit(0)

    if options.listcolors:
        for c in utils.get_color_names_list():
            print(f"{c}, ")
        print("")
        sys.exit(0)

    if not options.username or not options.password:
        parser.error("A Sengled username and password are required")

    if options.color and options.kelvin:
        parser.error("options --color and --kelvin are mutually exclusive")

    if options.on and options.off:
        parser.error("options --on and --off are mutually exclusive")

    if options.color:
        options.color = utils.color_object_to_tuple(options.color)
        if options.color is None:
            parser.error("bad color specification")
        if any(i < 0 or i > 255 for i in options.color):
            parser.error("Invalid color received, values must be between 0-255")

    if options.kelvin is not None and options.kelvin <= 0:
        parser.error("Color temperature must be a positive number of Kelvin")

    if options.brightness is not None and not 0 <= options.brightness <= 255:
        parser.error("Brightness must be between 0 and 255")

    set_count = sum(
        1
        for op in (
            options.on,
            options.off,
            options.color,
            options.kelvin,
            options.brightness is not None,
        )
        if op
    )
    if set_count and not args:
        parser.error("You must specify at least one device id or name")

    if not (set_count or options.list or options.info or options.watch):
        parser.error("An operation must be specified")

    return (options, args)


def format_light(light: SengledLight) -> str:
    record = light.record
    parts = [
        f"{record.id} [{record.display_name}] {record.model}",
        "ON " if record.power_on else "OFF",
    ]
    if not record.is_online:
        parts.append("offline")
    if light.brightness.supports_brightness():
        parts.append(f"Brightness: {light.brightness.get_value()}")
    color = light.color
    if color is not None:
        parts.append(f"Mode: {color.color_mode.name.lower()}")
        if color.supports_color_temperature():
            parts.append(f"Color temperature: {color.get_color_temperature()} mireds")
        if color.supports_rgb():
            rgb = color.vendor_rgb()
            parts.append(f"Color: {tuple(rgb)} {utils.color_tuple_to_string(rgb)}")
    return " ".join(parts)


async def _async_apply(options: Values, light: SengledLight) -> None:
    if options.kelvin is not None:
        print(f"Setting {light.name} color temperature {options.kelvin}K")
        await light.async_set_color_temperature(kelvins_to_mireds(options.kelvin))

    if options.color is not None:
        print(
            f"Setting {light.name} color RGB:{options.color}"
            f" [{utils.color_tuple_to_string(options.color)}]"
        )
        hsv = rgb_to_hsv(byte_rgb_to_normalized_rgb(options.color))
        await light.async_set_hue(hsv.h)
        await light.async_set_saturation(hsv.s)

    if options.brightness is not None:
        print(f"Setting {light.name} brightness {options.brightness}")
        await light.async_set_brightness(options.brightness)

    if options.on:
        print(f"Turning on {light.name}")
        await light.async_set_power_state(True)
    elif options.off:
        print(f"Turning off {light.name}")
        await light.async_set_power_state(False)


async def _async_watch(platform: SengledPlatform) -> None:
    await platform.async_start()
    print(
        f"Watching {len(platform.accessories)} bulbs,"
        f" discovering every {platform.config.discovery_interval} seconds"
    )
    try:
        await asyncio.Event().wait()
    finally:
        await platform.async_stop()


async def async_main(options: Values, args: List[str]) -> int:
    config = PlatformConfig(
        username=options.username,
        password=options.password,
        debug=options.debug,
        timeout=options.timeout,
        discovery_interval=options.interval,
    )
    platform = SengledPlatform(config, LoggingHost())

    if options.watch:
        await _async_watch(platform)
        return 0

    failed = 0
    try:
        await platform.async_update_devices()
        if options.list:
            print(f"{len(platform.accessories)} bulbs found")
            for light in platform.accessories.values():
                print(f"  {light.id} {light.name}")

        selected = args or (list(platform.accessories) if options.info else [])
        for name in selected:
            light = platform.get_light(name)
            if light is None:
                print(f"Unable to find bulb [{name}]")
                failed += 1
                continue
            try:
                await _async_apply(options, light)
            except Exception as e:
                print(f"Unable to set bulb [{name}]: {e}")
                failed += 1
                continue
            if options.info:
                print(format_light(light))
    finally:
        await platform.async_stop()
    return 1 if failed else 0


# -------------------------------------------
def main() -> None:

    (options, args) = parseArgs()

    logging.basicConfig(level=logging.DEBUG if options.debug else logging.WARNING)

    try:
        sys.exit(asyncio.run(async_main(options, args)))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
