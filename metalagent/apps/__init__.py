# ========================================================================== #
#                                                                            #
#    METAL-AGENT - The bare-metal host agent.                                #
#                                                                            #
#    Copyright (C) 2018-2024  Maxim Devaev <mdevaev@gmail.com>               #
#                                                                            #
#    This program is free software: you can redistribute it and/or modify    #
#    it under the terms of the GNU General Public License as published by    #
#    the Free Software Foundation, either version 3 of the License, or       #
#    (at your option) any later version.                                     #
#                                                                            #
#    This program is distributed in the hope that it will be useful,         #
#    but WITHOUT ANY WARRANTY; without even the implied warranty of          #
#    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the           #
#    GNU General Public License for more details.                            #
#                                                                            #
#    You should have received a copy of the GNU General Public License       #
#    along with this program.  If not, see <https://www.gnu.org/licenses/>.  #
#                                                                            #
# ========================================================================== #


import sys
import os
import argparse
import functools
import logging
import logging.config

import pygments
import pygments.lexers.data
import pygments.formatters

from .. import tools
from .. import cmdline

from ..logging import make_default_logging_config

from ..yamlconf import ConfigError
from ..yamlconf import make_config
from ..yamlconf import Section
from ..yamlconf import Option
from ..yamlconf import build_raw_from_options
from ..yamlconf.dumper import make_config_dump
from ..yamlconf.loader import load_yaml_file
from ..yamlconf.merger import yaml_merge

from ..validators.basic import valid_bool
from ..validators.basic import valid_float_f0
from ..validators.basic import valid_float_f01

from ..validators.os import valid_abs_path
from ..validators.os import valid_unix_socket_path
from ..validators.os import valid_unix_mode
from ..validators.os import valid_command

from ..validators.net import valid_host_port

from ..validators.bmc import valid_ipmi_channel


# =====
DEFAULT_CONFIG_PATH = "/etc/metal-agent/main.yaml"


def init(
    prog: (str | None)=None,
    description: (str | None)=None,
    add_help: bool=True,
    check_run: bool=False,
    agent_flags: bool=False,
    read_kernel_cmdline: bool=False,
    argv: (list[str] | None)=None,
) -> tuple[argparse.ArgumentParser, list[str], Section]:

    argv = (argv or sys.argv)
    assert len(argv) > 0

    parser = argparse.ArgumentParser(
        prog=(prog or argv[0]),
        description=description,
        add_help=add_help,
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_PATH, type=valid_abs_path,
                        help="Set config file path", metavar="<file>")
    parser.add_argument("-o", "--set-options", default=[], nargs="+",
                        help="Override config options list (like sec/sub/opt=value)", metavar="<k=v>",)
    parser.add_argument("-m", "--dump-config", action="store_true",
                        help="View current configuration (include all overrides)")
    if agent_flags:
        parser.add_argument("--provider-address", default=None, type=valid_host_port,
                            help="The address of the fleet manager, overrides the kernel cmdline",
                            metavar="<host:port>")
        parser.add_argument("--test-mode", default=None, action="store_true",
                            help="Don't touch the BMC, report an API-managed power instead")
        parser.add_argument("--debug", action="store_true",
                            help="Enable debug logging")
    if check_run:
        parser.add_argument("--run", dest="run", action="store_true",
                            help="Run the service")
    (options, remaining) = parser.parse_known_args(argv)

    raw_flags = (_build_raw_from_flags(options) if agent_flags else {})
    config = _init_config(options.config, options.set_options, raw_flags, read_kernel_cmdline)
    if options.dump_config:
        _dump_config(config)
        raise SystemExit()

    debug = getattr(options, "debug", False)
    logging.captureWarnings(True)
    logging.config.dictConfig(config.logging or make_default_logging_config(debug))
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if check_run and not options.run:
        raise SystemExit(
            "To prevent accidental startup, you must specify the --run option to start.\n"
            "Try the --help option to find out what this service does.\n"
            "Make sure you understand exactly what you are doing!"
        )

    return (parser, remaining, config)


def _build_raw_from_flags(options: argparse.Namespace) -> dict:
    agent: dict = {}
    if options.provider_address is not None:
        agent["provider_address"] = options.provider_address
    if options.test_mode:
        agent["test_mode"] = True
    return ({"agent": agent} if agent else {})


def _init_config(
    config_path: str,
    override_options: list[str],
    raw_flags: dict,
    read_kernel_cmdline: bool,
) -> Section:

    config_path = os.path.expanduser(config_path)
    if config_path == DEFAULT_CONFIG_PATH and not os.path.exists(config_path):
        raw_config: dict = {}
    else:
        try:
            raw_config = load_yaml_file(config_path)
        except (OSError, ValueError) as ex:
            raise SystemExit(f"ConfigError: Can't read config file {config_path!r}:\n{tools.efmt(ex)}")

    try:
        if read_kernel_cmdline:
            yaml_merge(raw_config, _build_raw_from_kernel(), "kernel cmdline")
        yaml_merge(raw_config, build_raw_from_options(override_options), "raw CLI options")
        yaml_merge(raw_config, raw_flags, "CLI flags")
        return make_config(raw_config, _get_config_scheme())
    except (ConfigError, ValueError) as ex:
        raise SystemExit(f"ConfigError: {ex}")


def _build_raw_from_kernel() -> dict:
    try:
        kargs = cmdline.read_cmdline()
    except OSError as err:
        logging.getLogger(__name__).error("Can't read the kernel cmdline: %s", tools.efmt(err))
        return {}
    overrides = cmdline.get_agent_overrides(kargs)
    return ({"agent": overrides} if overrides else {})


def _dump_config(config: Section) -> None:
    dump = make_config_dump(config)
    if sys.stdout.isatty():
        dump = pygments.highlight(
            dump,
            pygments.lexers.data.YamlLexer(),
            pygments.formatters.TerminalFormatter(bg="dark"),  # pylint: disable=no-member
        )
    print(dump)


def _get_config_scheme() -> dict:
    return {
        "logging": Option({}, help="Config for logging.config.dictConfig(), empty means built-in"),

        "agent": {
            "provider_address": Option("", type=valid_host_port, help="Fleet manager host:port, empty to disable"),
            "test_mode":        Option(False, type=valid_bool, help="Don't touch the BMC"),
            "wait_timeout":     Option(0.0, type=valid_float_f0, help="Per-caller wait limit, 0 means unlimited"),

            "server": {
                "unix":              Option("/run/metal-agent/agent.sock", type=valid_unix_socket_path, unpack_as="unix_path"),
                "unix_rm":           Option(True,  type=valid_bool),
                "unix_mode":         Option(0o660, type=valid_unix_mode),
                "access_log_format": Option("[%P] '%r' => %s; size=%b --- user_agent='%{User-Agent}i'"),
            },

            "tunnel": {
                "cmd": Option([
                    "/usr/bin/metal-tunnel",
                    "--provider={provider_address}",
                    "--machine-id={machine_id}",
                    "--target=unix:{unix_path}",
                ], type=functools.partial(valid_command, placeholders=["provider_address", "machine_id", "unix_path"])),
                "restart_delay": Option(5.0, type=valid_float_f01),
            },

            "ipmi": {
                "device":  Option("/dev/ipmi0", type=valid_abs_path),
                "channel": Option(1, type=valid_ipmi_channel, help="LAN channel of the BMC"),
            },
        },

        "machined": {
            "unix":    Option("/system/run/machined/machined.sock", type=valid_unix_socket_path, unpack_as="unix_path"),
            "timeout": Option(30.0, type=valid_float_f01),
        },
    }
