"""
A small pytest plugin that shows a concise help string containing only the options of
the blob simulator plugins.
"""

import argparse
from pathlib import Path

import pytest

ENGINE_BLOBS_INI = "pytest-engine-blobs.ini"
ENGINE_BLOBS_GROUPS = ["blob scenarios", "pytest hive", "logging"]


def pytest_addoption(parser):
    """Add the help flag of the `engine-blobs` command."""
    help_group = parser.getgroup("help_options", "Help options for different commands")
    help_group.addoption(
        "--engine-blobs-help",
        action="store_true",
        dest="show_engine_blobs_help",
        default=False,
        help="Show help options only for the engine-blobs command and exit.",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config):
    """Display the help of the blob simulator options, before connecting to hive."""
    if config.getoption("show_engine_blobs_help"):
        show_specific_help(config, ENGINE_BLOBS_INI, ENGINE_BLOBS_GROUPS)


def show_specific_help(config, expected_ini, substrings):
    """Print the options of the groups whose title contains one of `substrings`."""
    pytest_ini = Path(config.inifile)
    if pytest_ini.name != expected_ini:
        raise ValueError(f"Unexpected {expected_ini} file option generating help.")

    test_parser = argparse.ArgumentParser(prog="engine-blobs")
    for group in config._parser.optparser._action_groups:
        if not any(substring in group.title for substring in substrings):
            continue
        new_group = test_parser.add_argument_group(group.title, group.description)
        for action in group._group_actions:
            kwargs = {
                "default": action.default,
                "help": action.help,
                "required": action.required,
            }
            if isinstance(action, argparse._StoreTrueAction):
                kwargs["action"] = "store_true"
            else:
                kwargs["type"] = action.type
            if action.nargs:
                kwargs["nargs"] = action.nargs
            new_group.add_argument(*action.option_strings, **kwargs)

    print(test_parser.format_help())
    pytest.exit("After displaying help.", returncode=pytest.ExitCode.OK)
