import pytest

from run_tests import TestRunner as Runner
from run_tests import build_parser


def test_unit_suite_command_passes_plugin_options():
    runner = Runner(
        suite="unit",
        browser="firefox",
        headless=False,
        retries=2,
        allure_report=False,
    )

    cmd = runner._build_pytest_command()

    assert "testsuites/unit" in cmd
    assert "--ui-browser=firefox" in cmd
    assert "--ui-headed" in cmd
    assert "--ui-retries=2" in cmd
    assert "--alluredir" not in cmd


def test_defaults_leave_session_and_retry_to_config():
    cmd = Runner(allure_report=False)._build_pytest_command()

    assert "testsuites/" in cmd
    assert not [arg for arg in cmd if arg.startswith("--ui-")]


def test_path_tags_and_parallel():
    cmd = Runner(path="shop/tests", tags=["smoke", "P0"], parallel=4, retry_enabled=False)._build_pytest_command()

    assert cmd[cmd.index("-m") + 1] == "smoke or P0"
    assert cmd[cmd.index("-n") + 1] == "4"
    assert "shop/tests" in cmd
    assert "--ui-no-retry" in cmd


def test_parser_rejects_suite_and_path_together():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--suite", "unit", "--path", "tests/"])
