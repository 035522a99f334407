"""Command-line front end: run one inspection tool configured by environment."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional, Sequence

import click

from .automation import BrowserAutomation
from .config import DEFAULT_SETTLE_MS, InspectorConfig, LoginSettings, setup_logging, split_selectors
from .models import LoginSelectors, SessionConfig, ToolResult
from .tools import (
    CAPTURE_TOOL,
    CONSOLE_ERRORS_TOOL,
    CONSOLE_LOGS_TOOL,
    EXTRACT_TOOL,
    NETWORK_ERRORS_TOOL,
    NETWORK_LOGS_TOOL,
    InspectorTools,
)

logger = logging.getLogger(__name__)

CLI_CAPTURE_TOOL = "login_and_capture"
CLI_SCREENSHOT_PATH = "result.png"

CLI_TOOLS = {
    CLI_CAPTURE_TOOL: CAPTURE_TOOL,
    CAPTURE_TOOL: CAPTURE_TOOL,
    EXTRACT_TOOL: EXTRACT_TOOL,
    CONSOLE_LOGS_TOOL: CONSOLE_LOGS_TOOL,
    CONSOLE_ERRORS_TOOL: CONSOLE_ERRORS_TOOL,
    NETWORK_LOGS_TOOL: NETWORK_LOGS_TOOL,
    NETWORK_ERRORS_TOOL: NETWORK_ERRORS_TOOL,
}

_HEADINGS = {
    CONSOLE_LOGS_TOOL: "Console logs:",
    CONSOLE_ERRORS_TOOL: "Console errors:",
    NETWORK_LOGS_TOOL: "Network logs:",
}


def _fail(message: str) -> None:
    click.secho(message, fg="red", err=True)
    sys.exit(1)


async def run_tool(
    tools: InspectorTools,
    tool: str,
    target_page: str,
    selectors: Sequence[str],
) -> ToolResult:
    if tool == CAPTURE_TOOL:
        return await tools.capture(target_page, screenshot_path=CLI_SCREENSHOT_PATH)
    if tool == EXTRACT_TOOL:
        click.echo(f"Extracting from {target_page}...")
        return await tools.extract(target_page, selectors)
    if tool == CONSOLE_LOGS_TOOL:
        return await tools.console_logs(target_page)
    if tool == CONSOLE_ERRORS_TOOL:
        return await tools.console_errors(target_page)
    if tool == NETWORK_LOGS_TOOL:
        return await tools.network_logs(target_page)
    return await tools.network_errors(target_page)


@click.command()
@click.option("--tool", "tool_name", envvar="TOOL_NAME", default=None, help="Tool to run")
@click.option("--target-page", envvar="TARGET_PAGE", default=None, help="URL to inspect")
@click.option("--selectors", envvar="SELECTORS", default=None, help="Comma-separated CSS selectors")
@click.option("--use-login/--no-login", envvar="USE_LOGIN", default=False, help="Log in before running the tool")
@click.option("--login-url", envvar="LOGIN_URL", default=None)
@click.option("--username", envvar="LOGIN_USERNAME", default=None)
@click.option("--password", envvar="LOGIN_PASSWORD", default=None)
@click.option("--username-field", envvar="USERNAME_FIELD", default=LoginSelectors.username_field)
@click.option("--password-field", envvar="PASSWORD_FIELD", default=LoginSelectors.password_field)
@click.option("--submit-selector", envvar="SUBMIT_BUTTON_SELECTOR", default=LoginSelectors.submit_button)
@click.option("--headless/--headed", envvar="HEADLESS", default=False, help="Run the browser headless")
@click.option("--settle-ms", envvar="SETTLE_MS", type=int, default=DEFAULT_SETTLE_MS, help="Delay before reading logs")
@click.option("--log-level", envvar="LOG_LEVEL", default="INFO")
def main(
    tool_name: Optional[str],
    target_page: Optional[str],
    selectors: Optional[str],
    use_login: bool,
    login_url: Optional[str],
    username: Optional[str],
    password: Optional[str],
    username_field: str,
    password_field: str,
    submit_selector: str,
    headless: bool,
    settle_ms: int,
    log_level: str,
) -> None:
    """Run one browser inspection tool and print its result."""
    setup_logging(log_level)

    if not tool_name:
        _fail("TOOL_NAME is required.")
    tool = CLI_TOOLS.get(str(tool_name).strip())
    if tool is None:
        _fail(f"Unknown TOOL_NAME: {tool_name}")
    if not target_page:
        _fail("TARGET_PAGE is required.")
    selector_list = split_selectors(selectors)
    if tool == EXTRACT_TOOL and not selector_list:
        _fail("TARGET_PAGE and SELECTORS are required.")

    login = LoginSettings(
        enabled=use_login,
        login_url=login_url,
        username=username,
        password=password,
        selectors=LoginSelectors(
            username_field=username_field,
            password_field=password_field,
            submit_button=submit_selector,
        ),
    )
    if login.missing_fields():
        _fail("Missing login environment variables: " + ", ".join(login.missing_fields()))

    config = InspectorConfig(
        session=SessionConfig(headless=headless),
        login=login,
        settle_ms=settle_ms,
    )
    tools = InspectorTools(BrowserAutomation(config=config))

    if use_login:
        click.echo(f"Logging in as {username}...")

    try:
        result = asyncio.run(run_tool(tools, tool, target_page, selector_list))
    except Exception as e:
        logger.debug("Tool %s failed", tool, exc_info=True)
        _fail(f"Error: {e}")
        return

    if result.login is not None:
        if result.login.verified:
            click.secho("Logged in and ready.", fg="green")
        else:
            click.secho("Login may have failed (still on login page).", fg="yellow")

    if result.is_error:
        _fail(result.text)
    heading = _HEADINGS.get(tool)
    if heading:
        click.echo(heading)
    click.echo(result.text)


if __name__ == "__main__":
    main()
