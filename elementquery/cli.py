# elementquery/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Try queries and waits against a live page and view effective config.
Thin wrapper around the Playwright session adapter and the poll engine.
"""

import asyncio
import json
import sys
from typing import List, Optional

import click
from playwright.async_api import Error as PlaywrightError

from elementquery.core.errors import ElementQueryError, RemoteError
from elementquery.core.poller import Deadline, RetryPolicy
from elementquery.remote.playwright import launch_session
from elementquery.selectors.by import By, SelectorStrategy
from elementquery.selectors.needle import StringMatch
from elementquery.utils.config import get_settings
from elementquery.utils.logger import configure_logging, get_logger, log_with_context


CONDITIONS = [
    "displayed", "not_displayed",
    "enabled", "not_enabled",
    "selected", "not_selected",
    "clickable", "not_clickable",
    "stale",
]


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _policy(timeout_ms: Optional[int], interval_ms: int) -> Optional[RetryPolicy]:
    """Explicit --timeout-ms overrides the session default; otherwise keep it."""
    if timeout_ms is None:
        return None
    return Deadline(timeout_ms=timeout_ms, interval_ms=interval_ms)


async def _describe(element) -> dict:
    text = await element.text()
    return {
        "tag": await element.tag_name(),
        "id": await element.id(),
        "class": await element.class_name(),
        "text": text[:80],
    }


async def _probe(url: str, criteria: List[By], text: Optional[str], all_matches: bool, policy: Optional[RetryPolicy]) -> list:
    async with launch_session(url, default_poller=policy) as session:
        query = session.query(criteria[0])
        if text:
            query = query.with_text(StringMatch(text).partial())
        for by in criteria[1:]:
            query = query.or_(by)
            if text:
                query = query.with_text(StringMatch(text).partial())

        if all_matches:
            elements = await query.all_required()
        else:
            elements = [await query.first()]
        return [await _describe(el) for el in elements]


async def _wait(url: str, by: By, condition: str, policy: Optional[RetryPolicy]) -> None:
    async with launch_session(url, default_poller=policy) as session:
        element = await session.query(by).first()
        waiter = element.wait(f"{by} did not become {condition.replace('_', ' ')}")
        await getattr(waiter.until(), condition)()


def _run(coro, **context):
    """Run a command coroutine; exit 1 when nothing matched in time, 2 when the session failed."""
    log = log_with_context(get_logger(__name__), **context)
    try:
        return asyncio.run(coro)
    except ElementQueryError as e:
        click.echo(f"ERR {e}")
        sys.exit(1)
    except (RemoteError, PlaywrightError) as e:
        log.error(f"Remote session failed: {e}")
        click.echo(f"ERR remote: {e}")
        sys.exit(2)


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.version_option(package_name="elementquery")
def cli(log_level: Optional[str]):
    # Initialize settings + logging once at process start
    configure_logging(get_settings(), level=log_level)


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    s = get_settings()
    data = s.model_dump(mode="json")
    data["default_poller"] = s.default_poller().model_dump()
    _echo_json(data)


@cli.command("probe")
@click.argument("url")
@click.argument("selectors", nargs=-1, required=True)
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in SelectorStrategy]),
    default=SelectorStrategy.css.value,
    show_default=True,
    help="How to interpret every SELECTOR",
)
@click.option("--text", default=None, help="Keep only elements whose text contains this")
@click.option("--timeout-ms", type=int, default=None, help="Poll for up to this long (default: POLL_* settings)")
@click.option("--interval-ms", type=int, default=500, show_default=True)
@click.option("--all", "all_matches", is_flag=True, help="Print every match instead of the first")
def cmd_probe(
    url: str,
    selectors: List[str],
    strategy: str,
    text: Optional[str],
    timeout_ms: Optional[int],
    interval_ms: int,
    all_matches: bool,
):
    """
    Run a query against URL, each SELECTOR being a fallback for the previous one.

    Examples:
      elementquery probe https://wikipedia.org "thiswont.match" "#searchInput"
      elementquery probe https://example.com a --text "More" --all --timeout-ms 5000
    """
    criteria = [By(strategy=SelectorStrategy(strategy), value=v) for v in selectors]
    matches = _run(_probe(url, criteria, text, all_matches, _policy(timeout_ms, interval_ms)), url=url, command="probe")
    _echo_json(matches)


@cli.command("wait")
@click.argument("url")
@click.argument("selector")
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in SelectorStrategy]),
    default=SelectorStrategy.css.value,
    show_default=True,
)
@click.option("--until", "condition", type=click.Choice(CONDITIONS), required=True)
@click.option("--timeout-ms", type=int, default=None, help="Poll for up to this long (default: POLL_* settings)")
@click.option("--interval-ms", type=int, default=500, show_default=True)
def cmd_wait(url: str, selector: str, strategy: str, condition: str, timeout_ms: Optional[int], interval_ms: int):
    """Locate SELECTOR on URL and wait until it reaches a condition."""
    by = By(strategy=SelectorStrategy(strategy), value=selector)
    _run(_wait(url, by, condition, _policy(timeout_ms, interval_ms)), url=url, command="wait")
    click.echo(f"OK  {by} is {condition.replace('_', ' ')}")


def main() -> None:
    cli(prog_name="elementquery")


if __name__ == "__main__":
    main()
