"""
Wikipedia Search Demo
Searches Wikipedia with fallback selectors and a session-wide default poller
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to Python path
SCRIPT_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from elementquery import By, Deadline, ElementQueryError, RemoteError, launch_session
from elementquery.utils.logger import configure_logging


class Colors:
    """ANSI color codes"""
    GREEN = '\033[92m'
    BLUE = '\033[94m'
    RED = '\033[91m'
    END = '\033[0m'


def print_success(msg: str):
    print(f"{Colors.GREEN}✓ {msg}{Colors.END}")


def print_info(msg: str):
    print(f"{Colors.BLUE}ℹ {msg}{Colors.END}")


def print_error(msg: str):
    print(f"{Colors.RED}✗ {msg}{Colors.END}")


async def search(term: str) -> str:
    # Inherited by every query and wait below unless overridden:
    # up to 20 seconds, polling every 0.5 seconds.
    poller = Deadline(timeout_ms=20_000, interval_ms=500)

    async with launch_session("https://wikipedia.org", default_poller=poller) as session:
        elem_form = await session.query(By.id("search-form")).first()

        # Each selector is tried once per poll attempt; the first to match wins
        elem_text = await elem_form.query(By.css("thiswont.match")).or_(By.id("searchInput")).first()
        await elem_text.wait("search box never became usable").until().clickable()
        await elem_text.handle.fill(term)
        print_info(f"Typed '{term}'")

        elem_button = await elem_form.query(By.css("button[type='submit']")).and_clickable().first()
        await elem_button.handle.click()

        # Waiting for the header doubles as waiting for the page load
        await session.query(By.class_name("firstHeading")).first()
        return await session.page.title()


def main():
    configure_logging()
    term = sys.argv[1] if len(sys.argv) > 1 else "selenium"
    try:
        title = asyncio.run(search(term))
    except (ElementQueryError, RemoteError) as e:
        print_error(str(e))
        sys.exit(1)
    print_success(f"Landed on: {title}")


if __name__ == '__main__':
    main()
