"""
Main entry point for Grinch's Gift Catch.

Wires the session, its collaborators (audio, particles, leaderboard) and
the pygame window together and runs them on one asyncio event loop.
"""

import asyncio
import logging
import random
import sys

from giftcatch.audio.engine import AudioEngine
from giftcatch.config.settings import Settings, get_settings
from giftcatch.core.events import EventBus
from giftcatch.game.session import GameSession
from giftcatch.leaderboard import ScoreReporter, create_sink


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


async def run_game(settings: Settings) -> None:
    """Run the desktop game until the window closes."""
    from giftcatch.simulator.window import GameWindow

    logger = logging.getLogger(__name__)

    event_bus = EventBus()
    rng = random.Random(settings.seed)
    session = GameSession(settings, rng, event_bus)

    sink = create_sink(settings.leaderboard)
    reporter = ScoreReporter(event_bus, sink)

    audio = AudioEngine()
    audio.init()
    audio.attach(event_bus)

    window = GameWindow(settings, session, event_bus, audio=audio, sink=sink)

    try:
        await window.run()
    finally:
        # Let a score submitted on the last game over land
        try:
            await asyncio.wait_for(reporter.flush(), timeout=settings.leaderboard.timeout)
        except asyncio.TimeoutError:
            logger.warning("Pending score saves abandoned on exit")
        reporter.close()
        close = getattr(sink, "close", None)
        if close is not None:
            await close()
        audio.cleanup()


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("Grinch's Gift Catch starting...")

    try:
        asyncio.run(run_game(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Grinch's Gift Catch stopped")


if __name__ == "__main__":
    main()
