"""
main.py — Single entry point.

Builds the object graph explicitly and runs the Telegram bot:

  genai.Client ─► GeminiProvider ─► ProductAnalyzer ─► bot Application

The SDK client is created here and nowhere else; everything downstream gets
it handed in.
"""
import asyncio
import logging
import os
import signal
import sys
from pathlib import Path

from google import genai

import config
from analyzer import ProductAnalyzer
from bot import build_application
from providers.gemini_provider import GeminiProvider

_data_dir = Path(config.DATA_DIR)
_data_dir.mkdir(parents=True, exist_ok=True)

logging.basicConfig(
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    handlers=[
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(str(_data_dir / "bot.log"), encoding="utf-8"),
    ],
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("google_genai").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def build_analyzer() -> ProductAnalyzer:
    client = genai.Client(api_key=config.GOOGLE_API_KEY)
    provider = GeminiProvider(
        client,
        model=config.GEMINI_MODEL,
        temperature=config.GEMINI_TEMPERATURE,
    )
    logger.info("Generation provider: %s", provider.full_name)
    return ProductAnalyzer(
        provider,
        retries=config.RETRY_COUNT,
        base_delay=config.RETRY_BASE_DELAY,
        max_image_dim=config.MAX_IMAGE_DIM,
        jpeg_quality=config.JPEG_QUALITY,
    )


async def run() -> None:
    missing = [
        name for name in ("TELEGRAM_BOT_TOKEN", "GOOGLE_API_KEY")
        if not getattr(config, name)
    ]
    if missing:
        raise RuntimeError(f"Missing required settings: {', '.join(missing)} (set them in .env)")

    ptb_app = build_application(build_analyzer())

    stop_event = asyncio.Event()

    def _stop(*_):
        logger.info("Shutdown signal received.")
        stop_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _stop)
        except (NotImplementedError, RuntimeError):
            # Windows doesn't support add_signal_handler for all signals
            pass

    async with ptb_app:
        await ptb_app.start()
        await ptb_app.updater.start_polling(
            allowed_updates=["message"],
            drop_pending_updates=True,
        )
        logger.info("✅ Bot is running. Press Ctrl+C to stop.")

        try:
            await stop_event.wait()
        except (KeyboardInterrupt, SystemExit):
            pass

        logger.info("Shutting down…")
        await ptb_app.updater.stop()
        await ptb_app.stop()

    logger.info("Goodbye.")


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
