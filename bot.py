"""
bot.py — Telegram bot handlers.

All visual formatting is delegated to style.py.
All product analysis is delegated to the ProductAnalyzer stored in bot_data.
Session state is kept in-memory per user_id.

Updates are processed concurrently, so a user can fire a second search
before the first one returns. Each request gets a sequence number from the
user's session and only the newest one is allowed to render; a slower,
older result is dropped instead of overwriting the newer one.
"""
from __future__ import annotations

import logging
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, LinkPreviewOptions, Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

import config
import style
from analyzer import ProductAnalyzer
from image_normalizer import ImageProcessingError
from models import AnalysisResult, ProductData
from seller_links import resolve_seller_link

logger = logging.getLogger(__name__)

ANALYZER_KEY = "analyzer"
MDV2 = "MarkdownV2"
_NO_PREVIEW = LinkPreviewOptions(is_disabled=True)


# ── Session ────────────────────────────────────────────────────────────────────

@dataclass
class UserSession:
    # Last photo, re-used when the user follows up with text
    image_bytes: Optional[bytes] = None
    # Monotonic id of the most recently started request
    request_seq: int = 0

    def begin_request(self) -> int:
        self.request_seq += 1
        return self.request_seq

    def is_latest(self, seq: int) -> bool:
        return seq == self.request_seq


_sessions: dict[int, UserSession] = {}


def get_session(user_id: int) -> UserSession:
    if user_id not in _sessions:
        _sessions[user_id] = UserSession()
    return _sessions[user_id]


# ── Rate limiter ───────────────────────────────────────────────────────────────
RATE_MAX_REQUESTS = config.RATE_MAX_REQUESTS
RATE_WINDOW_SECS  = config.RATE_WINDOW_SECS
_rate_buckets: dict[int, deque] = defaultdict(deque)


def _is_rate_limited(user_id: int) -> bool:
    now    = time.monotonic()
    bucket = _rate_buckets[user_id]
    while bucket and now - bucket[0] > RATE_WINDOW_SECS:
        bucket.popleft()
    if len(bucket) >= RATE_MAX_REQUESTS:
        return True
    bucket.append(now)
    return False


# ── Keyboards ──────────────────────────────────────────────────────────────────

def _button_url(url: str) -> str:
    # Telegram rejects buttons whose URL has no scheme
    return url if url.lower().startswith(("http://", "https://")) else f"https://{url}"


def seller_keyboard(product: ProductData) -> Optional[InlineKeyboardMarkup]:
    """One "View Deal" button per seller, cheapest first."""
    rows = []
    for i, seller in enumerate(product.sellers_by_price()):
        price = style.format_currency(seller.price, seller.currency)
        label = f"{'🟢' if i == 0 else '🛒'}  {seller.name or 'Unknown Store'}  ·  {price}"
        rows.append([InlineKeyboardButton(
            label[:60],
            url=_button_url(resolve_seller_link(seller, product.product_name)),
        )])
    return InlineKeyboardMarkup(rows) if rows else None


# ── Handlers ───────────────────────────────────────────────────────────────────

async def cmd_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(style.welcome(), parse_mode=MDV2)


async def cmd_help(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(style.help_text(), parse_mode=MDV2)


async def cmd_clear(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    get_session(update.effective_user.id).image_bytes = None
    await update.message.reply_text(style.cleared(), parse_mode=MDV2)


async def handle_photo(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    message = update.message
    if message.photo:
        file_id = message.photo[-1].file_id
    else:
        file_id = message.document.file_id      # image sent "as file"

    tg_file     = await context.bot.get_file(file_id)
    image_bytes = bytes(await tg_file.download_as_bytearray())

    get_session(update.effective_user.id).image_bytes = image_bytes
    await run_analysis(update, context, message.caption, image_bytes)


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = (update.message.text or "").strip()
    if not query:
        await update.message.reply_text(style.not_a_photo(), parse_mode=MDV2)
        return
    session = get_session(update.effective_user.id)
    await run_analysis(update, context, query, session.image_bytes)


async def handle_other(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(style.not_a_photo(), parse_mode=MDV2)


async def run_analysis(
    update: Update,
    context: ContextTypes.DEFAULT_TYPE,
    query: Optional[str],
    image_bytes: Optional[bytes],
) -> None:
    user_id = update.effective_user.id

    if _is_rate_limited(user_id):
        await update.message.reply_text(
            style.error_rate_limited(RATE_MAX_REQUESTS, RATE_WINDOW_SECS),
            parse_mode=MDV2,
        )
        return

    session  = get_session(user_id)
    seq      = session.begin_request()
    analyzer: ProductAnalyzer = context.bot_data[ANALYZER_KEY]

    msg = await update.message.reply_text(
        style.loading_analysis(query, has_image=bool(image_bytes)),
        parse_mode=MDV2,
    )

    keyboard = None
    try:
        result = await analyzer.analyze(query, image_bytes)
    except ImageProcessingError as exc:
        logger.warning("User %d: image rejected: %s", user_id, exc)
        if session.image_bytes is image_bytes:
            session.image_bytes = None
        text = style.error_image_failed()
    except Exception as exc:
        logger.error("User %d: analysis failed: %s", user_id, exc)
        text = style.error_connection_failed()
    else:
        text, keyboard = render_result(result, config.MAX_SOURCES_SHOWN)

    if not session.is_latest(seq):
        logger.info(
            "User %d: dropping stale result #%d (latest is #%d)",
            user_id, seq, session.request_seq,
        )
        await msg.edit_text(style.superseded(), parse_mode=MDV2)
        return

    await msg.edit_text(
        text,
        parse_mode=MDV2,
        reply_markup=keyboard,
        link_preview_options=_NO_PREVIEW,
    )


def render_result(
    result: AnalysisResult,
    max_sources: int = 5,
) -> tuple[str, Optional[InlineKeyboardMarkup]]:
    """Pick the view: full product card, raw-text fallback, or the retry hint."""
    if result.is_empty:
        return style.error_not_identified(), None
    if result.product_data is None:
        return style.raw_text_fallback(result.raw_text or ""), None
    return (
        style.result_message(result, max_sources),
        seller_keyboard(result.product_data),
    )


# ── App factory ────────────────────────────────────────────────────────────────

def build_application(analyzer: ProductAnalyzer) -> Application:
    app = (
        Application.builder()
        .token(config.TELEGRAM_BOT_TOKEN)
        .concurrent_updates(True)
        .build()
    )
    app.bot_data[ANALYZER_KEY] = analyzer

    app.add_handler(CommandHandler("start", cmd_start))
    app.add_handler(CommandHandler("help",  cmd_help))
    app.add_handler(CommandHandler("clear", cmd_clear))
    app.add_handler(MessageHandler(filters.PHOTO | filters.Document.IMAGE,  handle_photo))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND,         handle_text))
    app.add_handler(MessageHandler(~filters.COMMAND,                        handle_other))
    return app
