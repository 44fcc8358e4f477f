"""
style.py — Complete visual style system for the bot.

Design language:
  • Structured cards with consistent emoji icons
  • Unicode box-drawing dividers
  • Clear visual hierarchy: header → body → footer
  • MarkdownV2 throughout

All text that goes into Telegram messages should be formatted through this module.
"""
from __future__ import annotations

import math
import re
from typing import Any, Optional

from models import AnalysisResult, GroundingSource, ProductData, ReviewSummary

# ── Escape ────────────────────────────────────────────────────────────────────

def esc(text: str) -> str:
    """Escape all MarkdownV2 special characters."""
    for ch in r"\_*[]()~`>#+-=|{}.!":
        text = text.replace(ch, f"\\{ch}")
    return text


# ── Visual constants ──────────────────────────────────────────────────────────

DIV   = "━━━━━━━━━━━━━━━━━━━━━━━━━━"    # thick divider
SDIV  = "┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄┄"    # subtle divider

STARS = {5: "★★★★★", 4: "★★★★☆", 3: "★★★☆☆", 2: "★★☆☆☆", 1: "★☆☆☆☆", 0: "☆☆☆☆☆"}
SENTIMENT = {"positive": "😊", "neutral": "😐", "negative": "😞"}

MAX_MESSAGE_LEN = 4050      # Telegram hard limit is 4096


def star_bar(rating: Optional[float]) -> str:
    if rating is None:
        return "☆☆☆☆☆"
    r = round(rating)
    return STARS.get(max(0, min(5, r)), "☆☆☆☆☆")


ELLIPSIS = "\\.\\.\\."


def truncate(text: str, limit: int = MAX_MESSAGE_LEN) -> str:
    """
    Shorten a rendered MarkdownV2 message to at most `limit` chars.
    Cuts at a line boundary, so every kept line still has balanced entities;
    a single oversized line is cut without splitting an escape pair.
    """
    if len(text) <= limit:
        return text
    budget = limit - len(ELLIPSIS) - 1
    cut = text.rfind("\n", 0, budget + 1)
    if cut > 0:
        return text[:cut] + "\n" + ELLIPSIS
    head = text[:budget]
    trailing = len(head) - len(head.rstrip("\\"))
    if trailing % 2:
        head = head[:-1]
    return head + ELLIPSIS


def esc_truncated(text: str, limit: int) -> str:
    """esc(text), shortened to at most `limit` chars before it is escaped."""
    escaped = esc(text)
    if len(escaped) <= limit:
        return escaped
    out, used = [], 0
    budget = limit - len(ELLIPSIS)
    for ch in text:
        piece = esc(ch)
        if used + len(piece) > budget:
            break
        out.append(piece)
        used += len(piece)
    return "".join(out) + ELLIPSIS


def one_line(text: str) -> str:
    return " ".join(text.split())


# ── Currency ──────────────────────────────────────────────────────────────────

CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}

_NON_NUMERIC = re.compile(r"[^0-9.]")


def _group_indian(n: int) -> str:
    """1499999 → "14,99,999" (last three digits, then pairs)."""
    digits = str(n)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def currency_symbol(currency: Optional[str]) -> str:
    code = (currency or "INR").upper()
    return CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_currency(amount: Any, currency: str = "INR") -> str:
    """
    "₹ 1,49,999" / "19999" / 129.99 → "₹1,49,999" / "₹19,999" / "₹130".
    Anything that doesn't reduce to a number is returned unchanged.
    """
    symbol = currency_symbol(currency)
    if amount is None or amount == "":
        return f"{symbol}0"

    try:
        num = float(_NON_NUMERIC.sub("", str(amount)))
    except ValueError:
        return str(amount)
    if not math.isfinite(num):
        return str(amount)

    whole = int(num + 0.5)      # zero fraction digits, half rounds up
    return f"{symbol}{_group_indian(whole)}"


# ══════════════════════════════════════════════════════════════════════════════
# START / HELP
# ══════════════════════════════════════════════════════════════════════════════

def welcome() -> str:
    return (
        f"🛍️ *SHOPLENS*\n"
        f"{DIV}\n\n"
        f"Send a product photo or type a product name and I'll compare\n"
        f"live prices across Indian stores for you\\.\n\n"
        f"✨  *What I can do*\n"
        f"▸ Recognise products from a photo\n"
        f"▸ Compare prices from 6–8 Indian sellers\n"
        f"▸ Show bank offers and stock status\n"
        f"▸ Summarise what buyers are saying\n\n"
        f"{DIV}\n"
        f"_📸 Just send a photo to get started_"
    )


def help_text() -> str:
    return (
        f"📖 *HOW TO USE*\n"
        f"{DIV}\n\n"
        f"*1️⃣  Send a photo or a product name*\n"
        f"_Add a caption to the photo to narrow it down_\n\n"
        f"*2️⃣  AI searches Indian stores*\n"
        f"_Amazon\\.in, Flipkart, Croma, Blinkit and more_\n\n"
        f"*3️⃣  Compare and buy*\n"
        f"_Tap a store button to open the deal_\n\n"
        f"{DIV}\n"
        f"💡  *Tips for best results*\n"
        f"▸ Include brand/model text in frame\n"
        f"▸ After a photo, send text to refine the same photo\n"
        f"▸ /clear forgets the last photo\n\n"
        f"{DIV}\n"
        f"_Commands: /start · /help · /clear_"
    )


def cleared() -> str:
    return "🧹 Photo cleared\\. Send a new photo or a product name\\."


# ══════════════════════════════════════════════════════════════════════════════
# LOADING MESSAGES
# ══════════════════════════════════════════════════════════════════════════════

def loading_analysis(query: Optional[str], has_image: bool) -> str:
    subject = "your photo" if has_image else "your query"
    hint_line = f"\n💬 _{esc(query[:80])}_" if query else ""
    return (
        f"🔍 *Analysing {subject}*\n"
        f"{SDIV}{hint_line}\n"
        f"⠋ Searching Indian stores for live prices…"
    )


# ══════════════════════════════════════════════════════════════════════════════
# RESULT CARDS
# ══════════════════════════════════════════════════════════════════════════════

def product_card(product: ProductData) -> str:
    features = "\n".join(f"  ▸ {esc(one_line(f)[:200])}" for f in product.key_features[:6]) or "  ▸ _none listed_"
    lines = [
        f"✨ *{esc(one_line(product.product_name)[:200])}*",
        DIV,
        f"🏢 {esc(one_line(product.brand or 'Unknown brand')[:80])}   📦 {esc(one_line(product.category or 'Uncategorised')[:80])}",
    ]
    if product.description:
        lines += ["", f"_{esc(one_line(product.description)[:400])}_"]
    lines += ["", "✦ *Key Features*", features]
    return "\n".join(lines)


def comparison_table(product: ProductData) -> str:
    sellers = product.sellers_by_price()
    lines = ["🏷️ *Price Comparison*  _Live India Prices_", SDIV]
    if not sellers:
        lines.append("🔎 _No pricing data found\\. Try scanning again\\._")
        return "\n".join(lines)

    for i, seller in enumerate(sellers):
        badge = "  🟢 *BEST PRICE*" if i == 0 else ""
        stock = "✅ In stock" if seller.in_stock else "❌ Out of stock"
        lines.append(
            f"*{i + 1}\\.* {esc(one_line(seller.name or 'Unknown Store')[:80])}{badge}\n"
            f"   💰 *{esc(one_line(format_currency(seller.price, seller.currency))[:60])}*   {stock}"
        )
        if seller.offers:
            lines.append(f"   🎁 _{esc(one_line(seller.offers)[:160])}_")
    return "\n".join(lines)


def review_card(reviews: ReviewSummary) -> str:
    icon = SENTIMENT.get(reviews.sentiment, "😐")
    lines = [
        "⭐ *Review Analysis*",
        SDIV,
        f"`{reviews.average_rating:.1f}` {esc(star_bar(reviews.average_rating))}   "
        f"_{esc(one_line(reviews.total_reviews)[:40])} reviews_",
        f"{icon} {esc(reviews.sentiment.capitalize())}   "
        f"👍 {reviews.positive_share}% positive",
    ]
    if reviews.pros:
        lines += ["", "*Pros*"] + [f"  ➕ {esc(one_line(p)[:200])}" for p in reviews.pros[:5]]
    if reviews.cons:
        lines += ["", "*Cons*"] + [f"  ➖ {esc(one_line(c)[:200])}" for c in reviews.cons[:5]]
    if reviews.summary:
        lines += ["", f"_{esc(one_line(reviews.summary)[:500])}_"]
    return "\n".join(lines)


def sources_block(sources: list[GroundingSource], limit: int = 5) -> str:
    if not sources:
        return ""
    lines = ["📚 *Sources*"]
    for src in sources[:limit]:
        lines.append(f"  ▸ {esc(one_line(src.title)[:70])}")
    if len(sources) > limit:
        lines.append(f"  _\\+{len(sources) - limit} more_")
    return "\n".join(lines)


def result_message(result: AnalysisResult, max_sources: int = 5) -> str:
    """Full result: product card, price table, reviews, sources."""
    product = result.product_data
    if product is None:
        return raw_text_fallback(result.raw_text or "")

    blocks = [
        product_card(product),
        comparison_table(product),
        review_card(product.reviews),
    ]
    sources = sources_block(result.sources, max_sources)
    if sources:
        blocks.append(sources)
    return truncate("\n\n".join(blocks))


def raw_text_fallback(raw_text: str) -> str:
    """Shown when the model's reply couldn't be parsed — verbatim, escaped."""
    header = f"📝 *Search Results*\n{SDIV}\n"
    return header + esc_truncated(raw_text, MAX_MESSAGE_LEN - len(header))


# ══════════════════════════════════════════════════════════════════════════════
# ERROR MESSAGES
# ══════════════════════════════════════════════════════════════════════════════

def error_image_failed() -> str:
    return (
        f"🖼️ *Couldn't Read That Photo*\n"
        f"{DIV}\n\n"
        f"Failed to process the image\\. Please try a different photo\\."
    )


def error_connection_failed() -> str:
    return (
        f"❌ *Connection Failed*\n"
        f"{DIV}\n\n"
        f"Connection failed\\. Please check your internet\\.\n"
        f"_We retried a few times before giving up\\._"
    )


def error_not_identified() -> str:
    return (
        f"😔 *Product Not Identified*\n"
        f"{DIV}\n\n"
        f"Could not identify product\\. Try a clearer angle\\.\n"
        f"▸ Better lighting\n"
        f"▸ Include the brand or model text\n"
        f"▸ Or type the product name\n"
    )


def not_a_photo() -> str:
    return (
        f"📸 *Send a Photo or a Name*\n"
        f"{SDIV}\n"
        f"I need a product photo or a product name to compare prices\\.\n"
        f"_Just take a pic and send it here\\!_"
    )


def error_rate_limited(max_requests: int, window_secs: int) -> str:
    return (
        f"⏱ *Slow Down\\!*\n"
        f"{SDIV}\n"
        f"You can run up to *{max_requests} searches* every *{window_secs} seconds*\\.\n\n"
        f"_Please wait a moment before trying again\\._"
    )


def superseded() -> str:
    return "⏭ _Skipped, you started a newer search\\._"
