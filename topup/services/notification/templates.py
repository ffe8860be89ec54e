"""Operator message templates plus the product-type and redemption-code rules.

Messages use Telegram HTML formatting; every interpolated value is escaped.
"""

import enum
from datetime import datetime, timezone
from html import escape
from zoneinfo import ZoneInfo


class ProductType(str, enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    DIAMOND = "diamond"
    OTHER = "other"


# Item codes the game admin tool expects for membership passes.
WEEKLY_ITEM_CODE = "161"
MONTHLY_ITEM_CODE = "800"

DELIVER_ACTION = "deliver"
FAIL_ACTION = "fail"

STATUS_EMOJI = {"verified": "⏳", "pending": "⏳", "completed": "✅", "failed": "❌"}

WELCOME_TEXT = (
    "🤖 <b>Robo Top Up System</b>\n\n"
    "This bot delivers operator notifications only.\n"
    "You will be notified here whenever a new payment arrives.\n\n"
    "Commands:\n"
    "<code>/status TRANSACTION_ID</code> - order status\n"
    "<code>/test</code> - send a sample notification"
)


def classify_product(product_name: str | None, diamonds: int | None) -> ProductType:
    """Map product metadata to a product type. Rules are ordered; first match wins."""

    name = (product_name or "").lower()
    if "weekly" in name or "1x" in name:
        return ProductType.WEEKLY
    if "monthly" in name:
        return ProductType.MONTHLY
    if (diamonds or 0) > 0:
        return ProductType.DIAMOND
    return ProductType.OTHER


def redemption_code(product_type: ProductType | str, player_id: str, diamonds: int | None, prefix: str) -> str:
    """Text the operator pastes into the game admin tool to fulfil the order."""

    product_type = ProductType(product_type)
    if product_type is ProductType.WEEKLY:
        return f"{prefix} {player_id} {WEEKLY_ITEM_CODE}"
    if product_type is ProductType.MONTHLY:
        return f"{prefix} {player_id} {MONTHLY_ITEM_CODE}"
    if product_type is ProductType.DIAMOND and (diamonds or 0) > 0:
        return f"{prefix} {player_id} {diamonds}"
    return f"{prefix} {player_id}"


def format_local_time(moment: datetime | None, tz_name: str) -> str:
    """Render a UTC (or naive-as-UTC) timestamp in the operator's time zone."""

    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz_name)).strftime("%d/%m/%Y, %I:%M:%S %p")


def format_amount(value: float | int) -> str:
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:.2f}"


def payment_notification_text(payment, code: str, tz_name: str) -> str:
    """New verified payment; the operator starts delivery from this message."""

    lines = [
        "💰 <b>New payment received!</b>",
        "",
        f"📌 <b>Transaction ID:</b> <code>{escape(payment.transaction_id)}</code>",
        f"💵 <b>Amount:</b> {format_amount(payment.amount)} ৳",
        f"🎮 <b>Player ID:</b> <code>{escape(payment.player_id)}</code>",
        f"📦 <b>Product:</b> {escape(payment.product_name)}",
    ]
    if (payment.diamonds or 0) > 0:
        lines.append(f"💎 <b>Diamonds:</b> {payment.diamonds}")
    lines += [
        f"⏰ <b>Time:</b> {format_local_time(payment.verified_at, tz_name)}",
        "",
        "<b>Top-up code:</b>",
        f"<code>{escape(code)}</code>",
        "",
        "✅ <b>Payment verified</b>",
        "🚀 <b>Start delivery!</b>",
        "",
        "🔗 <i>Robo Top Up System</i>",
    ]
    return "\n".join(lines)


def delivery_confirmation_text(transaction_id: str, player_id: str, product_name: str, tz_name: str) -> str:
    return (
        "📦 <b>Order delivered</b>\n\n"
        f"📌 <b>Transaction ID:</b> <code>{escape(transaction_id)}</code>\n"
        f"🎮 <b>Player ID:</b> <code>{escape(player_id)}</code>\n"
        f"📦 <b>Product:</b> {escape(product_name)}\n"
        f"⏰ <b>Time:</b> {format_local_time(None, tz_name)}\n\n"
        "🎉 <b>Thank you!</b>"
    )


def marked_delivered_text(payment, tz_name: str) -> str:
    return (
        "✅ <b>Order marked as delivered!</b>\n\n"
        f"📌 Transaction: {escape(payment.transaction_id)}\n"
        f"🎮 Player ID: {escape(payment.player_id)}\n"
        f"📦 Product: {escape(payment.product_name)}\n"
        f"⏰ Time: {format_local_time(payment.completed_at, tz_name)}\n\n"
        "🎉 <b>Status: ✅ COMPLETED</b>"
    )


def marked_failed_text(payment, tz_name: str) -> str:
    return (
        "❌ <b>Order marked as failed!</b>\n\n"
        f"📌 Transaction: {escape(payment.transaction_id)}\n"
        f"🎮 Player ID: {escape(payment.player_id)}\n"
        f"📦 Product: {escape(payment.product_name)}\n"
        f"⏰ Time: {format_local_time(payment.failed_at, tz_name)}\n"
        f"📝 Reason: {escape(payment.failed_reason or '')}\n\n"
        "🚫 <b>Status: ❌ FAILED</b>"
    )


def final_status_text(payment, code: str, tz_name: str) -> str:
    """The original notification with its call to action replaced by the outcome."""

    body = payment_notification_text(payment, code, tz_name)
    body = body.split("\n\n✅ <b>Payment verified</b>")[0]
    emoji = STATUS_EMOJI.get(payment.status, "⏳")
    return f"{body}\n\n{emoji} <b>Status: {escape(payment.status.upper())}</b>"


def status_summary_text(payment, tz_name: str) -> str:
    """Reply to the `/status` command."""

    emoji = STATUS_EMOJI.get(payment.status, "⏳")
    return (
        "📊 <b>Order status</b>\n\n"
        f"📌 Transaction: {escape(payment.transaction_id)}\n"
        f"🎮 Player: {escape(payment.player_id)}\n"
        f"💵 Amount: {format_amount(payment.amount)}৳\n"
        f"📦 Product: {escape(payment.product_name)}\n"
        f"{emoji} Status: {escape(payment.status)}\n"
        f"⏰ Time: {format_local_time(payment.created_at, tz_name)}"
    )


def not_found_text(transaction_id: str) -> str:
    return f"❌ Transaction ID not found: {escape(transaction_id)}"


def delivery_keyboard(transaction_id: str) -> dict:
    """Inline buttons attached to a new payment notification."""

    return {
        "inline_keyboard": [
            [
                {"text": "✅ Mark delivered", "callback_data": f"{DELIVER_ACTION}:{transaction_id}"},
                {"text": "❌ Mark failed", "callback_data": f"{FAIL_ACTION}:{transaction_id}"},
            ]
        ]
    }
