"""SMS inbox: stores messages forwarded by the payment phone and reports on them."""

import math
import random
from datetime import datetime, timedelta, timezone
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import delete, func, or_, select

from topup.common.db import session_scope
from topup.common.errors import NotFound, ValidationError
from topup.common.logging import logger
from topup.common.metrics import sms_received_total
from topup.services.sms.models import Sms
from topup.services.sms.schemas import SmsFilters, SmsReceive, SmsStatusUpdate

UNKNOWN_SENDER = "Unknown"
UNKNOWN_DEVICE = "unknown-device"
TEST_SENDERS = ["bKash", "Nagad", "Rocket", "+8801712345678", "+8801812345678"]
TEST_MESSAGES = [
    "You have received Tk 500.00 from 01712345678. TrxID ABC123XYZ at 15/01/2025 10:30",
    "Cash In Tk 1,000.00 successful. Fee Tk 0.00. Balance Tk 5,230.50. TrxID DEF456UVW",
    "Your OTP is 482913. Do not share it with anyone.",
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_id(sms_id: str) -> str:
    try:
        return str(UUID(sms_id))
    except ValueError as exc:
        raise ValidationError("Invalid SMS ID format") from exc


class SmsService:
    def __init__(self, session_factory, display_timezone: str = "Asia/Dhaka", service_name: str = "topup-api") -> None:
        self.session_factory = session_factory
        self.display_timezone = display_timezone
        self.service_name = service_name

    def receive(self, req: SmsReceive) -> Sms:
        now = _now()
        sms = Sms(
            sender=req.sender or UNKNOWN_SENDER,
            message=req.message,
            timestamp=req.timestamp or now,
            device_id=req.device_id or UNKNOWN_DEVICE,
            status="received",
            forwarded=False,
            created_at=now,
            updated_at=now,
        )
        with session_scope(self.session_factory) as db:
            db.add(sms)
            db.commit()
        sms_received_total.labels(self.service_name, sms.device_id).inc()
        logger.info("sms_received id=%s sender=%s device_id=%s", sms.id, sms.sender, sms.device_id)
        return sms

    def list_messages(self, filters: SmsFilters, page: int = 1, limit: int = 50) -> tuple[list[Sms], int]:
        """Return one page of messages, newest first, plus the total match count."""

        conditions = []
        if filters.device_id:
            conditions.append(Sms.device_id == filters.device_id)
        if filters.sender:
            conditions.append(Sms.sender.ilike(f"%{filters.sender}%"))
        if filters.status:
            conditions.append(Sms.status == filters.status)
        if filters.start_date:
            conditions.append(Sms.created_at >= filters.start_date)
        if filters.end_date:
            conditions.append(Sms.created_at <= filters.end_date)

        with session_scope(self.session_factory) as db:
            total = db.execute(select(func.count()).select_from(Sms).where(*conditions)).scalar_one()
            rows = db.execute(
                select(Sms)
                .where(*conditions)
                .order_by(Sms.created_at.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).scalars()
            return list(rows), total

    @staticmethod
    def pagination(total: int, page: int, limit: int) -> dict:
        pages = math.ceil(total / limit) if limit else 0
        return {
            "page": page,
            "limit": limit,
            "pages": pages,
            "hasNext": page < pages,
            "hasPrev": page > 1,
        }

    def get(self, sms_id: str) -> Sms:
        key = _parse_id(sms_id)
        with session_scope(self.session_factory) as db:
            sms = db.get(Sms, key)
            if sms is None:
                raise NotFound("SMS not found")
            return sms

    def update_status(self, sms_id: str, req: SmsStatusUpdate) -> Sms:
        key = _parse_id(sms_id)
        with session_scope(self.session_factory) as db:
            sms = db.get(Sms, key)
            if sms is None:
                raise NotFound("SMS not found")
            now = _now()
            if req.status is not None:
                sms.status = req.status
            if req.forwarded is not None:
                sms.forwarded = req.forwarded
                if req.forwarded:
                    sms.forwarded_at = now
            if req.notes is not None:
                sms.notes = req.notes
            sms.updated_at = now
            db.commit()
        logger.info("sms_updated id=%s status=%s forwarded=%s", sms.id, sms.status, sms.forwarded)
        return sms

    def stats(self) -> dict:
        now = _now()
        one_day_ago = now - timedelta(hours=24)
        local_now = now.astimezone(ZoneInfo(self.display_timezone))
        today_start = local_now.replace(hour=0, minute=0, second=0, microsecond=0).astimezone(timezone.utc)

        def count(*conditions) -> int:
            return db.execute(select(func.count()).select_from(Sms).where(*conditions)).scalar_one()

        with session_scope(self.session_factory) as db:
            total = count()
            forwarded = count(Sms.forwarded.is_(True))
            failed = count(Sms.status == "failed")
            last_24h = count(Sms.created_at >= one_day_ago)
            today = count(Sms.created_at >= today_start)

            device_rows = db.execute(
                select(
                    Sms.device_id,
                    func.count().label("count"),
                    func.max(Sms.created_at).label("last_message"),
                    func.min(Sms.created_at).label("first_message"),
                )
                .group_by(Sms.device_id)
                .order_by(func.count().desc())
            ).all()
            sender_rows = db.execute(
                select(Sms.sender, func.count().label("count"), func.max(Sms.created_at).label("last_message"))
                .group_by(Sms.sender)
                .order_by(func.count().desc())
                .limit(10)
            ).all()
            hour = func.extract("hour", Sms.created_at)
            day = func.extract("day", Sms.created_at)
            hourly_rows = db.execute(
                select(hour.label("hour"), day.label("day"), func.count().label("count"))
                .where(Sms.created_at >= one_day_ago)
                .group_by(hour, day)
                .order_by(day, hour)
            ).all()

        return {
            "overview": {
                "total": total,
                "forwarded": forwarded,
                "failed": failed,
                "pending": total - forwarded - failed,
            },
            "timeBased": {
                "last24Hours": last_24h,
                "today": today,
                "hourlyDistribution": [
                    {"hour": int(row.hour), "day": int(row.day), "count": row.count} for row in hourly_rows
                ],
            },
            "byDevice": [
                {
                    "deviceId": row.device_id,
                    "count": row.count,
                    "lastMessage": row.last_message,
                    "firstMessage": row.first_message,
                }
                for row in device_rows
            ],
            "bySender": [
                {"sender": row.sender, "count": row.count, "lastMessage": row.last_message} for row in sender_rows
            ],
            "timestamps": {"now": now, "oneDayAgo": one_day_ago, "todayStart": today_start},
        }

    def search(self, query: str | None, limit: int = 50) -> list[Sms]:
        query = (query or "").strip()
        if len(query) < 2:
            raise ValidationError("Search query must be at least 2 characters")
        pattern = f"%{query}%"
        with session_scope(self.session_factory) as db:
            rows = db.execute(
                select(Sms)
                .where(or_(Sms.message.ilike(pattern), Sms.sender.ilike(pattern)))
                .order_by(Sms.created_at.desc())
                .limit(limit)
            ).scalars()
            return list(rows)

    def delete(self, sms_id: str) -> Sms:
        key = _parse_id(sms_id)
        with session_scope(self.session_factory) as db:
            sms = db.get(Sms, key)
            if sms is None:
                raise NotFound("SMS not found")
            db.delete(sms)
            db.commit()
        logger.info("sms_deleted id=%s", key)
        return sms

    def clear_all(self) -> int:
        with session_scope(self.session_factory) as db:
            deleted = db.execute(delete(Sms)).rowcount
            db.commit()
        logger.warning("sms_cleared deleted_count=%s", deleted)
        return deleted

    def health(self) -> dict:
        with session_scope(self.session_factory) as db:
            total = db.execute(select(func.count()).select_from(Sms)).scalar_one()
            latest = db.execute(select(Sms).order_by(Sms.created_at.desc()).limit(1)).scalar_one_or_none()
        return {
            "status": "healthy",
            "totalMessages": total,
            "latestMessage": latest.created_at if latest else None,
            "timestamp": _now(),
        }

    def receive_test_message(self) -> Sms:
        """Store a synthetic message so the inbox can be checked end to end."""

        return self.receive(
            SmsReceive(
                sender=random.choice(TEST_SENDERS),
                message=random.choice(TEST_MESSAGES),
                device_id="test-device",
            )
        )
