"""HTTP routes for the SMS inbox."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from topup.common.schemas import envelope
from topup.services.api_gateway.dependencies import get_sms_service
from topup.services.sms.schemas import SmsFilters, SmsRead, SmsReceive, SmsStatus, SmsStatusUpdate
from topup.services.sms.service import SmsService

router = APIRouter(prefix="/api/sms", tags=["sms"])


@router.post("/receive", status_code=201)
def receive_sms(req: SmsReceive, sms: SmsService = Depends(get_sms_service)):
    """Store a message pushed by the forwarding device."""

    stored = sms.receive(req)
    return envelope(True, "SMS received successfully", SmsRead.model_validate(stored))


@router.get("")
def list_sms(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    device_id: str | None = Query(None, alias="deviceId"),
    sender: str | None = None,
    status: SmsStatus | None = None,
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    sms: SmsService = Depends(get_sms_service),
):
    filters = SmsFilters(
        device_id=device_id,
        sender=sender,
        status=status,
        start_date=start_date,
        end_date=end_date,
    )
    rows, total = sms.list_messages(filters, page=page, limit=limit)
    return envelope(
        True,
        "SMS messages retrieved",
        [SmsRead.model_validate(row) for row in rows],
        pagination=sms.pagination(total, page, limit),
        total=total,
    )


@router.get("/stats/overview")
def sms_stats(sms: SmsService = Depends(get_sms_service)):
    return envelope(True, "SMS statistics retrieved", sms.stats())


@router.get("/search/text")
def search_sms(
    q: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    sms: SmsService = Depends(get_sms_service),
):
    rows = sms.search(q, limit=limit)
    return envelope(True, "Search completed", [SmsRead.model_validate(row) for row in rows], count=len(rows))


@router.get("/health/check")
def sms_health(sms: SmsService = Depends(get_sms_service)):
    return envelope(True, "SMS service is healthy", sms.health())


@router.delete("/admin/clear-all")
def clear_all_sms(sms: SmsService = Depends(get_sms_service)):
    deleted = sms.clear_all()
    return envelope(True, "All SMS messages cleared", {"deletedCount": deleted})


@router.post("/test/receive", status_code=201)
def receive_test_sms(sms: SmsService = Depends(get_sms_service)):
    stored = sms.receive_test_message()
    return envelope(True, "Test SMS stored", SmsRead.model_validate(stored))


@router.get("/{sms_id}")
def get_sms(sms_id: str, sms: SmsService = Depends(get_sms_service)):
    return envelope(True, "SMS retrieved", SmsRead.model_validate(sms.get(sms_id)))


@router.patch("/{sms_id}/status")
def update_sms_status(
    sms_id: str,
    req: SmsStatusUpdate | None = None,
    sms: SmsService = Depends(get_sms_service),
):
    updated = sms.update_status(sms_id, req or SmsStatusUpdate())
    return envelope(True, "SMS status updated", SmsRead.model_validate(updated))


@router.delete("/{sms_id}")
def delete_sms(sms_id: str, sms: SmsService = Depends(get_sms_service)):
    sms.delete(sms_id)
    return envelope(True, "SMS deleted successfully")
