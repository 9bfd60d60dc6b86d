"""Memo endpoints."""

from fastapi import APIRouter, Depends

from travel_status.api.dependencies import Services, get_services
from travel_status.api.models import MemoCreateRequest
from travel_status.errors import InputValidationError

router = APIRouter()


@router.post("/api/memos/create")
async def create_memo(body: MemoCreateRequest, services: Services = Depends(get_services)):
    if not (body.memo_type and body.vac_id):
        raise InputValidationError("Missing required fields", accepted=["memo_type", "vac_id"])
    memo = await services.memos.create(
        body.memo_type,
        body.details or "",
        body.vac_id,
        body.phone_number or "",
        created_date=services.aggregator.today(),
    )
    return {
        "success": True,
        "message": "Memo created successfully",
        "memo_id": memo.memo_id,
        "memo": memo.model_dump(by_alias=True),
    }


@router.get("/api/memos/{vac_id}")
async def list_memos(vac_id: str, services: Services = Depends(get_services)):
    memos = await services.memos.list_for(vac_id)
    return {
        "vac_id": vac_id,
        "memo_count": len(memos),
        "memos": [m.model_dump(by_alias=True) for m in memos],
    }
