from fastapi import APIRouter, Depends, Query

from app.dependencies import require_chair
from app.schemas.action_log import ActionLogEntry, ActionLogResponse
from app.services.action_log import ActionLogService

router = APIRouter(dependencies=[Depends(require_chair)])


@router.get("/conf/log")
async def query_action_log(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    contact_id: int | None = None,
    paper_id: int | None = None,
) -> ActionLogResponse:
    items, total = await ActionLogService().query(
        limit=limit, offset=offset, contact_id=contact_id, paper_id=paper_id
    )
    return ActionLogResponse(
        items=[
            ActionLogEntry(
                log_id=r.log_id,
                time=r.time.isoformat() + "Z" if r.time else None,
                ipaddr=r.ipaddr,
                contact_id=r.contact_id,
                paper_id=r.paper_id,
                action=r.action,
            )
            for r in items
        ],
        total=total,
        limit=limit,
        offset=offset,
    )
