from pydantic import BaseModel


class ActionLogEntry(BaseModel):
    log_id: int
    time: str | None = None
    ipaddr: str | None = None
    contact_id: int
    paper_id: int | None = None
    action: str


class ActionLogResponse(BaseModel):
    items: list[ActionLogEntry]
    total: int
    limit: int
    offset: int
