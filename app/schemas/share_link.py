from pydantic import BaseModel, Field

MAX_EXPIRY_HOURS = 10 * 365 * 24


class ShareLinkCreate(BaseModel):
    name: str = Field(min_length=1)
    page_url: str = Field(min_length=1)
    expires_in_hours: int | None = Field(default=None, ge=0, le=MAX_EXPIRY_HOURS)  # 0 = never


class ShareLinkResponse(BaseModel):
    id: str
    name: str
    page_url: str
    token: str
    expires_at: str | None = None
    is_active: bool
    access_count: int
    created_at: str

    model_config = {"from_attributes": True}
