from datetime import datetime

from pydantic import BaseModel, Field


class CustomerIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., min_length=1, max_length=100)


class CustomerOut(BaseModel):
    id: int
    name: str
    subdomain: str
    is_active: bool

    class Config:
        from_attributes = True


class SiteIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    site_code: str = Field(..., min_length=1, max_length=50)
    time_zone: str = "UTC"
    default_layout_id: int | None = None


class SiteUpdateIn(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    site_code: str | None = Field(None, min_length=1, max_length=50)
    time_zone: str | None = None
    default_layout_id: int | None = None
    is_active: bool | None = None


class SiteOut(BaseModel):
    id: int
    customer_id: int
    name: str
    site_code: str
    time_zone: str
    default_layout_id: int | None = None
    is_active: bool

    class Config:
        from_attributes = True


class PlayerIn(BaseModel):
    site_id: int
    name: str = Field(..., min_length=1, max_length=255)
    player_code: str = Field(..., min_length=1, max_length=50)
    default_layout_id: int | None = None


class PlayerUpdateIn(BaseModel):
    site_id: int | None = None
    name: str | None = Field(None, min_length=1, max_length=255)
    player_code: str | None = Field(None, min_length=1, max_length=50)
    default_layout_id: int | None = None
    is_active: bool | None = None


class PlayerOut(BaseModel):
    id: int
    site_id: int
    name: str
    player_code: str
    default_layout_id: int | None = None
    is_active: bool
    last_seen: datetime | None = None

    class Config:
        from_attributes = True


class LayoutIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    width: int = Field(1920, gt=0)
    height: int = Field(1080, gt=0)
    background_color: str = "#000000"


class LayoutOut(BaseModel):
    id: int
    customer_id: int
    name: str
    description: str | None = None
    width: int
    height: int
    background_color: str
    is_active: bool

    class Config:
        from_attributes = True
