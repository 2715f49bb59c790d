from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BadgeConditionIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, max_length=64)
    value: int = Field(..., ge=0)


class BadgeCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=1024)
    icon: str = Field(..., min_length=1, max_length=64)
    category: str = Field(..., min_length=1, max_length=32)
    condition: BadgeConditionIn
    xp_reward: int = Field(default=0, ge=0)
    sort_order: int | None = Field(default=None, ge=0)
    is_active: bool = True


class BadgeUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=64)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1, max_length=1024)
    icon: str | None = Field(default=None, min_length=1, max_length=64)
    category: str | None = Field(default=None, min_length=1, max_length=32)
    condition: BadgeConditionIn | None = None
    xp_reward: int | None = Field(default=None, ge=0)
    sort_order: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class BadgeOut(BaseModel):
    id: str
    code: str
    name: str
    description: str
    icon: str
    category: str
    condition: dict
    xp_reward: int
    sort_order: int
    is_active: bool

    model_config = {"from_attributes": True}


class StudentBadgeOut(BaseModel):
    id: str
    badge_id: str
    awarded_at: datetime
    badge: BadgeOut

    model_config = {"from_attributes": True}


class MyBadgesResponse(BaseModel):
    badges: list[StudentBadgeOut]
    by_category: dict[str, list[StudentBadgeOut]]


class XPTransactionOut(BaseModel):
    id: str
    student_id: str
    amount: int
    reason: str
    source_id: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LevelOut(BaseModel):
    name: str
    min_xp: int
    max_xp: int | None
    next_level: str | None
    next_level_xp: int | None
    progress_percent: float

    model_config = {"from_attributes": True}


class MyXPResponse(BaseModel):
    xp_total: int
    recent_transactions: list[XPTransactionOut]
    rank: int
    level: LevelOut


class MySummaryResponse(BaseModel):
    xp_total: int
    rank: int
    level: LevelOut
    total_badges: int
    earned_badges: int
    recent_badges: list[StudentBadgeOut]
    next_badges: list[BadgeOut]


class LeaderboardEntryOut(BaseModel):
    rank: int
    student_id: str
    name: str
    xp_total: int
    badge_count: int

    model_config = {"from_attributes": True}


class CourseOut(BaseModel):
    id: str
    title: str

    model_config = {"from_attributes": True}


class CourseLeaderboardResponse(BaseModel):
    course: CourseOut
    entries: list[LeaderboardEntryOut]


class SeedBadgesResponse(BaseModel):
    created: list[str]
    skipped: list[str]


class XPGrantRequest(BaseModel):
    amount: int = Field(..., ge=-10000, le=10000)
    reason: str = Field(default="manual_adjustment", min_length=1, max_length=64)
    source_id: str | None = Field(default=None, max_length=36)
    facts: dict[str, int] = Field(default_factory=dict)


class XPGrantResponse(BaseModel):
    transaction: XPTransactionOut
    xp_total: int
    awarded_badges: list[BadgeOut]


class EvaluateRequest(BaseModel):
    facts: dict[str, int] = Field(default_factory=dict)


class EvaluateResponse(BaseModel):
    xp_total: int
    awarded_badges: list[BadgeOut]
