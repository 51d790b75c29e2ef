"""
Database Schemas for SkillSwap

Each Pydantic model corresponds to a MongoDB collection. The collection name
is the lowercase of the class name.
"""
from datetime import datetime
from typing import List, Optional, Literal
from pydantic import BaseModel, Field

Difficulty = Literal["Easy", "Medium", "Hard"]
ChallengeState = Literal["active", "submitted", "completed", "expired", "abandoned"]
ReportStatus = Literal["pending", "actioned", "dismissed"]

CATEGORIES = [
    "Life Hacks",
    "Crafts",
    "Cooking",
    "Magic",
    "Music",
    "Sports",
    "Wellness",
    "Puzzles",
    "Life Skills",
    "Other",
]

DURATIONS = ["1 min", "2 min", "3 min", "5 min", "8 min", "10 min"]

REPORT_REASONS = [
    "Inappropriate content",
    "Spam or misleading",
    "Offensive or hateful",
    "Fake or scam",
    "Other",
]

DEFAULT_AVATAR = "👤"


class Preferences(BaseModel):
    notifications: bool = True
    difficulty: Literal["easy", "medium", "hard", "mixed"] = "mixed"
    categories: List[str] = Field(default_factory=list)
    theme: Literal["dark", "light"] = "dark"


class User(BaseModel):
    """
    Collection: user
    Profile keyed by the external auth uid (stored as _id).
    """
    name: str = Field("Anonymous", description="Display name")
    email: Optional[str] = Field(None, description="Sign-in email")
    avatar: str = Field(DEFAULT_AVATAR, description="Emoji avatar")
    level: int = Field(1, ge=1)
    xp: int = Field(0, ge=0)
    streak: int = Field(0, ge=0)
    last_active_date: Optional[datetime] = None
    skills_learned: int = Field(0, ge=0)
    skills_taught: int = Field(0, ge=0)
    total_challenges: int = Field(0, ge=0)
    completed_challenges: int = Field(0, ge=0)
    preferences: Preferences = Field(default_factory=Preferences)
    push_token: Optional[str] = None
    premium: bool = False


class Skill(BaseModel):
    """
    Collection: skill
    A short teachable item posted by a user.
    """
    user_id: str
    author: str = "Anonymous"
    title: str = Field(..., min_length=3)
    description: str
    category: str
    difficulty: Difficulty
    duration: str
    thumbnail: str
    tips: str = ""
    video_url: Optional[str] = Field(None, description="Optional tutorial video")
    rating: float = Field(0, ge=0, le=5, description="Average skill rating")
    rating_count: int = Field(0, ge=0)


class Challenge(BaseModel):
    """
    Collection: challenge
    A timed learn/teach pairing. Skills are embedded as snapshots so the
    challenge still renders if the skill is later edited or removed.
    """
    user_id: str
    learn_skill: dict
    teach_skill: dict
    start_time: datetime
    time_limit: int = Field(..., gt=0, description="Seconds allowed from start_time")
    status: ChallengeState = "active"
    proof_url: Optional[str] = None
    ended_at: Optional[datetime] = None


class Match(BaseModel):
    """
    Collection: match
    Links a challenge to its learner and teacher.
    """
    challenge_id: str
    learner_id: str
    teacher_id: str
    learn_skill_id: Optional[str] = None
    teach_skill_id: Optional[str] = None
    learner_completed: bool = False
    teacher_completed: bool = False


class Notification(BaseModel):
    """
    Collection: notification
    """
    user_id: str
    type: str = "info"
    title: str
    body: str = ""
    data: dict = Field(default_factory=dict)
    read: bool = False


class Report(BaseModel):
    """
    Collection: report
    A user flagging a skill or another user.
    """
    reported_by: str
    type: Literal["skill", "user"]
    target_id: str
    target_title: Optional[str] = None
    reason: str
    details: str = ""
    status: ReportStatus = "pending"


class Rating(BaseModel):
    """
    Collection: rating
    """
    rater_id: str
    skill_id: str
    skill_title: Optional[str] = None
    teacher_id: Optional[str] = None
    match_id: Optional[str] = None
    skill_rating: int = Field(..., ge=1, le=5)
    teacher_rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None


class Event(BaseModel):
    """
    Collection: event
    Lightweight analytics.
    """
    user_id: Optional[str] = None
    name: str
    params: dict = Field(default_factory=dict)
