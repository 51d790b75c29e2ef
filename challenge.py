"""
Challenge lifecycle and countdown.

A challenge starts ``active``. Capturing a proof video moves it to
``submitted``; a successful upload completes it. Independently, once the
time limit runs out an active or submitted challenge becomes ``expired``,
and the user may abandon it at any point before it ends. ``completed``,
``expired`` and ``abandoned`` are terminal.

The deadline is not enforced anywhere else: callers tick the session with
the current time and persist whatever status comes out.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import AsyncIterator, Awaitable, Callable, Optional


class ChallengeStatus(str, Enum):
    ACTIVE = "active"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    EXPIRED = "expired"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({ChallengeStatus.COMPLETED, ChallengeStatus.EXPIRED, ChallengeStatus.ABANDONED})


class ChallengeStateError(ValueError):
    """Raised for a transition the lifecycle does not allow."""


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # Mongo hands back naive datetimes unless the client is tz_aware
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ChallengeSession:
    """Local state for one challenge: status, deadline and the captured video."""

    def __init__(self, start_time: datetime, time_limit: timedelta,
                 status: ChallengeStatus = ChallengeStatus.ACTIVE, video=None):
        self.start_time = as_utc(start_time)
        self.time_limit = time_limit
        self.status = ChallengeStatus(status)
        self.video = video

    @classmethod
    def from_document(cls, doc: dict) -> "ChallengeSession":
        return cls(
            start_time=doc["start_time"],
            time_limit=timedelta(seconds=doc["time_limit"]),
            status=ChallengeStatus(doc.get("status", ChallengeStatus.ACTIVE)),
        )

    @property
    def deadline(self) -> datetime:
        return self.start_time + self.time_limit

    def remaining(self, now: Optional[datetime] = None) -> timedelta:
        left = self.deadline - as_utc(now or utcnow())
        return max(left, timedelta(0))

    def tick(self, now: Optional[datetime] = None) -> ChallengeStatus:
        """Recompute the deadline and force ``expired`` once time has run out."""
        if self.status.is_terminal:
            return self.status
        if self.remaining(now) <= timedelta(0):
            self.status = ChallengeStatus.EXPIRED
            self.video = None
        return self.status

    @property
    def can_record_proof(self) -> bool:
        return self.status is ChallengeStatus.ACTIVE

    def record_proof(self, video, now: Optional[datetime] = None) -> ChallengeStatus:
        self.tick(now)
        if not self.can_record_proof:
            raise ChallengeStateError(f"cannot record proof while {self.status.value}")
        self.video = video
        self.status = ChallengeStatus.SUBMITTED
        return self.status

    def retake(self) -> ChallengeStatus:
        """Throw away the captured video and go back to recording. Local only."""
        if self.status is not ChallengeStatus.SUBMITTED:
            raise ChallengeStateError(f"nothing to retake while {self.status.value}")
        self.video = None
        self.status = ChallengeStatus.ACTIVE
        return self.status

    def complete(self, proof_url: Optional[str], now: Optional[datetime] = None) -> ChallengeStatus:
        # No proof, no completion. Not an error either.
        if not proof_url:
            return self.status
        self.tick(now)
        if self.status.is_terminal:
            raise ChallengeStateError(f"cannot complete a challenge that is {self.status.value}")
        self.status = ChallengeStatus.COMPLETED
        return self.status

    def abandon(self) -> ChallengeStatus:
        if self.status.is_terminal:
            raise ChallengeStateError(f"cannot abandon a challenge that is {self.status.value}")
        self.video = None
        self.status = ChallengeStatus.ABANDONED
        return self.status

    def expire(self, now: Optional[datetime] = None) -> ChallengeStatus:
        """Explicit expiry request. Only honoured once the deadline has passed."""
        self.tick(now)
        if self.status is not ChallengeStatus.EXPIRED:
            raise ChallengeStateError(f"challenge is {self.status.value}, not expired")
        return self.status

    def adopt(self, stored: Optional[str]) -> ChallengeStatus:
        """
        Take on a status written elsewhere, e.g. by another request. Only
        forward moves are accepted; a terminal local status is kept.
        """
        if stored is None or self.status.is_terminal:
            return self.status
        stored = ChallengeStatus(stored)
        if stored.is_terminal:
            self.status = stored
            self.video = None
        elif stored is ChallengeStatus.SUBMITTED and self.status is ChallengeStatus.ACTIVE:
            self.status = stored
        return self.status


async def countdown(session: ChallengeSession, clock: Callable[[], datetime] = utcnow,
                    interval: float = 1.0,
                    reload: Optional[Callable[[], Awaitable[Optional[str]]]] = None) -> AsyncIterator[timedelta]:
    """
    Yield the remaining time every ``interval`` seconds until the session ends.

    ``reload`` returns the currently stored status; it is checked before each
    tick so a challenge finished elsewhere stops the countdown.
    """
    while True:
        if reload is not None:
            session.adopt(await reload())
        now = clock()
        status = session.tick(now)
        yield session.remaining(now)
        if status.is_terminal:
            return
        await asyncio.sleep(interval)


def format_remaining(remaining: timedelta) -> str:
    total = max(int(remaining.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def urgency(remaining: Optional[timedelta]) -> str:
    if not remaining:
        return "critical"
    hours_left = remaining.total_seconds() / 3600
    if hours_left < 2:
        return "critical"
    if hours_left < 6:
        return "warning"
    return "ok"
