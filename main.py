import asyncio
import json
import logging
import random
from pathlib import Path
from typing import List, Literal, Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field, field_validator
from bson import ObjectId
from pymongo.errors import PyMongoError

import config
from database import DatabaseNotConfigured, db, create_document, get_documents, update_document
from schemas import (
    CATEGORIES,
    DURATIONS,
    REPORT_REASONS,
    Challenge as ChallengeSchema,
    Event as EventSchema,
    Match as MatchSchema,
    Notification as NotificationSchema,
    Rating as RatingSchema,
    Report as ReportSchema,
    Skill as SkillSchema,
    User as UserSchema,
)
from challenge import (
    ChallengeSession,
    ChallengeStateError,
    ChallengeStatus,
    countdown,
    format_remaining,
    urgency,
    utcnow,
)
import progress
import push
import storage

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="SkillSwap API", version="0.2.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Path(config.MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(config.MEDIA_URL, StaticFiles(directory=config.MEDIA_ROOT), name="media")


@app.exception_handler(PyMongoError)
async def database_error(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Something went wrong. Please try again."})


@app.exception_handler(DatabaseNotConfigured)
async def database_missing(request: Request, exc: DatabaseNotConfigured):
    logger.error("%s %s called without a database", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Database not configured"})


# ---------- Utility ----------

def oid(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except Exception:
        raise HTTPException(status_code=400, detail="Invalid id")


def require_db():
    if db is None:
        raise HTTPException(500, "Database not configured")
    return db


def out(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


def get_user_or_404(user_id: str) -> dict:
    user = require_db()["user"].find_one({"_id": user_id})
    if not user:
        raise HTTPException(404, "User not found")
    return user


def get_skill_or_404(skill_id: str) -> dict:
    skill = require_db()["skill"].find_one({"_id": oid(skill_id)})
    if not skill:
        raise HTTPException(404, "Skill not found")
    return skill


def get_challenge_or_404(challenge_id: str) -> dict:
    ch = require_db()["challenge"].find_one({"_id": oid(challenge_id)})
    if not ch:
        raise HTTPException(404, "Challenge not found")
    return ch


def owned_challenge(challenge_id: str, user_id: str) -> dict:
    ch = get_challenge_or_404(challenge_id)
    if ch["user_id"] != user_id:
        raise HTTPException(403, "Not your challenge")
    return ch


LIVE_STATES = [ChallengeStatus.ACTIVE.value, ChallengeStatus.SUBMITTED.value]


def mark_expired(ch: dict) -> bool:
    """Write ``expired`` unless the stored challenge already ended. Returns whether it was written."""
    ended_at = utcnow()
    written = update_document("challenge", {"_id": ch["_id"], "status": {"$in": LIVE_STATES}},
                              {"status": ChallengeStatus.EXPIRED.value, "ended_at": ended_at})
    if written:
        ch.update(status=ChallengeStatus.EXPIRED.value, ended_at=ended_at)
        logger.info("Challenge %s expired", ch["_id"])
    return bool(written)


def stored_status(ch: dict) -> Optional[str]:
    doc = require_db()["challenge"].find_one({"_id": ch["_id"]}, {"status": 1})
    return doc["status"] if doc else None


def refresh_challenge(ch: dict) -> ChallengeSession:
    """Tick the challenge and write back ``expired`` if its time ran out."""
    session = ChallengeSession.from_document(ch)
    before = session.status
    session.tick()
    if session.status != before and not mark_expired(ch):
        # another request ended it first; report what was stored
        ch.update(require_db()["challenge"].find_one({"_id": ch["_id"]}) or {})
        session = ChallengeSession.from_document(ch)
    return session


def challenge_out(ch: dict, session: Optional[ChallengeSession] = None) -> dict:
    session = session or refresh_challenge(ch)
    remaining = session.remaining()
    doc = out(ch)
    doc.update({
        "deadline": session.deadline,
        "remaining_seconds": int(remaining.total_seconds()),
        "remaining_display": format_remaining(remaining),
        "urgency": urgency(remaining),
        "can_record_proof": session.can_record_proof,
    })
    return doc


def notify(user_id: str, type: str, title: str, body: str = "", data: Optional[dict] = None) -> str:
    notification_id = create_document(
        "notification",
        NotificationSchema(user_id=user_id, type=type, title=title, body=body, data=data or {}),
    )
    user = require_db()["user"].find_one({"_id": user_id}, {"push_token": 1, "preferences": 1})
    if user and user.get("push_token") and (user.get("preferences") or {}).get("notifications", True):
        push.get_sender().send(user["push_token"], title, body, {"notification_id": notification_id, **(data or {})})
    return notification_id


# ---------- Request Models ----------

class UserCreate(BaseModel):
    uid: str
    name: Optional[str] = None
    email: Optional[str] = None


class PreferencesUpdate(BaseModel):
    notifications: Optional[bool] = None
    difficulty: Optional[Literal["easy", "medium", "hard", "mixed"]] = None
    categories: Optional[List[str]] = None
    theme: Optional[Literal["dark", "light"]] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    avatar: Optional[str] = None
    preferences: Optional[PreferencesUpdate] = None


class PushTokenRequest(BaseModel):
    token: str


class SkillCreate(BaseModel):
    user_id: str
    title: str
    description: str
    category: str
    difficulty: Literal["Easy", "Medium", "Hard"]
    duration: str
    thumbnail: str
    tips: str = ""
    video_url: Optional[str] = None
    author: Optional[str] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Skill name is required")
        if len(v) < 3:
            raise ValueError("Name must be at least 3 characters")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description is required")
        return v

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str) -> str:
        if v not in CATEGORIES:
            raise ValueError("Please select a category")
        return v

    @field_validator("duration")
    @classmethod
    def check_duration(cls, v: str) -> str:
        if v not in DURATIONS:
            raise ValueError("Please select a duration")
        return v

    @field_validator("thumbnail")
    @classmethod
    def check_thumbnail(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Please pick an emoji for your skill")
        return v


class SpinRequest(BaseModel):
    user_id: str


class ChallengeCreate(BaseModel):
    user_id: str
    learn_skill_id: str
    teach_skill_id: str


class ChallengeAction(BaseModel):
    user_id: str


class ChallengeComplete(BaseModel):
    user_id: str
    proof_url: Optional[str] = None


class RatingCreate(BaseModel):
    rater_id: str
    skill_id: str
    match_id: Optional[str] = None
    skill_rating: int = Field(..., ge=1, le=5)
    teacher_rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = None


class ReportCreate(BaseModel):
    reported_by: str
    type: Literal["skill", "user"]
    target_id: str
    target_title: Optional[str] = None
    reason: str
    details: str = ""


class ReportResolve(BaseModel):
    user_id: str
    action: Literal["actioned", "dismissed"]


class EventCreate(BaseModel):
    name: str
    user_id: Optional[str] = None
    params: dict = {}


# ---------- Core Endpoints ----------

@app.get("/")
def read_root():
    return {"message": "SkillSwap Backend Running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if db is not None:
            response["database"] = "✅ Connected & Working"
            response["database_url"] = "✅ Set" if config.DATABASE_URL else "❌ Not Set"
            response["database_name"] = db.name
            response["connection_status"] = "Connected"
            response["collections"] = db.list_collection_names()
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# Users
@app.post("/api/users")
def create_or_get_user(payload: UserCreate):
    existing = require_db()["user"].find_one({"_id": payload.uid})
    if existing:
        return out(existing)
    user = UserSchema(name=payload.name or "Anonymous", email=payload.email, last_active_date=utcnow())
    create_document("user", {"_id": payload.uid, **user.model_dump()})
    logger.info("Created profile for %s", payload.uid)
    return out(db["user"].find_one({"_id": payload.uid}))


@app.get("/api/users/{user_id}")
def get_user(user_id: str):
    user = get_user_or_404(user_id)
    xp = user.get("xp", 0)
    return {
        "profile": out(user),
        "display": progress.display_data(user),
        "level_progress": progress.level_progress(xp),
        "achievements": progress.achievements(user),
    }


@app.patch("/api/users/{user_id}")
def update_user(user_id: str, payload: UserUpdate):
    user = get_user_or_404(user_id)
    changes = payload.model_dump(exclude_none=True, exclude={"preferences"})
    if payload.preferences is not None:
        prefs = dict(user.get("preferences") or {})
        prefs.update(payload.preferences.model_dump(exclude_none=True))
        changes["preferences"] = prefs
    if changes:
        update_document("user", {"_id": user_id}, changes)
    return out(db["user"].find_one({"_id": user_id}))


@app.post("/api/users/{user_id}/streak")
def touch_streak(user_id: str):
    user = get_user_or_404(user_id)
    changes = progress.streak_update(user)
    if changes:
        update_document("user", {"_id": user_id}, changes)
    return {"streak": changes.get("streak", user.get("streak", 0)), "changed": bool(changes)}


@app.get("/api/users/{user_id}/public")
def public_profile(user_id: str):
    user = get_user_or_404(user_id)
    skills = get_documents("skill", {"user_id": user_id}, newest_first=True)
    return {
        "id": user_id,
        **progress.display_data(user),
        "skills": [out(s) for s in skills],
    }


@app.get("/api/users/{user_id}/skills")
def user_skills(user_id: str):
    return [out(s) for s in get_documents("skill", {"user_id": user_id}, newest_first=True)]


@app.post("/api/users/{user_id}/push-token")
def register_push_token(user_id: str, payload: PushTokenRequest):
    get_user_or_404(user_id)
    update_document("user", {"_id": user_id}, {"push_token": payload.token})
    return {"push_enabled": True}


# Skills
@app.post("/api/skills")
def create_skill(payload: SkillCreate):
    author = get_user_or_404(payload.user_id)
    skill = SkillSchema(**payload.model_dump(exclude={"author"}),
                        author=payload.author or author.get("name") or "Anonymous")
    skill_id = create_document("skill", skill)
    update_document("user", {"_id": payload.user_id}, progress.taught_credit(author))
    logger.info("Skill %s added by %s", skill_id, payload.user_id)
    return out(db["skill"].find_one({"_id": ObjectId(skill_id)}))


@app.get("/api/skills/random")
def random_skills(user_id: str, limit: int = 20):
    skills = get_documents("skill", {"user_id": {"$ne": user_id}})
    random.shuffle(skills)
    return [out(s) for s in skills[:limit]]


@app.get("/api/skills/search")
def search_skills(user_id: str, q: str = "", category: str = "All", difficulty: str = "All", limit: int = 50):
    skills = get_documents("skill", {"user_id": {"$ne": user_id}}, newest_first=True)
    needle = q.strip().lower()

    def matches(skill: dict) -> bool:
        if needle and not any(needle in (skill.get(f) or "").lower() for f in ("title", "description", "author")):
            return False
        if category != "All" and skill.get("category") != category:
            return False
        if difficulty != "All" and skill.get("difficulty") != difficulty:
            return False
        return True

    return [out(s) for s in skills if matches(s)][:limit]


@app.get("/api/skills/categories")
def skill_categories(user_id: Optional[str] = None):
    filter_dict = {"user_id": {"$ne": user_id}} if user_id else {}
    skills = get_documents("skill", filter_dict)
    return [
        {"name": name, "count": sum(1 for s in skills if s.get("category") == name)}
        for name in CATEGORIES
    ]


@app.get("/api/skills/{skill_id}")
def get_skill(skill_id: str):
    return out(get_skill_or_404(skill_id))


@app.get("/api/skills/{skill_id}/ratings")
def skill_ratings(skill_id: str, limit: int = 5):
    get_skill_or_404(skill_id)
    return [out(r) for r in get_documents("rating", {"skill_id": skill_id}, limit=limit, newest_first=True)]


# Roulette
@app.post("/api/roulette/spin")
def spin(payload: SpinRequest):
    get_user_or_404(payload.user_id)
    others = get_documents("skill", {"user_id": {"$ne": payload.user_id}})
    if not others:
        raise HTTPException(404, "No skills to learn yet")
    mine = get_documents("skill", {"user_id": payload.user_id})
    if not mine:
        raise HTTPException(404, "Add a skill you can teach first")
    return {"learn_skill": out(random.choice(others)), "teach_skill": out(random.choice(mine))}


# Challenges
@app.post("/api/challenges")
def start_challenge(payload: ChallengeCreate):
    learner = get_user_or_404(payload.user_id)
    learn = get_skill_or_404(payload.learn_skill_id)
    teach = get_skill_or_404(payload.teach_skill_id)
    if learn["user_id"] == payload.user_id:
        raise HTTPException(400, "You can't learn your own skill")
    if teach["user_id"] != payload.user_id:
        raise HTTPException(400, "You can only teach your own skills")

    for ch in get_documents("challenge", {"user_id": payload.user_id, "status": {"$in": ["active", "submitted"]}}):
        if not refresh_challenge(ch).status.is_terminal:
            raise HTTPException(409, "Finish or abandon your current challenge first")

    challenge = ChallengeSchema(
        user_id=payload.user_id,
        learn_skill=out(learn),
        teach_skill=out(teach),
        start_time=utcnow(),
        time_limit=int(config.CHALLENGE_TIME_LIMIT.total_seconds()),
    )
    challenge_id = create_document("challenge", challenge)
    create_document("match", MatchSchema(
        challenge_id=challenge_id,
        learner_id=payload.user_id,
        teacher_id=learn["user_id"],
        learn_skill_id=payload.learn_skill_id,
        teach_skill_id=payload.teach_skill_id,
    ))
    notify(
        learn["user_id"],
        "match",
        "New skill swap!",
        f"{learner.get('name') or 'Someone'} is learning \"{learn['title']}\" from you",
        {"challenge_id": challenge_id},
    )
    logger.info("Challenge %s started by %s", challenge_id, payload.user_id)
    return challenge_out(db["challenge"].find_one({"_id": ObjectId(challenge_id)}))


@app.get("/api/challenges")
def challenge_history(user_id: str, status: Optional[str] = None):
    challenges = get_documents("challenge", {"user_id": user_id}, newest_first=True)
    for ch in challenges:
        refresh_challenge(ch)
    stats = {
        key: sum(1 for c in challenges if c["status"] == key)
        for key in ("completed", "abandoned", "active")
    }
    total = len(challenges)
    if status and status != "all":
        challenges = [c for c in challenges if c["status"] == status]
    return {"challenges": [challenge_out(c) for c in challenges], "stats": stats, "total": total}


@app.get("/api/challenges/active")
def active_challenge(user_id: str):
    docs = get_documents("challenge", {"user_id": user_id, "status": {"$in": ["active", "submitted"]}},
                         limit=1, newest_first=True)
    if not docs:
        return {"challenge": None}
    session = refresh_challenge(docs[0])
    if session.status.is_terminal:
        return {"challenge": None}
    return {"challenge": challenge_out(docs[0], session)}


@app.get("/api/challenges/{challenge_id}")
def get_challenge(challenge_id: str):
    return challenge_out(get_challenge_or_404(challenge_id))


def finish_challenge(ch: dict, proof_url: str) -> None:
    ended_at = utcnow()
    written = update_document("challenge", {"_id": ch["_id"], "status": {"$in": LIVE_STATES}},
                              {"status": ChallengeStatus.COMPLETED.value, "proof_url": proof_url, "ended_at": ended_at})
    if not written:
        raise HTTPException(409, f"cannot complete a challenge that is {stored_status(ch)}")
    ch.update(status=ChallengeStatus.COMPLETED.value, proof_url=proof_url, ended_at=ended_at)

    learner = db["user"].find_one({"_id": ch["user_id"]})
    if learner:
        changes = progress.learned_credit(learner)
        changes.update(progress.streak_update(learner))
        update_document("user", {"_id": ch["user_id"]}, changes)

    challenge_id = str(ch["_id"])
    match = db["match"].find_one({"challenge_id": challenge_id})
    if match:
        update_document("match", {"_id": match["_id"]}, {"learner_completed": True})
        learn_title = (ch.get("learn_skill") or {}).get("title", "your skill")
        notify(match["teacher_id"], "challenge_completed", "Your skill was learned!",
               f"{(learner or {}).get('name') or 'Someone'} completed \"{learn_title}\"",
               {"challenge_id": challenge_id, "match_id": str(match["_id"])})
    logger.info("Challenge %s completed", challenge_id)


@app.post("/api/challenges/{challenge_id}/proof")
def upload_proof(challenge_id: str, user_id: str = Form(...), file: UploadFile = File(...)):
    ch = owned_challenge(challenge_id, user_id)
    session = refresh_challenge(ch)
    try:
        session.record_proof(file.filename)
    except ChallengeStateError as e:
        raise HTTPException(409, str(e))

    def on_progress(percent: int):
        logger.debug("Challenge %s upload %d%%", challenge_id, percent)

    try:
        url = storage.upload_video(file.file, user_id, challenge_id, filename=file.filename,
                                   size=getattr(file, "size", None), on_progress=on_progress)
    except storage.StorageError as e:
        logger.error("Proof upload failed for challenge %s: %s", challenge_id, e)
        raise HTTPException(502, "Upload failed. Please try again.")

    try:
        session.complete(url)
    except ChallengeStateError as e:
        # time ran out while the upload was in flight
        refresh_challenge(ch)
        raise HTTPException(409, str(e))
    finish_challenge(ch, url)
    return challenge_out(ch, session)


@app.post("/api/challenges/{challenge_id}/complete")
def complete_challenge(challenge_id: str, payload: ChallengeComplete):
    ch = owned_challenge(challenge_id, payload.user_id)
    session = refresh_challenge(ch)
    before = session.status
    try:
        session.complete(payload.proof_url)
    except ChallengeStateError as e:
        raise HTTPException(409, str(e))
    if session.status != before:
        finish_challenge(ch, payload.proof_url)
    return challenge_out(ch, session)


@app.post("/api/challenges/{challenge_id}/abandon")
def abandon_challenge(challenge_id: str, payload: ChallengeAction):
    ch = owned_challenge(challenge_id, payload.user_id)
    session = refresh_challenge(ch)
    try:
        session.abandon()
    except ChallengeStateError as e:
        raise HTTPException(409, str(e))
    ended_at = utcnow()
    written = update_document("challenge", {"_id": ch["_id"], "status": {"$in": LIVE_STATES}},
                              {"status": session.status.value, "ended_at": ended_at})
    if not written:
        raise HTTPException(409, f"cannot abandon a challenge that is {stored_status(ch)}")
    ch.update(status=session.status.value, ended_at=ended_at)
    update_document("user", {"_id": payload.user_id}, {}, inc={"total_challenges": 1})
    logger.info("Challenge %s abandoned", challenge_id)
    return challenge_out(ch, session)


@app.post("/api/challenges/{challenge_id}/expire")
def expire_challenge(challenge_id: str, payload: ChallengeAction):
    ch = owned_challenge(challenge_id, payload.user_id)
    session = refresh_challenge(ch)
    try:
        session.expire()
    except ChallengeStateError as e:
        raise HTTPException(409, str(e))
    return challenge_out(ch, session)


async def countdown_events(ch: dict, session: ChallengeSession, clock=utcnow, interval: float = 1.0):
    """Server-sent events for a running challenge, one per tick, ending on a terminal status."""
    async def reload():
        return await asyncio.to_thread(stored_status, ch)

    async for remaining in countdown(session, clock=clock, interval=interval, reload=reload):
        payload = {
            "status": session.status.value,
            "remaining_seconds": int(remaining.total_seconds()),
            "remaining_display": format_remaining(remaining),
            "urgency": urgency(remaining),
        }
        yield f"data: {json.dumps(payload)}\n\n"
    if session.status is ChallengeStatus.EXPIRED and ch["status"] != ChallengeStatus.EXPIRED.value:
        await asyncio.to_thread(mark_expired, ch)


@app.get("/api/challenges/{challenge_id}/countdown")
async def challenge_countdown(challenge_id: str):
    ch = await asyncio.to_thread(get_challenge_or_404, challenge_id)
    session = await asyncio.to_thread(refresh_challenge, ch)
    return StreamingResponse(countdown_events(ch, session), media_type="text/event-stream",
                             headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"})


@app.get("/api/challenges/{challenge_id}/match")
def challenge_match(challenge_id: str):
    match = require_db()["match"].find_one({"challenge_id": challenge_id})
    if not match:
        raise HTTPException(404, "Match not found")
    teacher = db["user"].find_one({"_id": match["teacher_id"]})
    result = out(match)
    result["teacher"] = progress.display_data(teacher) if teacher else None
    return result


@app.post("/api/matches/{match_id}/confirm")
def confirm_match(match_id: str, payload: ChallengeAction):
    match = require_db()["match"].find_one({"_id": oid(match_id)})
    if not match:
        raise HTTPException(404, "Match not found")
    if match["teacher_id"] != payload.user_id:
        raise HTTPException(403, "Only the teacher can confirm this match")
    update_document("match", {"_id": match["_id"]}, {"teacher_completed": True})
    return out(db["match"].find_one({"_id": match["_id"]}))


# Ratings
@app.post("/api/ratings")
def submit_rating(payload: RatingCreate):
    skill = get_skill_or_404(payload.skill_id)
    comment = (payload.comment or "").strip() or None
    rating = RatingSchema(
        **payload.model_dump(exclude={"comment"}),
        skill_title=skill.get("title"),
        teacher_id=skill.get("user_id"),
        comment=comment,
    )
    rating_id = create_document("rating", rating)

    count = skill.get("rating_count", 0)
    average = (skill.get("rating", 0) * count + payload.skill_rating) / (count + 1)
    update_document("skill", {"_id": skill["_id"]}, {"rating": round(average, 2), "rating_count": count + 1})
    create_document("event", EventSchema(user_id=payload.rater_id, name="rating_submitted",
                                         params={"skill_rating": payload.skill_rating,
                                                 "teacher_rating": payload.teacher_rating}))
    return {"id": rating_id, "rating": round(average, 2), "rating_count": count + 1}


# Reports
@app.post("/api/reports")
def create_report(payload: ReportCreate):
    if payload.reason not in REPORT_REASONS:
        raise HTTPException(400, "Invalid reason")
    report = ReportSchema(**payload.model_dump(exclude={"details"}), details=payload.details.strip())
    report_id = create_document("report", report)
    logger.info("Report %s filed against %s %s", report_id, payload.type, payload.target_id)
    return {"id": report_id, "status": "pending"}


# Admin
@app.get("/api/admin")
def admin_data(user_id: str):
    if not config.is_admin(user_id):
        raise HTTPException(403, "You don't have admin access.")
    database = require_db()
    reports = get_documents("report", newest_first=True)
    pending = [r for r in reports if r.get("status") == "pending"]
    return {
        "reports": [out(r) for r in reports],
        "stats": {
            "users": database["user"].count_documents({}),
            "skills": database["skill"].count_documents({}),
            "challenges": database["challenge"].count_documents({}),
            "pending_reports": len(pending),
        },
    }


@app.post("/api/admin/reports/{report_id}/resolve")
def resolve_report(report_id: str, payload: ReportResolve):
    if not config.is_admin(payload.user_id):
        raise HTTPException(403, "You don't have admin access.")
    report = require_db()["report"].find_one({"_id": oid(report_id)})
    if not report:
        raise HTTPException(404, "Report not found")
    update_document("report", {"_id": report["_id"]}, {"status": payload.action, "resolved_by": payload.user_id})
    return {"id": report_id, "status": payload.action}


# Notifications
@app.get("/api/notifications")
def list_notifications(user_id: str, limit: int = 50):
    return [out(n) for n in get_documents("notification", {"user_id": user_id}, limit=limit, newest_first=True)]


@app.get("/api/notifications/unread-count")
def unread_count(user_id: str):
    return {"unread": require_db()["notification"].count_documents({"user_id": user_id, "read": False})}


@app.post("/api/notifications/read-all")
def mark_all_read(payload: ChallengeAction):
    result = require_db()["notification"].update_many(
        {"user_id": payload.user_id, "read": False},
        {"$set": {"read": True, "updated_at": utcnow()}},
    )
    return {"updated": result.modified_count}


@app.post("/api/notifications/{notification_id}/read")
def mark_read(notification_id: str):
    notification = require_db()["notification"].find_one({"_id": oid(notification_id)})
    if not notification:
        raise HTTPException(404, "Notification not found")
    update_document("notification", {"_id": notification["_id"]}, {"read": True})
    return {"id": notification_id, "read": True}


# Analytics
@app.post("/api/events")
def track_event(payload: EventCreate):
    event_id = create_document("event", EventSchema(**payload.model_dump()))
    return {"id": event_id}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
