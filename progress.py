"""
XP, levels, streaks and achievements for user profiles.

All functions work on plain profile dicts and return the fields to $set,
so routes can write them back in a single update.
"""
from datetime import datetime
from typing import Optional

from challenge import as_utc, utcnow

XP_PER_LEVEL = 500
LEARNED_XP = 50
TAUGHT_XP = 30

ACHIEVEMENTS = [
    {"id": "first_swap", "title": "First Swap", "description": "Complete your first skill swap",
     "icon": "🎯", "field": "skills_learned", "target": 1},
    {"id": "week_warrior", "title": "Week Warrior", "description": "Maintain a 7-day streak",
     "icon": "🔥", "field": "streak", "target": 7},
    {"id": "teacher", "title": "Teacher", "description": "Have 10 people learn your skills",
     "icon": "👨‍🏫", "field": "skills_taught", "target": 10},
    {"id": "master_learner", "title": "Master Learner", "description": "Learn 25 skills",
     "icon": "🎓", "field": "skills_learned", "target": 25},
]


def level_for(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def level_progress(xp: int) -> dict:
    into_level = xp % XP_PER_LEVEL
    return {
        "level": level_for(xp),
        "percent": round(into_level / XP_PER_LEVEL * 100, 1),
        "xp_to_next": XP_PER_LEVEL - into_level,
    }


def learned_credit(profile: dict) -> dict:
    xp = profile.get("xp", 0) + LEARNED_XP
    return {
        "skills_learned": profile.get("skills_learned", 0) + 1,
        "xp": xp,
        "level": level_for(xp),
        "total_challenges": profile.get("total_challenges", 0) + 1,
        "completed_challenges": profile.get("completed_challenges", 0) + 1,
    }


def taught_credit(profile: dict) -> dict:
    xp = profile.get("xp", 0) + TAUGHT_XP
    return {
        "skills_taught": profile.get("skills_taught", 0) + 1,
        "xp": xp,
        "level": level_for(xp),
    }


def streak_update(profile: dict, now: Optional[datetime] = None) -> dict:
    """
    Same day: nothing changes (empty dict). Next day: streak + 1.
    Anything longer, or no previous activity: streak restarts at 1.
    """
    now = as_utc(now or utcnow())
    last: Optional[datetime] = profile.get("last_active_date")
    streak = profile.get("streak", 0)
    if last is None:
        return {"streak": 1, "last_active_date": now}

    days_since = (now - as_utc(last)).days
    if days_since == 0:
        return {}
    if days_since == 1:
        streak += 1
    else:
        streak = 1
    return {"streak": streak, "last_active_date": now}


def achievements(profile: dict) -> list:
    result = []
    for a in ACHIEVEMENTS:
        value = profile.get(a["field"], 0)
        unlocked = value >= a["target"]
        result.append({
            "id": a["id"],
            "title": a["title"],
            "description": a["description"],
            "icon": a["icon"],
            "unlocked": unlocked,
            "progress": 1.0 if unlocked else round(value / a["target"], 2),
        })
    return result


def display_data(profile: Optional[dict]) -> dict:
    profile = profile or {}
    return {
        "name": profile.get("name") or "Anonymous",
        "avatar": profile.get("avatar") or "👤",
        "level": profile.get("level") or 1,
        "streak": profile.get("streak") or 0,
        "skills_learned": profile.get("skills_learned") or 0,
        "skills_taught": profile.get("skills_taught") or 0,
        "xp": profile.get("xp") or 0,
    }
