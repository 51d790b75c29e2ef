"""
Runtime configuration for the SkillSwap API.

Everything is read from the environment so the same build runs locally,
in CI and in the hosted environment.
"""
import os
from datetime import timedelta

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")

APP_ENV = os.getenv("APP_ENV", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 8000))

# Comma separated list of auth uids allowed into the admin endpoints
ADMIN_UIDS = [uid.strip() for uid in os.getenv("ADMIN_UIDS", "").split(",") if uid.strip()]

MEDIA_ROOT = os.getenv("MEDIA_ROOT", "media")
MEDIA_URL = os.getenv("MEDIA_URL", "/media")

PUSH_ENDPOINT = os.getenv("PUSH_ENDPOINT")
PUSH_SERVER_KEY = os.getenv("PUSH_SERVER_KEY")

CHALLENGE_TIME_LIMIT = timedelta(hours=int(os.getenv("CHALLENGE_TIME_LIMIT_HOURS", 24)))


def is_development() -> bool:
    return APP_ENV.lower() == "development"


def is_admin(user_id: str) -> bool:
    return is_development() or user_id in ADMIN_UIDS
