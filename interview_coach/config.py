"""
Interview Coach Configuration System
====================================

This file contains ALL configuration for the Interview Coach.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize the coach
# =============================================================================

# REQUIRED: either an AI Studio key or a Google Cloud project for Vertex AI
GEMINI_API_KEY = None
GOOGLE_CLOUD_PROJECT = None
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON
VERTEX_LOCATION = "us-central1"

# Storage
WORKDIR = "./_coach"
DB_BACKEND = "json"  # json | mongo
MONGO_URI = "mongodb://localhost:27017"
MONGO_DB_NAME = "interview_coach"

# Speech settings
TTS_VOICE = "Kore"

# Logging
LOG_FILE = "./_coach/coach.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# Models
FAST_MODEL = "gemini-2.5-flash"
QUALITY_MODEL = "gemini-3-pro-preview"
TTS_MODEL = "gemini-2.5-flash-preview-tts"

# LLM transport
GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
LLM_TIMEOUT = 120
CV_REWRITE_TIMEOUT = 300
LLM_RETRIES = 2
LLM_RETRY_DELAY = 2.0
TRANSIENT_STATUS_CODES = (408, 429, 500, 502, 503, 504)

# Audio
TTS_SAMPLE_RATE = 24000
CAPTURE_SAMPLE_RATE = 48000
TRANSCRIPTION_SAMPLE_RATE = 16000
CAPTURE_CHANNELS = 1
FRAME_MS = 30

# Interview
NOMINAL_QUESTION_COUNT = 7
MIN_ANSWER_CHARS = 5
PLACEHOLDER_ANSWER_ECHO = "this is my transcribed answer"
PLACEHOLDER_FEEDBACK = "Analyzing..."
DEFAULT_AUDIO_MIME = "audio/webm"

# User-facing messages
MSG_INVALID_ANSWER = "I couldn't hear a valid answer. Please try answering again."
MSG_TRANSCRIPTION_FAILED = "There was an error transcribing your answer. Please try again."
MSG_MIC_PERMISSION = (
    "Microphone access is required for the interview. "
    "Please allow access in your system settings and try again."
)
MSG_INTERVIEW_FAILED = "An error occurred during the interview. Please try again."

# Data store
APPROVED_USERS_COLLECTION = "approved_users"
PROFILES_COLLECTION = "user_profiles"
INTERVIEWS_COLLECTION = "interviews"
CV_ANALYSES_COLLECTION = "cv_analyses"
GENERATED_CVS_COLLECTION = "generated_cvs"
CONFIG_COLLECTION = "system_config"
ADMIN_SETTINGS_DOC = "admin_settings"
MAX_DOCUMENT_BYTES = 1024 * 1024
SESSION_FILE = "session.json"
PROFILE_SCHEMA_VERSION = 2


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    gemini_api_key: Optional[str] = None
    google_cloud_project: Optional[str] = None
    google_application_credentials: Optional[str] = None
    vertex_location: str = VERTEX_LOCATION
    workdir: str = WORKDIR
    db_backend: str = DB_BACKEND
    mongo_uri: str = MONGO_URI
    mongo_db_name: str = MONGO_DB_NAME
    tts_voice: str = TTS_VOICE
    llm_timeout: float = LLM_TIMEOUT
    cv_rewrite_timeout: float = CV_REWRITE_TIMEOUT
    llm_retries: int = LLM_RETRIES
    llm_retry_delay: float = LLM_RETRY_DELAY
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL

    @property
    def db_dir(self) -> str:
        return os.path.join(self.workdir, "db")

    @property
    def session_file(self) -> str:
        return os.path.join(self.workdir, SESSION_FILE)


def get_config() -> Config:
    """Load configuration."""
    api_key = os.getenv("GEMINI_API_KEY") or GEMINI_API_KEY
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS

    if not api_key and not project:
        raise ValueError("Please set GEMINI_API_KEY or GOOGLE_CLOUD_PROJECT in config.py or as environment variable")

    workdir = os.getenv("COACH_WORKDIR") or WORKDIR
    backend = (os.getenv("COACH_DB_BACKEND") or DB_BACKEND).lower()
    if backend not in ("json", "mongo"):
        raise ValueError(f"Unknown COACH_DB_BACKEND '{backend}' (expected json or mongo)")

    return Config(
        gemini_api_key=api_key,
        google_cloud_project=project,
        google_application_credentials=credentials,
        vertex_location=os.getenv("VERTEX_LOCATION") or VERTEX_LOCATION,
        workdir=workdir,
        db_backend=backend,
        mongo_uri=os.getenv("MONGO_URI") or MONGO_URI,
        mongo_db_name=os.getenv("MONGO_DB_NAME") or MONGO_DB_NAME,
        log_file=os.path.join(workdir, "coach.log"),
        log_level=os.getenv("COACH_LOG_LEVEL") or LOG_LEVEL,
    )
