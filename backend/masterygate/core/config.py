import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

# Gating thresholds; course definitions may override both
MASTERY_THRESHOLD: float = float(os.getenv("MASTERY_THRESHOLD", "70"))
QUIZ_PASS_THRESHOLD: float = float(os.getenv("QUIZ_PASS_THRESHOLD", "75"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Database — stored in backend/data/
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))
PROJECT_DIR = os.path.abspath(os.path.join(BACKEND_DIR, ".."))

DATABASE_PATH: str = os.getenv(
    "DATABASE_PATH",
    os.path.join(BACKEND_DIR, "data", "progress.db"),
)

# Course definitions, one <course_id>.json per course
COURSES_DIR: str = os.getenv(
    "COURSES_DIR",
    os.path.join(PROJECT_DIR, "content", "courses"),
)
