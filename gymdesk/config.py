"""
Application Configuration
Load settings from environment variables
"""
import os
from dotenv import load_dotenv

load_dotenv()

# Database Configuration
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", 3306))
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "")
DB_NAME = os.getenv("DB_NAME", "gymdesk")

# Security Configuration
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", 24))

# Application Settings
APP_NAME = os.getenv("APP_NAME", "GymDesk API")
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

# Scheduler Settings
SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"
EXPIRY_SWEEP_HOUR = int(os.getenv("EXPIRY_SWEEP_HOUR", 0))
EXPIRY_SWEEP_MINUTE = int(os.getenv("EXPIRY_SWEEP_MINUTE", 5))

# Admin edit sessions
EDIT_SESSION_TTL_MINUTES = int(os.getenv("EDIT_SESSION_TTL_MINUTES", 30))
