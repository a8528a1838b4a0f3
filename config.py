import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./linkbd.db")

# Rotating API log lives here; defaults to ./logs next to the project
LOG_DIR = os.getenv("LOG_DIR")

SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))

DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))
