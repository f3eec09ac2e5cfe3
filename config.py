"""Global configuration for the reminder notebook."""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Calendar days are computed in this zone
NOTEBOOK_TIMEZONE = os.getenv("NOTEBOOK_TIMEZONE", "Europe/Istanbul")

# Storage
NOTEBOOK_DATA_DIR = Path(
    os.getenv("NOTEBOOK_DATA_DIR", Path(os.getenv("LOCALAPPDATA", ".")) / "notebook")
)
NOTEBOOK_DB = NOTEBOOK_DATA_DIR / "notebook.db"
MEDIA_DIR = NOTEBOOK_DATA_DIR / "media"

# "sqlite" (local file) or "supabase" (remote key/value table)
NOTEBOOK_PERSISTENCE = os.getenv("NOTEBOOK_PERSISTENCE", "sqlite").lower()

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Optional push target for fired reminders (e.g. an ntfy topic URL)
NOTEBOOK_WEBHOOK_URL = os.getenv("NOTEBOOK_WEBHOOK_URL")

# Logging
LOG_DIR = NOTEBOOK_DATA_DIR / "logs"
LOG_DIR.mkdir(parents=True, exist_ok=True)
