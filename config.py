from pathlib import Path

# Base directory (where this file lives)
BASE_DIR = Path(__file__).parent

# Profile values used when the user has not recorded them yet
DEFAULT_PROFILE = {
    "weight_lbs": 180,
    "birth_date": "1990-01-01",
    "height_in": 67,
}

# Key of the profile weights are recorded against when none is given
DEFAULT_USER_KEY = "default"

# Upper bound accepted for a weight entry
MAX_WEIGHT_LBS = 1500

# Database (stored alongside code)
DATABASE_PATH = BASE_DIR / "weights.db"

# Dashboard
DASHBOARD_HOST = "0.0.0.0"
DASHBOARD_PORT = 5000

# Hosts allowed to embed the dashboard in an iframe
FRAME_ANCESTORS = ["https://*.clickup.com", "https://app.clickup.com"]
