import os
from dotenv import load_dotenv

# Load .env variables
load_dotenv()

# --- Well Status ---
# A well with no reading newer than this is shown as offline.
INACTIVITY_WINDOW_HOURS = float(os.getenv("WELL_INACTIVITY_WINDOW_HOURS", "2"))

# --- Forecasting ---
FORECAST_HORIZON_HOURS = int(os.getenv("FORECAST_HORIZON_HOURS", "12"))
FORECAST_MIN_POINTS = int(os.getenv("FORECAST_MIN_POINTS", "4"))
METRICS_HISTORY_WINDOW_HOURS = float(os.getenv("METRICS_HISTORY_WINDOW_HOURS", "24"))

# --- Route Planning ---
EARTH_RADIUS_KM = 6371.0
# Crude average road speed used for the travel-time estimate
AVERAGE_SPEED_KMH = float(os.getenv("ROUTE_AVERAGE_SPEED_KMH", "40"))
MAPS_DIRECTIONS_BASE_URL = "https://www.google.com/maps/dir/?api=1"

# --- Persistence (Mongo binding) ---
MONGO_URI = os.getenv("MONGO_URI")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "groundwater_operations")
WELLS_COLLECTION = os.getenv("WELLS_COLLECTION", "user_wells")
METRICS_COLLECTION = os.getenv("METRICS_COLLECTION", "well_metrics")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Optional file sink in addition to stdout
LOG_FILE = os.getenv("LOG_FILE")
