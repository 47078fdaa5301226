import os

APP_TITLE = "Dream Rhythm"
APPDATA_DIR = os.getenv("DREAM_RHYTHM_HOME") or os.path.join(
    os.getenv("APPDATA") or os.path.expanduser("~"), "DreamRhythm"
)

STORE_FILE = os.path.join(APPDATA_DIR, "dream_rhythm.json")

LOG_DIR = os.path.join(APPDATA_DIR, "logs")
LOG_FILE = os.path.join(LOG_DIR, "dream_rhythm.log")

# Storage keys
RECORDS_KEY = "sleepEntries"
STATS_KEY = "userStats"
SESSION_KEY = "activeSleepSession"
ONBOARDING_KEY = "hasCompletedOnboarding"

# Sleep goal
DEFAULT_SLEEP_GOAL = 8.0
MIN_SLEEP_GOAL = 4.0
MAX_SLEEP_GOAL = 12.0
GOAL_STEP = 0.5

# A night counts toward a streak at 80% of the goal
STREAK_THRESHOLD = 0.8
QUALITY_STARS = 5
DEFAULT_WINDOW_DAYS = 7
MONTH_WINDOW_DAYS = 30

MANUAL_MIN_HOURS = 1.0
MANUAL_MAX_HOURS = 12.0
MANUAL_STEP_HOURS = 0.5
MANUAL_QUICK_PICKS = (6.0, 7.0, 8.0, 9.0)

DEFAULT_BEDTIME = "22:00"
DEFAULT_WAKE_TIME = "07:00"

# Mini-game (time units are seconds)
GAME_WIDTH = 400
GAME_HEIGHT = 560
GAME_LIVES = 3
SPAWN_INTERVAL_SEC = 1.5
TICK_SEC = 1.0 / 60.0
FALL_DURATION_SEC = 4.0
SPAWN_MARGIN = 50.0
SPAWN_Y = -50.0
MOON_RADIUS = 30.0
BUBBLE_RADIUS = 20.0
MOON_BOTTOM_OFFSET = 100.0
SCORE_PER_STAR = 5
# Upper bound on ticks per advance() so a stalled frame cannot spiral
MAX_TICKS_PER_ADVANCE = 30

# Insights constellation shows at most this many stars
CONSTELLATION_MAX_STARS = 20

# UI
WINDOW_GEOMETRY = "440x760"
GAME_FRAME_MS = 16
SESSION_REFRESH_MS = 1000
