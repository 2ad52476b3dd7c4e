"""
FILE: lumina/core/constants.py
PURPOSE: Constants used throughout the application
EXPORTS:
  - DEFAULT_CATEGORIES: Categories available on a fresh install
  - DEFAULT_CATEGORY: Category assigned when nothing matches
  - DEFAULT_FOLDER_NAME: Folder that adopts orphaned tasks on load
  - KEY_*: Storage keys for each persisted collection
  - POMODORO_SECONDS: Length of one focus session
  - BREAKDOWN_*: Fallback step lists for smart breakdown
DEPENDENCIES:
  - None (stdlib only)
NOTES:
  - Centralized constants to avoid magic strings
"""

# Categories
DEFAULT_CATEGORIES = ("Work", "Personal", "Health", "Learning", "Other")
DEFAULT_CATEGORY = "Other"

# Folders
DEFAULT_FOLDER_NAME = "MAIN_DATABASE"

# Storage keys (one JSON blob per key)
KEY_FOLDERS = "folders"
KEY_CATEGORIES = "categories"
KEY_NOTES = "notes"
KEY_TASKS = "tasks"
KEY_HISTORY = "history"

# Focus timer
POMODORO_SECONDS = 25 * 60

# Smart breakdown
BREAKDOWN_MIN_STEPS = 3
BREAKDOWN_MAX_STEPS = 5
BREAKDOWN_OFFLINE_STEPS = (
    "Analyze requirements",
    "Plan execution",
    "Execute task",
    "Review output",
)
BREAKDOWN_FAILURE_STEPS = (
    "Manual Step 1",
    "Manual Step 2",
    "Check Completion",
)
