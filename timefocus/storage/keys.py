"""Names of the records kept in the key-value store."""

SETTINGS = "settings"
TASKS = "tasks"
SESSION_HISTORY = "session-history"
USER_STATS = "user-stats"
USERNAME = "username"
JOIN_DATE = "join-date"
MOTIVATION_ENABLED = "motivation-enabled"
NOTIFICATIONS = "notifications"
