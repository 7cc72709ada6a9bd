# src/pulse/domains/projects/constants.py
"""
Projects Domain Constants
"""

# Tracker states that close a milestone or subtask
TERMINAL_STATUSES = {"done", "completed", "canceled", "cancelled"}

# Subtask status counted as complete
DONE_STATUS = "Done"

# Subtask status when the tracker reports none
DEFAULT_SUBTASK_STATUS = "Backlog"

# Milestone status when the tracker reports none
DEFAULT_MILESTONE_STATUS = "Active"

# Due-soon window and at-risk threshold
DUE_SOON_DAYS = 10
AT_RISK_PROGRESS_THRESHOLD = 0.70

# Tracker text fields are capped at this length
MAX_DESCRIPTION_LENGTH = 255
