"""Exam-related constants shared across the core and the console front end."""

TOTAL_QUESTIONS: int = 40
TIME_LIMIT_SECONDS: int = 45 * 60
PASSING_SCORE_PERCENTAGE: int = 80
PASSING_QUESTIONS: int = 32

# Number of most recent question sets whose ids count as "used" when selecting.
RECENT_QUESTION_SET_WINDOW: int = 3
MAX_QUESTION_SET_HISTORY: int = 10

TIMER_WARNING_SECONDS: int = 300
TIMER_CRITICAL_SECONDS: int = 60
CLOCK_INTERVAL_SECONDS: float = 1.0

RECENT_RESULTS_COUNT: int = 5
TREND_RESULTS_LIMIT: int = 10
