"""Quiz-related constants shared across the core and API layers."""

# Scoring unit: every correct answer is worth this many points, and pass
# thresholds are expressed in the same unit (e.g. 150 of 200 for two questions).
POINTS_PER_CORRECT_ANSWER: int = 100
OPTION_SEPARATOR: str = "|"
UINT64_MAX: int = 2**64 - 1
MIN_SINGLE_CHOICE_OPTIONS: int = 2
