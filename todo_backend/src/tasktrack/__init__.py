"""
Task Tracker backend package.

The FastAPI app lives in ``src.tasktrack.main``; the pure todo logic
(normalization, duplicate detection, filtering, sorting, pagination and
import reconciliation) has no web dependencies and can be used on its own.
"""

__version__ = "0.2.0"
