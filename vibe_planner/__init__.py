"""State synchronisation core and itinerary engine for the vibe travel planner."""

__version__ = "0.1.0"
