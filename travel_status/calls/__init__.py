from travel_status.calls.session_store import CallSessionStore
from travel_status.calls.tracker import LiveCallTracker

__all__ = ["CallSessionStore", "LiveCallTracker"]
