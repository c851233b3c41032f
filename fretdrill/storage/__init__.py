from .schema import HISTORY_DTYPES, Preferences, SessionSummaryRow, StatRecordRow
from .store import FileStore, KeyValueStore, MemoryStore, load_json, save_json
from .preferences import PreferenceStore
from .history import append_sessions, init_history, load_history, smart_starting_fret

__all__ = [
    "HISTORY_DTYPES",
    "Preferences",
    "SessionSummaryRow",
    "StatRecordRow",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "load_json",
    "save_json",
    "PreferenceStore",
    "append_sessions",
    "init_history",
    "load_history",
    "smart_starting_fret",
]
