"""Record and alert store collaborators."""
from store.base import AlertStore, ConfigurableRecordStore, RecordStore
from store.memory import InMemoryAlertStore, InMemoryRecordStore, is_open
from store.snapshot import load_snapshot, save_alerts

__all__ = [
    "AlertStore",
    "ConfigurableRecordStore",
    "RecordStore",
    "InMemoryAlertStore",
    "InMemoryRecordStore",
    "is_open",
    "load_snapshot",
    "save_alerts",
]
