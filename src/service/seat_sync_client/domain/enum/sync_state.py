from enum import StrEnum


class SyncState(StrEnum):
    INITIALIZING = 'initializing'
    SYNCED = 'synced'
    RECONNECTING = 'reconnecting'
    TERMINATED = 'terminated'
