"""Service layer for UI and CLI consumers.

Exports:
    CollectionSession: Save-and-advance workflow over the core components.
    SaveResult: Outcome for one capture cell.
    BatchSaveResult: Outcome for one save action over a whole prompt.
    SessionStatus: Read-only status for display.
"""

from .session import BatchSaveResult, CollectionSession, SaveResult, SessionStatus

__all__ = ['CollectionSession', 'SaveResult', 'BatchSaveResult', 'SessionStatus']
