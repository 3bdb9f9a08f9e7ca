from .schemas import RunDraft, RunDraftView
from .service import RunSubmissionService
from .store import DraftStore, StoredDraft

__all__ = ["DraftStore", "RunDraft", "RunDraftView", "RunSubmissionService", "StoredDraft"]
