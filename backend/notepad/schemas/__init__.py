from .auth import AdminConfig, SetupRequest, LoginRequest
from .note import NoteSave, NoteSaved, NoteContent, NoteListItem, NoteList
from .share import (
    ShareDescriptor, ShareCreate, ShareCreated, ShareInfo, ShareList, ShareBatchDelete,
    ResolveState, ShareResolution,
)
