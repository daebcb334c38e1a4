from typing import Optional, List
from pydantic import BaseModel
from datetime import datetime

class NoteSave(BaseModel):
    id: Optional[str] = None
    code: Optional[str] = None

class NoteSaved(BaseModel):
    success: bool = True
    id: str

class NoteContent(BaseModel):
    code: str

class NoteListItem(BaseModel):
    key: str
    size: int
    uploaded: Optional[datetime] = None

class NoteList(BaseModel):
    success: bool = True
    files: List[NoteListItem]
