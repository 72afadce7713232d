from pydantic import BaseModel
from typing import Literal, Optional

SUBJECTS_TABLE = "subjects"
MATERIALS_TABLE = "materials"
NOTIFICATIONS_TABLE = "notifications"

class Subject(BaseModel):
    id: str
    name: str
    code: str
    icon: str = "📚"
    description: Optional[str] = None

class Material(BaseModel):
    id: str
    title: str
    type: str  # 'PDF', 'PPT', 'Image', ...
    file_url: str
    subject_id: str
    created_by: str
    pinned: bool = False
    folder: str = "General"
    downloads: int = 0
    description: str = ""
    file_size: int = 0
    created_at: Optional[str] = None

class Notification(BaseModel):
    id: str
    recipient_role: Literal["student", "all"] = "student"
    title: str
    message: str
    type: str = "info"  # 'material', 'game', 'info'
    read: bool = False
    link: Optional[str] = None
    created_at: Optional[str] = None

DEFAULT_SUBJECTS = [
    {"name": "DBMS", "code": "DBMS101", "icon": "🗄️", "description": "Database Management Systems"},
    {"name": "C Programming", "code": "CS101", "icon": "💻", "description": "Introduction to C"},
    {"name": "Web Technologies", "code": "WEB101", "icon": "🌐", "description": "HTML, CSS, JS"},
    {"name": "Mathematics", "code": "MATH101", "icon": "📐", "description": "Engineering Mathematics"},
    {"name": "Operating Systems", "code": "OS101", "icon": "⚙️", "description": "OS Concepts"},
    {"name": "TYL", "code": "TYL101", "icon": "🚀", "description": "Tie Your Laces (Soft Skills)"},
]
