from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Literal, Optional


YEAR_GROUPS = ("7", "8", "9", "10", "11", "12", "13")


class AuthLoginIn(BaseModel):
    username: str
    password: str


class InitialSubjectIn(BaseModel):
    subject_name: str
    exam_board: str


class AuthSignupIn(BaseModel):
    role: Literal["Student", "Teacher"]
    username: str = Field(min_length=3, max_length=120)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1, max_length=120)
    year_group: Optional[str] = None
    progress_emails: bool = True
    subjects: List[InitialSubjectIn] = Field(default_factory=list)
    title: Optional[str] = None
    surname: Optional[str] = None
    subject: Optional[str] = None
    classes: List[str] = Field(default_factory=list)

    @field_validator("username", "email", mode="before")
    @classmethod
    def normalize_identifier(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("year_group", mode="before")
    @classmethod
    def normalize_year_group(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        if value not in YEAR_GROUPS:
            raise ValueError("year_group must be between 7 and 13")
        return value


class UserOut(BaseModel):
    user_id: int
    username: str
    email: str
    first_name: str
    role: str


class SetEmailIn(BaseModel):
    new_email: str = Field(min_length=3, max_length=255)


class SetPasswordIn(BaseModel):
    old_password: str
    new_password: str = Field(min_length=8)


class SetProgressEmailsIn(BaseModel):
    new_state: str


class OkOut(BaseModel):
    ok: bool


class MarkNotificationsIn(BaseModel):
    notification_ids: List[int] = Field(default_factory=list)


class SendNotificationIn(BaseModel):
    recipients: List[int] = Field(default_factory=list)
    message: str = ""


class TaskIn(BaseModel):
    name: str = ""
    description: Optional[str] = None
    due: Optional[datetime] = None
    priority: str = ""
    subject: Optional[int] = None


class TaskCompleteIn(BaseModel):
    task_id: int


class CalendarEventIn(BaseModel):
    name: str = ""
    description: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    type: Optional[str] = None
    subject_id: Optional[int] = None
    location_type: Optional[int] = None
    location: Optional[str] = None


class AddSubjectIn(BaseModel):
    subject_name: str
    exam_board: str


class RemoveSubjectIn(BaseModel):
    subject_id: int


class SchoolworkEntryIn(BaseModel):
    schoolwork_name: str = ""
    schoolwork_description: Optional[str] = None
    due: Optional[datetime] = None
    issued: Optional[datetime] = None
    type: str = ""
    subject_id: Optional[int] = None


class CompleteSchoolworkIn(BaseModel):
    schoolwork_id: int
    category: int
    complete: bool


class DeleteSchoolworkIn(BaseModel):
    schoolwork_id: int


class JoinClassIn(BaseModel):
    join_code: str = ""


class ClassRefIn(BaseModel):
    class_id: int


class AddClassIn(BaseModel):
    class_name: str = ""


class TeacherSchoolworkEntryIn(BaseModel):
    class_id: int
    schoolwork_name: str = ""
    schoolwork_description: Optional[str] = None
    due: Optional[datetime] = None
    issued: Optional[datetime] = None
    type: str = ""
    course_id: Optional[int] = None


class DeleteTeacherSchoolworkIn(BaseModel):
    entry_id: int
    class_id: int


class EditSubjectLinkIn(BaseModel):
    course_name: str = ""
    exam_board: str = ""
    entry_id: int
    type: str = ""
    detail: Optional[int] = None


class SaveStatsIn(BaseModel):
    data_to_change: str = ""
    time_revised: int = Field(default=0, ge=0)
