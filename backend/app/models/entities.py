from enum import Enum
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base


class UserRole(str, Enum):
    student = "Student"
    teacher = "Teacher"


class SchoolworkType(int, Enum):
    homework = 1
    test = 2


class LocationType(int, Enum):
    in_person = 1
    online = 2


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(120), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    first_name = Column(String(120), nullable=False)
    role = Column(String(16), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)


class UserSession(Base):
    __tablename__ = "sessions"

    token = Column(String(128), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    expires = Column(DateTime, nullable=False)


class Student(Base):
    __tablename__ = "students"

    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    year_group = Column(String(8), nullable=False)
    progress_emails = Column(Boolean, default=True, nullable=False)

    user = relationship("User")


class Teacher(Base):
    __tablename__ = "teachers"

    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    title = Column(String(16), nullable=False)
    surname = Column(String(120), nullable=False)
    subject = Column(String(120), nullable=True)

    user = relationship("User")

    @property
    def display_name(self) -> str:
        return f"{self.title} {self.surname}"


class Course(Base):
    __tablename__ = "courses"

    course_id = Column(Integer, primary_key=True, autoincrement=True)
    course_name = Column(String(160), nullable=False, index=True)
    course_description = Column(Text, nullable=True)
    exam_board = Column(String(80), nullable=False)
    qualification = Column(String(40), nullable=False)
    papers = Column(Text, nullable=True)
    final_year = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("course_name", "exam_board", "qualification", name="uq_courses_name_board_qual"),
    )


class ExamDate(Base):
    __tablename__ = "exam_dates"

    exam_date_id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False, index=True)
    exam_date = Column(DateTime, nullable=False)
    type = Column(String(80), nullable=True)


class Subject(Base):
    __tablename__ = "subjects"

    subject_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.course_id"), nullable=False)
    teacher_name = Column(String(160), nullable=True)

    course = relationship("Course")


class Task(Base):
    __tablename__ = "tasks"

    task_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    task_name = Column(String(200), nullable=False)
    task_description = Column(Text, nullable=True)
    due = Column(DateTime, nullable=True)
    priority = Column(String(16), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.subject_id", ondelete="SET NULL"), nullable=True)


class CalendarEvent(Base):
    __tablename__ = "calendar_events"

    event_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    event_name = Column(String(200), nullable=False)
    event_description = Column(Text, nullable=True)
    event_start = Column(DateTime, nullable=False)
    event_end = Column(DateTime, nullable=False)
    type = Column(String(40), nullable=True)
    subject_id = Column(Integer, ForeignKey("subjects.subject_id", ondelete="SET NULL"), nullable=True)
    location_type = Column(Integer, nullable=False, default=0)
    location = Column(String(255), nullable=True)


class Schoolwork(Base):
    __tablename__ = "schoolwork"

    schoolwork_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Integer, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    due = Column(DateTime, nullable=False)
    issued = Column(DateTime, nullable=False)
    schoolwork_name = Column(String(200), nullable=False)
    schoolwork_description = Column(Text, nullable=True)
    subject_id = Column(Integer, ForeignKey("subjects.subject_id", ondelete="SET NULL"), nullable=True)

    subject = relationship("Subject")


class SchoolClass(Base):
    __tablename__ = "classes"

    class_id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, ForeignKey("teachers.user_id", ondelete="CASCADE"), nullable=False, index=True)
    class_name = Column(String(120), nullable=False)
    join_code = Column(String(32), nullable=False, unique=True, index=True)

    teacher = relationship("Teacher")


class ClassStudentLink(Base):
    __tablename__ = "class_student_link"

    class_id = Column(Integer, ForeignKey("classes.class_id", ondelete="CASCADE"), primary_key=True)
    student_id = Column(Integer, ForeignKey("students.user_id", ondelete="CASCADE"), primary_key=True)

    school_class = relationship("SchoolClass")


class ClassSchoolwork(Base):
    __tablename__ = "class_schoolwork"

    class_schoolwork_id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.class_id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.course_id"), nullable=True)
    type = Column(Integer, nullable=False)
    due = Column(DateTime, nullable=False)
    issued = Column(DateTime, nullable=False)
    schoolwork_name = Column(String(200), nullable=False)
    schoolwork_description = Column(Text, nullable=True)

    school_class = relationship("SchoolClass")


class SchoolworkStudentLink(Base):
    __tablename__ = "schoolwork_student_link"

    class_schoolwork_id = Column(
        Integer,
        ForeignKey("class_schoolwork.class_schoolwork_id", ondelete="CASCADE"),
        primary_key=True,
    )
    student_id = Column(Integer, ForeignKey("students.user_id", ondelete="CASCADE"), primary_key=True)
    completed = Column(Boolean, default=False, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    time_sent = Column(DateTime, default=datetime.utcnow, nullable=False)
    read = Column(Boolean, default=False, nullable=False)


class StudentStats(Base):
    __tablename__ = "student_stats"

    user_id = Column(Integer, ForeignKey("students.user_id", ondelete="CASCADE"), primary_key=True)
    streak = Column(Integer, default=0, nullable=False)
    tasks_completed = Column(Integer, default=0, nullable=False)
    schoolwork_completed = Column(Integer, default=0, nullable=False)
    past_papers_completed = Column(Integer, default=0, nullable=False)
    resources_downloaded = Column(Integer, default=0, nullable=False)
    pomodoro_time = Column(Integer, default=0, nullable=False)


class PastPaper(Base):
    __tablename__ = "past_papers"

    paper_id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False, index=True)
    resource_name = Column(String(200), nullable=False)
    series = Column(String(80), nullable=True)
    question_paper_location = Column(String(500), nullable=True)
    mark_scheme_location = Column(String(500), nullable=True)
    model_answers_location = Column(String(500), nullable=True)
    insert_location = Column(String(500), nullable=True)

    @property
    def file_locations(self) -> list[str | None]:
        return [
            self.question_paper_location,
            self.mark_scheme_location,
            self.model_answers_location,
            self.insert_location,
        ]


class SpecificationEntry(Base):
    __tablename__ = "specification_entries"

    entry_id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), nullable=False, index=True)
    topic = Column(String(40), nullable=False)
    topic_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    paper = Column(String(80), nullable=True)
    common = Column(Boolean, default=False, nullable=False)
    difficult = Column(Boolean, default=False, nullable=False)


class SpecificationSubjectLink(Base):
    __tablename__ = "specification_subject_link"

    entry_id = Column(
        Integer,
        ForeignKey("specification_entries.entry_id", ondelete="CASCADE"),
        primary_key=True,
    )
    subject_id = Column(Integer, ForeignKey("subjects.subject_id", ondelete="CASCADE"), primary_key=True)
    confidence = Column(Integer, default=0, nullable=False)
    sessions = Column(Integer, default=0, nullable=False)


class Resource(Base):
    __tablename__ = "resources"

    resource_id = Column(Integer, primary_key=True, autoincrement=True)
    resource_name = Column(String(200), nullable=False)
    resource_description = Column(Text, nullable=True)
    location = Column(String(500), nullable=False)
    type = Column(String(40), nullable=True)
    creator = Column(String(120), nullable=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CourseResourceLink(Base):
    __tablename__ = "course_resource_link"

    resource_id = Column(Integer, ForeignKey("resources.resource_id", ondelete="CASCADE"), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.course_id", ondelete="CASCADE"), primary_key=True)
    specification_entry_id = Column(
        Integer,
        ForeignKey("specification_entries.entry_id", ondelete="SET NULL"),
        nullable=True,
    )
