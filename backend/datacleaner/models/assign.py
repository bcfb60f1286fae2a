"""Assignment activity tables that reference users directly or through submissions/grades."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from datacleaner.db.base import Base


class AssignSubmission(Base):
    __tablename__ = "assign_submission"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    status: Mapped[str | None] = mapped_column(String(30), nullable=True)


class AssignSubmissionFile(Base):
    __tablename__ = "assignsubmission_file"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    submission: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    numfiles: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AssignSubmissionOnlineText(Base):
    __tablename__ = "assignsubmission_onlinetext"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    submission: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    onlinetext: Mapped[str | None] = mapped_column(Text, nullable=True)


class AssignGrade(Base):
    __tablename__ = "assign_grades"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    assignment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    grade: Mapped[str | None] = mapped_column(String(20), nullable=True)


class AssignFeedbackComments(Base):
    __tablename__ = "assignfeedback_comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    grade: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    commenttext: Mapped[str | None] = mapped_column(Text, nullable=True)


class AssignFeedbackFile(Base):
    __tablename__ = "assignfeedback_file"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    grade: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    numfiles: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AssignFeedbackEditpdfAnnot(Base):
    __tablename__ = "assignfeedback_editpdf_annot"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gradeid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    pageno: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AssignFeedbackEditpdfCmnt(Base):
    __tablename__ = "assignfeedback_editpdf_cmnt"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gradeid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    rawtext: Mapped[str | None] = mapped_column(Text, nullable=True)


class AssignUserFlags(Base):
    __tablename__ = "assign_user_flags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    locked: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AssignUserMapping(Base):
    __tablename__ = "assign_user_mapping"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    assignment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AssignFeedbackEditpdfQuick(Base):
    __tablename__ = "assignfeedback_editpdf_quick"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    userid: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    rawtext: Mapped[str | None] = mapped_column(Text, nullable=True)
