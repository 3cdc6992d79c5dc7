from sqlalchemy import Column, Integer, Text
from jobtracker.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    company = Column(Text, nullable=False)
    url = Column(Text)
    date_applied = Column(Text, nullable=False)
    status = Column(Text, nullable=False)
    work_model = Column(Text)
    salary_range = Column(Text)
    salary_frequency = Column(Text, default="Yearly")
    tech_stack = Column(Text)  # JSON array
    notes = Column(Text)
    screenshot_url = Column(Text)
    resume_url = Column(Text)
    cover_letter_url = Column(Text)
    attachments = Column(Text)  # JSON array of {name, url}
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
