# Copyright 2025 John Brosnihan
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""SQLAlchemy models for interviews and recorded answers.

Column names follow the existing table layout so that records written by
earlier clients remain readable.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from interview_engine.db import Base


class MockInterview(Base):
    """A generated mock interview.

    Attributes:
        id: Serial primary key
        mock_id: Public interview identifier
        json_mock_resp: Generated questions serialized as JSON
        job_position: Role the interview targets
        job_desc: Job description or tech stack
        job_experience: Years of experience, stored as text
        created_by: Actor that created the interview
        created_at: ISO-8601 creation timestamp
    """

    __tablename__ = "mockInterview"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    json_mock_resp: Mapped[str] = mapped_column("jsonMockResp", Text, nullable=False)
    job_position: Mapped[str] = mapped_column("jobPosition", String, nullable=False)
    job_desc: Mapped[str] = mapped_column("jobDesc", String, nullable=False)
    job_experience: Mapped[str] = mapped_column("jobExperience", String, nullable=False)
    created_by: Mapped[str] = mapped_column("createdBy", String, nullable=False, index=True)
    created_at: Mapped[str | None] = mapped_column("createdAt", String, nullable=True)
    mock_id: Mapped[str] = mapped_column("mockId", String, nullable=False, index=True)


class UserAnswer(Base):
    """A candidate's recorded answer to one interview question."""

    __tablename__ = "userAnswer"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mock_id_ref: Mapped[str] = mapped_column("mockIdRef", String, nullable=False, index=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    user_ans: Mapped[str | None] = mapped_column("UserAns", Text, nullable=True)
    correct_answer: Mapped[str | None] = mapped_column("correctanswer", Text, nullable=True)
    score: Mapped[str | None] = mapped_column(String, nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_email: Mapped[str | None] = mapped_column("userEmail", String, nullable=True)
    created_by: Mapped[str | None] = mapped_column("createdBy", String, nullable=True)
    created_at: Mapped[str | None] = mapped_column("createdAt", String, nullable=True)
    is_skipped: Mapped[str | None] = mapped_column("isSkipped", String, default="false")
