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
"""Field schemas for every inbound request type.

Schemas are declared once per request type and shared by all requests.
Field names follow the JSON wire format.
"""

from types import MappingProxyType

from interview_engine.schemas.validation import FieldSchema

# Letters, spaces and common punctuation in a job title
JOB_POSITION_PATTERN = r"^[A-Za-z\s\-./,&()+#]+$"

INTERVIEW_REQUEST_SCHEMA = MappingProxyType(
    {
        "jobPosition": FieldSchema(
            type="string", required=True, min_length=2, max_length=100, pattern=JOB_POSITION_PATTERN
        ),
        "jobDesc": FieldSchema(type="string", required=True, min_length=10, max_length=1000),
        "jobExperience": FieldSchema(type="number", required=True, min=0, max=80),
    }
)

FEEDBACK_PROMPT_SCHEMA = MappingProxyType(
    {
        "prompt": FieldSchema(type="string", required=True, min_length=10, max_length=5000),
    }
)

FEEDBACK_ANSWER_SCHEMA = MappingProxyType(
    {
        "mockIdRef": FieldSchema(type="string", required=True, min_length=1, max_length=100),
        "userAnswer": FieldSchema(type="string", required=True, min_length=5, max_length=5000),
        "question": FieldSchema(type="string", required=False, min_length=1, max_length=1000),
    }
)

SAVE_ANSWER_SCHEMA = MappingProxyType(
    {
        "mockIdRef": FieldSchema(type="string", required=True, min_length=1, max_length=100),
        "question": FieldSchema(type="string", required=True, min_length=5, max_length=1000),
        "userAnswer": FieldSchema(type="string", required=True, min_length=1, max_length=5000),
        "correctAnswer": FieldSchema(type="string", required=False, max_length=5000),
        "feedback": FieldSchema(type="string", required=False, max_length=5000),
        "rating": FieldSchema(type="number", required=False, min=1, max=10),
        "isSkipped": FieldSchema(type="string", required=False, pattern=r"^(true|false)$"),
    }
)

# Upper bounds applied by the sanitizer after validation, per field
SANITIZE_MAX_LENGTHS = MappingProxyType(
    {
        "jobPosition": 100,
        "jobDesc": 1000,
        "prompt": 5000,
        "mockIdRef": 100,
        "userAnswer": 5000,
        "question": 1000,
        "correctAnswer": 5000,
        "feedback": 5000,
    }
)
