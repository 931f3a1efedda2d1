"""
Gemini response schemas describing a candidate profile.
"""
from typing import Any, Dict


def _description(as_list: bool) -> Dict[str, Any]:
    if as_list:
        return {"type": "ARRAY", "items": {"type": "STRING"}, "description": "List of bullet points"}
    return {"type": "STRING"}


def profile_response_schema(description_as_list: bool = False) -> Dict[str, Any]:
    """
    Schema for a structured profile.

    Extraction asks for free-text descriptions; the CV rewrite asks for
    bullet arrays. Both are normalized by migrate_profile() afterwards.
    """
    desc = _description(description_as_list)
    return {
        "type": "OBJECT",
        "properties": {
            "personalInfo": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "email": {"type": "STRING"},
                    "phone": {"type": "STRING"},
                    "linkedin": {"type": "STRING"},
                    "location": {"type": "STRING"},
                    "portfolio": {"type": "STRING"},
                },
                "required": ["name", "email"],
            },
            "summary": {"type": "STRING"},
            "experience": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "id": {"type": "STRING"},
                        "company": {"type": "STRING"},
                        "role": {"type": "STRING"},
                        "startDate": {"type": "STRING"},
                        "endDate": {"type": "STRING"},
                        "description": desc,
                    },
                    "required": ["company", "role", "description"],
                },
            },
            "education": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "id": {"type": "STRING"},
                        "institution": {"type": "STRING"},
                        "degree": {"type": "STRING"},
                        "major": {"type": "STRING"},
                        "startDate": {"type": "STRING"},
                        "endDate": {"type": "STRING"},
                        "description": desc,
                    },
                },
            },
            "skills": {"type": "ARRAY", "items": {"type": "STRING"}},
            "projects": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "id": {"type": "STRING"},
                        "name": {"type": "STRING"},
                        "description": desc,
                        "link": {"type": "STRING"},
                    },
                },
            },
            "certifications": {
                "type": "ARRAY",
                "items": {
                    "type": "OBJECT",
                    "properties": {
                        "id": {"type": "STRING"},
                        "name": {"type": "STRING"},
                        "issuer": {"type": "STRING"},
                        "startDate": {"type": "STRING"},
                        "expirationDate": {"type": "STRING"},
                        "credentialId": {"type": "STRING"},
                        "url": {"type": "STRING"},
                    },
                },
            },
        },
        "required": ["personalInfo", "experience", "education", "skills"],
    }
