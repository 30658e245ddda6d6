# minutes/schemas/settings.py
"""
Pydantic schemas for the API key settings endpoints.
Unknown key names are rejected with 400 by the router, not by validation,
so the error message stays the same for every client.
"""
from pydantic import BaseModel, Field

class ApiKeyIn(BaseModel):
    key: str  # One of the ApiKey values, e.g. "GEMINI_API_KEY"
    value: str = Field(min_length=1)

class ApiKeyDelete(BaseModel):
    key: str
