"""
Pydantic models for setoran submission requests.

Response bodies from the resource API are passed through untouched.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class SetoranItem(BaseModel):
    """One memorization component being submitted or removed."""

    id: Optional[str] = Field(None, description="Existing setoran id, required for deletes.")
    id_komponen_setoran: str = Field(..., min_length=1)
    nama_komponen_setoran: str = Field(..., min_length=1)


class SetoranRequest(BaseModel):
    """Body for creating or deleting setoran records of one student."""

    data_setoran: List[SetoranItem] = Field(..., min_length=1)
    tgl_setoran: Optional[date] = Field(
        None, description="Submission date; the server uses today when omitted."
    )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
