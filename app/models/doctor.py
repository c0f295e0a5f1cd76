"""
Doctor author model (read-only view of the doctors collection)
"""

from typing import Optional
from pydantic import BaseModel, Field, ConfigDict


class DoctorSummary(BaseModel):
    """The fields of a doctor profile shown next to the articles they wrote"""

    doctor_id: str = Field(..., alias="id")
    clerk_user_id: Optional[str] = Field(None, alias="clerkUserId")
    full_name: Optional[str] = Field(None, alias="fullName")
    qualification: Optional[str] = None
    specialty: Optional[str] = None
    avatar: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def firestore_doctor_to_model(doc: dict, doc_id: str) -> DoctorSummary:
    return DoctorSummary.model_validate({**doc, "id": doc_id})
