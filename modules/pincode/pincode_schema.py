from pydantic import BaseModel
from typing import Optional


class PincodeDetailsResponseModel(BaseModel):
    pincode: int
    city: str
    state: str
    district: Optional[str] = None
    country: str = "India"


class PincodeUploadSummaryModel(BaseModel):
    total_rows_in_file: int = 0
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: list = []
