"""Doctor search schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class DoctorSearchParams(BaseModel):
    """Query parameters for the doctor search."""

    skip: int = Field(default=0, ge=0, description="Number of records to skip")
    limit: int = Field(default=10, ge=1, le=100, description="Number of records to return")
    sort_by: str = Field(default="name")
    sort_order: Literal["asc", "desc"] = "asc"
    search_name: str | None = None
    search_address: str | None = None
    filter_speciality: str | None = None

    def to_query(self) -> dict[str, str | int]:
        """Backend query parameters; empty search filters are left out."""
        query: dict[str, str | int] = {
            "skip": self.skip,
            "limit": self.limit,
            "sort_by": self.sort_by,
            "sort_order": self.sort_order,
        }
        for name in ("search_name", "search_address", "filter_speciality"):
            value = getattr(self, name)
            if value:
                query[name] = value
        return query
