"""
Request/response schemas for the opportunity API.

Field names are camelCase on the wire to match the web client.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bidfinder.core.domain_models import (
    GeographicPreference,
    ImportResult,
    Location,
    NaicsCode,
    RequesterProfile,
    SearchResponse,
    SearchResult,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    status: str
    catalog: str


class NaicsCodeIn(CamelModel):
    code: str
    label: Optional[str] = None


class LocationIn(CamelModel):
    city: Optional[str] = None
    county: Optional[str] = None
    state: Optional[str] = None


class SearchRequest(CamelModel):
    query: Optional[str] = None
    geographic_preference: Optional[str] = None
    naics_codes: List[Union[NaicsCodeIn, str]] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    location: Optional[LocationIn] = None
    source_filter: Optional[List[str]] = None

    def to_profile(self) -> RequesterProfile:
        codes = []
        for item in self.naics_codes:
            if isinstance(item, str):
                codes.append(NaicsCode(code=item))
            else:
                codes.append(NaicsCode(code=item.code, label=item.label))
        location = None
        if self.location is not None:
            location = Location(
                city=self.location.city,
                county=self.location.county,
                state=self.location.state,
            )
        return RequesterProfile(
            naics_codes=codes,
            certifications=list(self.certifications),
            geographic_preference=GeographicPreference.parse(self.geographic_preference),
            location=location,
        )


class OpportunityOut(CamelModel):
    id: str
    title: str
    agency: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    is_continuous: bool = False
    estimated_value: Optional[str] = None
    source: Optional[str] = None
    source_url: Optional[str] = None
    rfp_number: Optional[str] = None
    level: Optional[str] = None
    state: Optional[str] = None
    county: Optional[str] = None
    match_score: int
    match_level: str
    from_database: bool

    @classmethod
    def from_result(cls, result: SearchResult) -> "OpportunityOut":
        return cls(
            id=result.id,
            title=result.title,
            agency=result.agency,
            description=result.description,
            due_date=result.due_date,
            is_continuous=result.is_continuous,
            estimated_value=result.estimated_value,
            source=result.source,
            source_url=result.source_url,
            rfp_number=result.rfp_number,
            level=result.level,
            state=result.state,
            county=result.county,
            match_score=result.match_score,
            match_level=result.match_level.value,
            from_database=result.from_database,
        )


class SearchResponseOut(CamelModel):
    opportunities: List[OpportunityOut]
    search_method: str
    count: int
    searched_areas: List[str] = Field(default_factory=list)

    @classmethod
    def from_response(cls, response: SearchResponse) -> "SearchResponseOut":
        return cls(
            opportunities=[OpportunityOut.from_result(r) for r in response.opportunities],
            search_method=response.search_method,
            count=response.count,
            searched_areas=list(response.searched_areas),
        )


class ImportRequest(CamelModel):
    source: Optional[str] = None
    csv_data: Optional[str] = None


class ImportResponse(CamelModel):
    success: bool = True
    source: str
    imported: int
    deactivated: int = 0
    skipped: int = 0
    message: str = ""

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResponse":
        return cls(
            source=result.source,
            imported=result.imported,
            deactivated=result.deactivated,
            skipped=result.skipped,
            message=f"Successfully imported {result.imported} opportunities from {result.source}",
        )
