"""
Shared pytest fixtures: a throwaway catalog and a scripted web search.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from bidfinder.core.domain_models import Opportunity
from bidfinder.core.settings import Settings
from bidfinder.search.web_search import SearchCapability, SearchToolResponse
from bidfinder.storage.opportunity_store import OpportunityStore


class StubWebSearch(SearchCapability):
    """Returns a fixed response and records every prompt it receives."""

    def __init__(self, response: Optional[SearchToolResponse] = None, error: Optional[Exception] = None):
        self.response = response or SearchToolResponse()
        self.error = error
        self.prompts: List[str] = []

    async def invoke(self, prompt: str, tools_enabled: bool = True) -> SearchToolResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def store(tmp_path):
    return OpportunityStore(str(tmp_path / "catalog.db"))


@pytest.fixture
def settings(tmp_path):
    return Settings(db_path=str(tmp_path / "catalog.db"), search_timeout=5.0)


@pytest.fixture
def future():
    return datetime.now(timezone.utc).replace(microsecond=0) + timedelta(days=30)


def make_opportunity(**overrides) -> Opportunity:
    fields = {
        "source": "la_county",
        "source_id": "BID-1",
        "title": "Mental Health Outreach",
        "agency": "Department of Mental Health",
    }
    fields.update(overrides)
    return Opportunity(**fields)
