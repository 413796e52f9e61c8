from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import Facility


class IFacilityRepository(ABC):
    """Port for read-only healthcare facility reference data."""

    @abstractmethod
    async def list_facilities(self) -> tuple[Facility, ...]:
        raise NotImplementedError
