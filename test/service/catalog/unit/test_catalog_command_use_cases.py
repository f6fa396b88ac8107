"""
Unit tests for catalog write use cases

Every write must bump the namespaces whose cached bodies it changes, and a
failed bump must surface to the caller.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
import uuid_utils

from src.platform.exception.exceptions import BackendUnavailableError, NotFoundError
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.catalog.app.command.create_schedule_use_case import (
    CreateScheduleUseCase,
    PriceTierInput,
)
from src.service.catalog.app.command.create_trip_use_case import CreateTripUseCase
from src.service.catalog.app.command.update_trip_use_case import UpdateTripUseCase
from src.service.catalog.domain.entity.trip_entity import Trip
from src.service.catalog.domain.enum.trip_category import TripCategory


@pytest.fixture
def mock_trip_command_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.create_trip = AsyncMock(side_effect=lambda trip: trip)
    repo.update_trip = AsyncMock(side_effect=lambda trip: trip)
    repo.create_schedule = AsyncMock(side_effect=lambda schedule: schedule)
    return repo


@pytest.fixture
def mock_cache_invalidator() -> AsyncMock:
    invalidator = AsyncMock()
    invalidator.invalidate = AsyncMock(return_value={})
    return invalidator


@pytest.fixture
def existing_trip() -> Trip:
    return Trip.create(
        id=uuid_utils.uuid7(),
        title='Badagry Heritage Trip',
        description='Day trip to the Badagry slave route museum',
        category=TripCategory.TOUR,
        duration_minutes=480,
    )


def _create_trip_params() -> dict:
    return {
        'title': 'Lagos Lagoon Cruise',
        'description': 'Two hours around the lagoon at sunset',
        'category': TripCategory.TOUR,
        'duration_minutes': 120,
    }


@pytest.mark.unit
class TestCreateTripUseCase:
    @pytest.mark.asyncio
    async def test_create_trip_bumps_trips(
        self, mock_trip_command_repo, mock_cache_invalidator
    ) -> None:
        use_case = CreateTripUseCase(
            trip_command_repo=mock_trip_command_repo, cache_invalidator=mock_cache_invalidator
        )

        trip = await use_case.create_trip(**_create_trip_params())

        assert trip.title == 'Lagos Lagoon Cruise'
        mock_trip_command_repo.create_trip.assert_awaited_once()
        mock_cache_invalidator.invalidate.assert_awaited_once_with(CacheNamespace.TRIPS)

    @pytest.mark.asyncio
    async def test_failed_bump_surfaces_after_commit(
        self, mock_trip_command_repo, mock_cache_invalidator
    ) -> None:
        mock_cache_invalidator.invalidate.side_effect = BackendUnavailableError('Redis down')
        use_case = CreateTripUseCase(
            trip_command_repo=mock_trip_command_repo, cache_invalidator=mock_cache_invalidator
        )

        with pytest.raises(BackendUnavailableError):
            await use_case.create_trip(**_create_trip_params())

        mock_trip_command_repo.create_trip.assert_awaited_once()


@pytest.mark.unit
class TestUpdateTripUseCase:
    @pytest.mark.asyncio
    async def test_update_bumps_list_and_detail(
        self, mock_trip_command_repo, mock_cache_invalidator, existing_trip
    ) -> None:
        mock_trip_command_repo.get_trip.return_value = existing_trip
        use_case = UpdateTripUseCase(
            trip_command_repo=mock_trip_command_repo, cache_invalidator=mock_cache_invalidator
        )

        updated = await use_case.update_trip(
            trip_id=str(existing_trip.id), changes={'title': 'Badagry Heritage Tour'}
        )

        assert updated.title == 'Badagry Heritage Tour'
        mock_cache_invalidator.invalidate.assert_awaited_once_with(
            CacheNamespace.TRIPS, CacheNamespace.TRIP_DETAIL
        )

    @pytest.mark.asyncio
    async def test_unknown_trip_raises_without_bump(
        self, mock_trip_command_repo, mock_cache_invalidator
    ) -> None:
        mock_trip_command_repo.get_trip.return_value = None
        use_case = UpdateTripUseCase(
            trip_command_repo=mock_trip_command_repo, cache_invalidator=mock_cache_invalidator
        )

        with pytest.raises(NotFoundError):
            await use_case.update_trip(trip_id='missing', changes={'title': 'x'})

        mock_cache_invalidator.invalidate.assert_not_awaited()


@pytest.mark.unit
class TestCreateScheduleUseCase:
    @pytest.mark.asyncio
    async def test_create_schedule_bumps_three_namespaces(
        self, mock_trip_command_repo, mock_cache_invalidator, existing_trip
    ) -> None:
        mock_trip_command_repo.get_trip.return_value = existing_trip
        use_case = CreateScheduleUseCase(
            trip_command_repo=mock_trip_command_repo, cache_invalidator=mock_cache_invalidator
        )
        start = datetime.now(timezone.utc) + timedelta(days=3)

        schedule = await use_case.create_schedule(
            trip_id=str(existing_trip.id),
            start_time=start,
            end_time=start + timedelta(hours=8),
            capacity=30,
            departure_port='Marina Jetty',
            arrival_port='Badagry Jetty',
            price_tiers=[
                PriceTierInput(name='Standard', amount_kobo=1_500_000),
                PriceTierInput(name='VIP', amount_kobo=3_000_000, capacity=5),
            ],
        )

        assert schedule.trip_id == existing_trip.id
        assert [tier.name for tier in schedule.price_tiers] == ['Standard', 'VIP']
        mock_cache_invalidator.invalidate.assert_awaited_once_with(
            CacheNamespace.SCHEDULES, CacheNamespace.TRIPS, CacheNamespace.TRIP_DETAIL
        )

    @pytest.mark.asyncio
    async def test_unknown_trip(self, mock_trip_command_repo, mock_cache_invalidator) -> None:
        mock_trip_command_repo.get_trip.return_value = None
        use_case = CreateScheduleUseCase(
            trip_command_repo=mock_trip_command_repo, cache_invalidator=mock_cache_invalidator
        )
        start = datetime.now(timezone.utc) + timedelta(days=1)

        with pytest.raises(NotFoundError):
            await use_case.create_schedule(
                trip_id='missing',
                start_time=start,
                end_time=start + timedelta(hours=1),
                capacity=10,
                departure_port='A',
                arrival_port='B',
                price_tiers=[],
            )

        mock_trip_command_repo.create_schedule.assert_not_awaited()
