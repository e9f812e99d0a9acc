import pytest

from relts.timeseries import TimeSeries
from relts.types import EntryKind, ValueKind
from tests.mocks.storage import MockDictionaryRepository, MockValueRepository


@pytest.fixture
def location_repo():
    return MockDictionaryRepository(EntryKind.LOCATION)


@pytest.fixture
def parameter_repo():
    return MockDictionaryRepository(EntryKind.PARAMETER)


@pytest.fixture
def value_repo(location_repo, parameter_repo):
    return MockValueRepository(location_repo, parameter_repo)


@pytest.fixture
def series(location_repo, parameter_repo, value_repo):
    """Time series over in-memory repositories."""
    return TimeSeries(
        "test",
        location_repo,
        parameter_repo,
        value_repo,
        value_kind=ValueKind.FLOAT,
    )
