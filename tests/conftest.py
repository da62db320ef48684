import pytest

from assets import AssetBundle


@pytest.fixture(scope="session")
def assets() -> AssetBundle:
    return AssetBundle.load()
