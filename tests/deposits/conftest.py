import pytest
from deposits.coverage.coverage import ExecutionContext
from deposits.platform import set_platform
from deposits.platform.fake_adapter import FakePlatform
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def deposits_bed():
    from deposits.domain import deposits

    bed = DomainFixture(deposits)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(deposits_bed):
    with deposits_bed.domain_context():
        yield


@pytest.fixture()
def platform():
    """A fresh FakePlatform installed as the active adapter."""
    fake = FakePlatform(execution_context=ExecutionContext.USERINTERFACE)
    set_platform(fake)
    return fake
