import pytest

from decision_companion.config import load_agents
from decision_companion.gateway import build_gateway
from decision_companion.ledger import ArtifactLedger, MemoryStore
from decision_companion.navigator import AutoAdvance
from decision_companion.workflow import WorkflowController

from helpers import FakeClock


@pytest.fixture
def agents():
    return load_agents()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_controller(agents, clock):
    def factory(gateway):
        return WorkflowController(gateway, agents, auto_advance=AutoAdvance(clock=clock))

    return factory


@pytest.fixture
def mock_controller(agents, clock):
    gateway = build_gateway("mock", agents)
    return WorkflowController(gateway, agents, auto_advance=AutoAdvance(clock=clock))


@pytest.fixture
def ledger():
    return ArtifactLedger(MemoryStore())
