import pytest

from tests._fixtures.sample_graphs import build_sample_graph


@pytest.fixture
def sample_graph():
    """Fact graph for the three-violation C sample."""
    return build_sample_graph()
