"""
Shared test utilities: recording metrics client, settable clock, and generated
identities.
"""

from chat.sechat.directory.mkm.identifier import NetworkType
from chat.sechat.directory.mkm.keys import PrivateKey
from chat.sechat.directory.mkm.meta import Meta

ATLAS = "atlas@ba2qpyoga4hdrunuuanys3peqtqcktslwjc3fchr"
ATLAS_NUMBER = 1169328369
NOVA = "nova@bd4ocz7afllrov4pvrys7ytyffg2r76q6l25w2e3"
NOVA_NUMBER = 4124797083


class MockMetricsClient:
    """Mock metrics client recording every call for assertions."""

    def __init__(self):
        self.gauges = {}
        self.increments = {}
        self.timers = {}
        self.closed = False

    def gauge(self, metric_name, value, tag_dict=None):
        """Record gauge metric."""
        self.gauges[metric_name] = {"value": value, "tags": tag_dict or {}}

    def increment(self, metric_name, value=1, tag_dict=None):
        """Record increment metric."""
        key = (metric_name, tuple(sorted((tag_dict or {}).items())))
        self.increments[key] = self.increments.get(key, 0) + value

    def timer(self, metric_name, value, tag_dict=None):
        """Record timer metric."""
        self.timers[metric_name] = {"value": value, "tags": tag_dict or {}}

    async def close(self):
        self.closed = True

    def count(self, metric_name, **tags):
        """Return the recorded count for a metric name and exact tag set."""
        return self.increments.get((metric_name, tuple(sorted(tags.items()))), 0)


class FakeClock:
    """Settable wall clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Identity:
    """A freshly generated identity: private key, Meta and handle."""

    def __init__(self, seed: str, kty: str = "RSA", network=NetworkType.main):
        self.private_key = PrivateKey.generate(kty=kty)
        self.meta = Meta.generate(self.private_key, seed=seed)
        self.identifier = self.meta.generate_identifier(network)
