from abc import ABC, abstractmethod
from datetime import timedelta


class MetricClient(ABC):  # pragma: no cover
    """Subset of the statsd.StatsClient interface used by the MetricService"""

    @abstractmethod
    def incr(self, stat: str, count: int = 1, rate: float = 1) -> None:
        pass

    @abstractmethod
    def timing(self, stat: str, delta: int | float | timedelta) -> None:
        pass

    @abstractmethod
    def gauge(self, stat: str, value: float, rate: float = 1, delta: bool = False) -> None:
        pass


class NoOpMetricClient(MetricClient):  # pragma: no cover
    """Used when no statsd daemon is configured, e.g. for local development and tests"""

    def incr(self, stat: str, count: int = 1, rate: float = 1) -> None:
        pass

    def timing(self, stat: str, delta: int | float | timedelta) -> None:
        pass

    def gauge(self, stat: str, value: float, rate: float = 1, delta: bool = False) -> None:
        pass
