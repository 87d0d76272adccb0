from dataclasses import dataclass

from culqi_backend.config.models import RetryConfig


@dataclass
class RetryContext:
    """Retry bookkeeping for a single logical call."""

    max_retries: int
    backoff: float
    backoff_factor: float
    retry_count: int = 0

    @staticmethod
    def from_config(config: RetryConfig) -> "RetryContext":
        return RetryContext(
            max_retries=config.max_retries,
            backoff=config.backoff,
            backoff_factor=config.backoff_factor,
        )

    @property
    def attempt(self) -> int:
        return self.retry_count + 1

    @property
    def exhausted(self) -> bool:
        return self.retry_count >= self.max_retries

    def next_delay(self) -> float:
        """
        Registers a retry and returns how long to wait before it,
        i.e. backoff * backoff_factor ** retry_count.
        """
        self.retry_count += 1
        return self.backoff * self.backoff_factor**self.retry_count
