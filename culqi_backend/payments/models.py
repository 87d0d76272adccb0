from pydantic import BaseModel


class PaymentStats(BaseModel):
    total_payments: int = 0
    successful_payments: int = 0
    failed_payments: int = 0
    total_amount: float = 0.0

    def record_success(self, amount: float) -> None:
        self.total_payments += 1
        self.successful_payments += 1
        self.total_amount = round(self.total_amount + amount, 2)

    def record_failure(self) -> None:
        self.total_payments += 1
        self.failed_payments += 1

    @property
    def success_rate(self) -> float:
        if self.total_payments == 0:
            return 0.0

        return round(self.successful_payments / self.total_payments * 100, 2)
