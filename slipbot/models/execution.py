"""Execution result models for a single run."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple

from slipbot.models.order import Order, OrderRequest


class ExchangeName(str, Enum):
    MAX = "Max"
    BITO = "Bito"
    HOYA = "Hoya"


# Run order is fixed so notifications read the same way every time
EXCHANGE_RUN_ORDER: Tuple[ExchangeName, ...] = (
    ExchangeName.MAX,
    ExchangeName.BITO,
    ExchangeName.HOYA,
)


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one exchange's slip. success means no exception escaped."""

    exchange_name: ExchangeName
    success: bool


@dataclass(frozen=True)
class ExecutionSummary:
    """All results of one orchestrator run, in run order."""

    results: Tuple[ExecutionResult, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_empty(self) -> bool:
        return not self.results

    @property
    def successful(self) -> List[ExchangeName]:
        return [r.exchange_name for r in self.results if r.success]

    @property
    def failed(self) -> List[ExchangeName]:
        return [r.exchange_name for r in self.results if not r.success]


@dataclass
class SlipReport:
    """What a single round trip actually did."""

    exchange_name: ExchangeName
    buy_request: Optional[OrderRequest] = None
    buy_order: Optional[Order] = None
    acquired_volume: Decimal = Decimal(0)
    sell_request: Optional[OrderRequest] = None
    sell_order: Optional[Order] = None

    @property
    def sold(self) -> bool:
        return self.sell_order is not None
