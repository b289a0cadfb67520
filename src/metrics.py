"""In-process shop metrics built on the Python standard library.

Counters, gauges and histograms register themselves in a module-level
registry and can be exported in the Prometheus text exposition format
with :func:`generate_metrics_text`.  Label values are passed as keyword
arguments matching the label names given at construction, e.g.
``PURCHASE_ABORTED_TOTAL.inc(reason="PaymentDeclined")``.
"""

from collections import defaultdict
from threading import Lock
from typing import Dict, Iterable, List, Tuple


class Metric:
    """Base class for all metrics."""

    kind = "untyped"

    def __init__(self, name: str, description: str, label_names: Iterable[str]):
        self.name = name
        self.description = description
        self.label_names = list(label_names)
        self._lock = Lock()
        _METRIC_REGISTRY.append(self)

    def _key(self, labels: Dict[str, str]) -> Tuple[str, ...]:
        return tuple(str(labels.get(k, "")) for k in self.label_names)

    def _format_labels(self, label_values: Tuple[str, ...], **more: str) -> str:
        pairs = [f'{name}="{value}"' for name, value in zip(self.label_names, label_values)]
        pairs.extend(f'{name}="{value}"' for name, value in more.items())
        if not pairs:
            return ""
        return "{" + ",".join(pairs) + "}"

    def _header(self) -> List[str]:
        return [f"# HELP {self.name} {self.description}", f"# TYPE {self.name} {self.kind}"]

    def to_prometheus(self) -> List[str]:
        """Return a list of strings in Prometheus exposition format."""
        raise NotImplementedError


class Counter(Metric):
    """Monotonic counter.  ``inc()`` adds 1 unless an amount is given."""

    kind = "counter"

    def __init__(self, name: str, description: str, label_names: Iterable[str] = ()):
        super().__init__(name, description, label_names)
        self._values: Dict[Tuple[str, ...], float] = defaultdict(float)

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        if amount < 0:
            raise ValueError("Counters can only increase")
        with self._lock:
            self._values[self._key(labels)] += float(amount)

    def value(self, **labels: str) -> float:
        with self._lock:
            return self._values.get(self._key(labels), 0.0)

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, value in self._values.items():
                lines.append(f"{self.name}{self._format_labels(label_values)} {value}")
        return lines


class Gauge(Metric):
    """Value that may go up or down, e.g. a stock level."""

    kind = "gauge"

    def __init__(self, name: str, description: str, label_names: Iterable[str] = ()):
        super().__init__(name, description, label_names)
        self._values: Dict[Tuple[str, ...], float] = {}

    def set(self, value: float, **labels: str) -> None:
        with self._lock:
            self._values[self._key(labels)] = float(value)

    def value(self, **labels: str) -> float:
        with self._lock:
            return self._values.get(self._key(labels), 0.0)

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, value in self._values.items():
                lines.append(f"{self.name}{self._format_labels(label_values)} {value}")
        return lines


class Histogram(Metric):
    """Histogram with ascending bucket upper bounds and an implicit ``+Inf`` bucket."""

    kind = "histogram"

    def __init__(self, name: str, description: str, label_names: Iterable[str], buckets: Iterable[float]):
        super().__init__(name, description, label_names)
        self.buckets = sorted(float(b) for b in buckets)
        # counts[key][i] = observations falling in bucket i (non-cumulative)
        self._counts: Dict[Tuple[str, ...], List[int]] = defaultdict(lambda: [0] * len(self.buckets))
        self._sums: Dict[Tuple[str, ...], float] = defaultdict(float)
        self._totals: Dict[Tuple[str, ...], int] = defaultdict(int)

    def observe(self, value: float, **labels: str) -> None:
        key = self._key(labels)
        with self._lock:
            for idx, upper in enumerate(self.buckets):
                if value <= upper:
                    self._counts[key][idx] += 1
                    break
            self._totals[key] += 1
            self._sums[key] += float(value)

    def count(self, **labels: str) -> int:
        with self._lock:
            return self._totals.get(self._key(labels), 0)

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for key, total in self._totals.items():
                cumulative = 0
                for idx, upper in enumerate(self.buckets):
                    cumulative += self._counts[key][idx]
                    lines.append(f"{self.name}_bucket{self._format_labels(key, le=str(upper))} {cumulative}")
                lines.append(f"{self.name}_bucket{self._format_labels(key, le='+Inf')} {total}")
                lines.append(f"{self.name}_sum{self._format_labels(key)} {self._sums[key]}")
                lines.append(f"{self.name}_count{self._format_labels(key)} {total}")
        return lines


_METRIC_REGISTRY: List[Metric] = []


def generate_metrics_text() -> bytes:
    """Text exposition of every registered metric."""
    lines: List[str] = []
    for metric in _METRIC_REGISTRY:
        lines.extend(metric.to_prometheus())
    return "\n".join(lines).encode("utf-8")


# -----------------------------------------------------------------------------
# Shop metrics
# -----------------------------------------------------------------------------

# Wall-clock duration of a purchase transaction, labelled by outcome (committed/aborted)
PURCHASE_DURATION_SECONDS = Histogram(
    name="purchase_duration_seconds",
    description="Duration of purchase transactions in seconds",
    label_names=["outcome"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
)

PURCHASE_ABORTED_TOTAL = Counter(
    name="purchase_aborted_total",
    description="Aborted purchase transactions, labelled by reason",
    label_names=["reason"],
)

ORDERS_COMMITTED_TOTAL = Counter(
    name="orders_committed_total",
    description="Orders recorded after a successful payment",
)

REVENUE_TOTAL = Counter(
    name="revenue_total",
    description="Sum of amounts charged for committed orders",
)

STOCK_LEVEL = Gauge(
    name="stock_level",
    description="Pieces currently in stock, labelled by product id",
    label_names=["product"],
)
