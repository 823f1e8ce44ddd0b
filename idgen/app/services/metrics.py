from typing import Dict


class MetricsService:
    def __init__(self) -> None:
        self._metrics: Dict[str, int] = {
            "id_requests_total": 0,
            "id_batch_requests_total": 0,
            "id_parse_requests_total": 0,
            "ids_generated_total": 0,
            "clock_moved_backwards_total": 0,
            "unauthorized_total": 0,
        }

    def inc(self, key: str, amount: int = 1) -> None:
        self._metrics[key] = self._metrics.get(key, 0) + amount

    def get(self, key: str) -> int:
        return self._metrics.get(key, 0)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._metrics)

    def to_prometheus(self) -> str:
        lines = [f"{key} {value}" for key, value in self._metrics.items()]
        return "\n".join(lines) + "\n"
