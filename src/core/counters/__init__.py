from src.core.counters.models import Counter
from src.core.counters.service import CounterService, increment_and_get

__all__ = ["Counter", "CounterService", "increment_and_get"]
