import math
from typing import Iterable, List, Optional, Sequence

from src.core.models import Candle


def _at(row: Sequence, idx: int):
    if idx < len(row) and row[idx] is not None:
        return row[idx]
    return 0


def to_candles(rows: Optional[Iterable[Sequence]]) -> List[Candle]:
    """Convert ccxt ``[ts, o, h, l, c, v]`` rows to ``Candle`` records.

    Missing or ``None`` entries default to 0; the timestamp is truncated
    toward zero. One candle per row, in input order.
    """
    candles = []
    for row in rows or []:
        candles.append(Candle(
            timestamp=math.trunc(float(_at(row, 0))),
            open=float(_at(row, 1)),
            high=float(_at(row, 2)),
            low=float(_at(row, 3)),
            close=float(_at(row, 4)),
            volume=float(_at(row, 5)),
        ))
    return candles
