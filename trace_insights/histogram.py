"""Latency histogram over trace durations"""

import math
from typing import Iterable, List, Optional, Sequence

from .models import HistogramBucket, LatencyBand

DEFAULT_BAND_EDGES_MS: List[float] = [100, 500, 1000, 5000, 10000]


def _format_edge(ms: float, with_unit: bool = True) -> str:
    """100 -> "100ms", 1000 -> "1s", 2500 -> "2.5s"."""
    if ms < 1000:
        number, unit = f"{ms:g}", "ms"
    else:
        number, unit = f"{ms / 1000:g}", "s"
    return number + unit if with_unit else number


def _same_unit(low: float, high: float) -> bool:
    return (low < 1000) == (high < 1000)


def latency_bands(edges_ms: Sequence[float]) -> List[LatencyBand]:
    """Build labelled bands from ascending edges in milliseconds.

    N edges give N + 1 bands: below the first edge, between each pair, and an
    open-ended band above the last edge.

    >>> [b.label for b in latency_bands([100, 500, 1000])]
    ['<100ms', '100-500ms', '500ms-1s', '>1s']
    """
    edges = sorted(float(e) for e in edges_ms)
    if not edges:
        return [LatencyBand(label="all", min=0, max=None)]

    bands = [LatencyBand(label=f"<{_format_edge(edges[0])}", min=0, max=edges[0])]
    for low, high in zip(edges, edges[1:]):
        low_label = _format_edge(low, with_unit=not _same_unit(low, high))
        bands.append(
            LatencyBand(label=f"{low_label}-{_format_edge(high)}", min=low, max=high)
        )
    bands.append(LatencyBand(label=f">{_format_edge(edges[-1])}", min=edges[-1], max=None))
    return bands


DEFAULT_LATENCY_BANDS: List[LatencyBand] = latency_bands(DEFAULT_BAND_EDGES_MS)


def build_latency_histogram(
    durations_ms: Iterable[Optional[float]],
    bands: Sequence[LatencyBand] = DEFAULT_LATENCY_BANDS,
) -> List[HistogramBucket]:
    """Count trace durations per latency band.

    A duration lands in the first band with `min <= duration < max`; the last
    default band has no upper bound. Missing or NaN durations, and durations
    outside every band, are not counted.

    Parameters
    ----------
    durations_ms : Iterable[Optional[float]]
        Trace-level durations in milliseconds.
    bands : Sequence[LatencyBand]
        Bands to count into, in display order.

    Returns
    -------
    List[HistogramBucket]
        One bucket per band, in band order.
    """
    counts = [0] * len(bands)
    for duration in durations_ms:
        if duration is None or math.isnan(duration):
            continue
        for i, band in enumerate(bands):
            if band.contains(duration):
                counts[i] += 1
                break

    return [
        HistogramBucket(label=band.label, min=band.min, max=band.max, count=count)
        for band, count in zip(bands, counts)
    ]
