# perf_asgi_load_test.py
"""In-process load run against the snapshot endpoints.

Requests are paced round-robin over ``ENDPOINTS`` while the engine's feeds
keep ticking, and latency is reported per endpoint so a slow snapshot (the
50-sample price window, say) stands out from the cheap ones.
"""

import asyncio
import statistics
import sys
import time
from collections import defaultdict
from pathlib import Path
from typing import Dict, List

from httpx import AsyncClient, ASGITransport
from main import app

ENDPOINTS = ("/price", "/positions", "/forecasts", "/allocations", "/voice/history")


def summarize(latencies: List[float]) -> Dict[str, float]:
    if not latencies:
        return {"n": 0}
    ordered = sorted(latencies)
    return {
        "n": len(ordered),
        "mean_ms": statistics.fmean(ordered),
        "p95_ms": ordered[max(int(0.95 * len(ordered)) - 1, 0)],
        "max_ms": ordered[-1],
    }


async def run_asgi_load(qps: int = 100, duration_s: int = 10):
    latencies: Dict[str, List[float]] = defaultdict(list)
    errors: Dict[str, int] = defaultdict(int)

    async with app.router.lifespan_context(app):
        engine = app.state.engine
        ticks_before = engine.price_feed.ticks
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            start = time.perf_counter()
            for i in range(qps * duration_s):
                delay = start + (i + 1) / qps - time.perf_counter()
                if delay > 0:
                    await asyncio.sleep(delay)
                path = ENDPOINTS[i % len(ENDPOINTS)]
                t0 = time.perf_counter()
                r = await client.get(path)
                if r.status_code == 200:
                    latencies[path].append((time.perf_counter() - t0) * 1000.0)
                else:
                    errors[path] += 1
            elapsed = time.perf_counter() - start
        price_ticks = engine.price_feed.ticks - ticks_before

    return {
        "elapsed_s": elapsed,
        "price_ticks": price_ticks,
        "endpoints": {p: dict(summarize(latencies[p]), errors=errors[p]) for p in ENDPOINTS},
    }


async def main(out_path: str = "docs/perf_note.txt"):
    res = await run_asgi_load()
    lines = [
        "==== Snapshot Perf Note ====",
        f"elapsed_s: {res['elapsed_s']:.2f}  price ticks during run: {res['price_ticks']}",
    ]
    for path, stats in res["endpoints"].items():
        lines.append(f"{path}: " + ", ".join(
            f"{k}={v:.3f}" if isinstance(v, float) else f"{k}={v}" for k, v in stats.items()))
    note = "\n".join(lines)
    print(note)
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(note + "\n")


if __name__ == "__main__":
    asyncio.run(main(*sys.argv[1:2]))
