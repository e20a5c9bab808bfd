"""
Benchmark suite for surfing extraction performance.

Measures boundary scanning throughput on JSON embedded in noisy text, the
cost of typed streaming with different decoder backends:
- Python standard library json
- orjson (C-optimized)
- ujson (ultra-fast JSON)

and the memory held by the scanner while values of growing size pass
through it.
"""
