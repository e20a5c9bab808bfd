"""
Test data generators for extraction benchmarks.

Creates streams of text with JSON values embedded in them:
- Single values of different sizes (small/large)
- Deeply nested values
- String-heavy values full of escapes and structural characters
- Chatty logs with many small values between lines of noise
"""

import json
import random
import string
from collections.abc import Iterator
from typing import Any

_ESCAPE_PROBABILITY = 0.3
_NOISE_LINES = [
    "INFO  worker-3 heartbeat ok",
    "DEBUG retrying request (attempt 2) after 250ms",
    "model: Sure! Here is the JSON you asked for:",
    "WARN  cache miss for key user:1234",
    "```json",
    "```",
]


def generate_stream(data_type: str) -> str:
    """Generates mixed text with embedded JSON for the specified type."""
    generators = {
        "small_object": _generate_small_object,
        "large_object": _generate_large_object,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
        "chatty_log": _generate_chatty_log,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def chunked(text: str, size: int) -> Iterator[str]:
    """Splits text into fixed-size chunks, as a streaming API delivers it."""
    for start in range(0, len(text), size):
        yield text[start : start + size]


def padded_array(n_items: int) -> str:
    """Builds one array value of roughly 40 * n_items characters."""
    return json.dumps([{"i": i, "pad": "x" * 24} for i in range(n_items)])


def _wrap(payload: str) -> str:
    return f"{random.choice(_NOISE_LINES)}\n{payload}\n{random.choice(_NOISE_LINES)}"


def _generate_small_object() -> str:
    """Generates a small JSON object (< 1KB) surrounded by noise."""
    data = {
        "id": 12345,
        "name": "Alice Johnson",
        "email": "alice@example.com",
        "active": True,
        "balance": 1234.56,
        "metadata": {"created": "2024-01-15T10:30:00Z", "source": "api"},
    }
    return _wrap(json.dumps(data))


def _generate_large_object() -> str:
    """Generates a large JSON object (> 10KB) surrounded by noise."""
    data = {
        "user_id": random.randint(1000000, 9999999),
        "transactions": [
            {
                "id": f"txn_{i:06d}",
                "amount": round(random.uniform(1.0, 1000.0), 2),
                "currency": random.choice(["USD", "EUR", "GBP", "JPY"]),
                "description": f"Payment for {_random_string(20)}",
                "status": random.choice(["completed", "pending", "failed"]),
            }
            for i in range(100)
        ],
        "activity_log": [
            {
                "action": random.choice(
                    ["login", "logout", "purchase", "view", "update"]
                ),
                "user_agent": f"Mozilla/5.0 ({_random_string(20)})",
            }
            for _ in range(50)
        ],
    }
    return _wrap(json.dumps(data))


def _generate_nested_structure() -> str:
    """Generates a deeply nested JSON structure surrounded by noise."""

    def create_nested_dict(depth: int) -> dict[str, Any]:
        if depth <= 0:
            return {"value": _random_string(10)}

        return {
            "level": depth,
            "items": [create_nested_dict(depth - 1) for _ in range(2)],
            "nested": create_nested_dict(depth - 1),
        }

    return _wrap(json.dumps(create_nested_dict(7)))


def _generate_string_heavy() -> str:
    """Generates JSON whose strings hold escapes, quotes and brackets."""

    def create_tricky_string() -> str:
        chars = []
        for _ in range(50):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(random.choice(['"', "\\", "{", "}", "[", "]"]))
            else:
                chars.append(
                    random.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    data = {
        "strings": [create_tricky_string() for _ in range(100)],
        "paths": [f"C:\\Users\\{_random_string(8)}\\file.txt" for _ in range(20)],
    }
    return _wrap(json.dumps(data))


def _generate_chatty_log() -> str:
    """Generates a log with many small values between lines of noise."""
    lines = []
    for i in range(200):
        lines.append(random.choice(_NOISE_LINES))
        lines.append(
            "event "
            + json.dumps({"id": i, "name": _random_string(8), "ok": i % 3 == 0})
        )
    return "\n".join(lines)


def _random_string(length: int) -> str:
    """Generates random string of specified length."""
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))
