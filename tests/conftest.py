"""
Pytest configuration and shared fixtures for surfing tests.

Provides immutable extraction cases and small sink helpers shared by the
scanner, extraction and typed decoding tests.
"""

from dataclasses import dataclass

import pytest


@dataclass(frozen=True)
class ExtractionCase:
    """
    Immutable container for one extraction scenario.

    Holds the mixed input text and the spans expected from it, in order.
    """

    description: str
    input_data: str
    expected_spans: tuple[str, ...] = ()


class FailingSink:
    """Sink that accepts a fixed number of writes, then raises."""

    def __init__(self, fail_after: int) -> None:
        self.fail_after = fail_after
        self.written: list[str] = []

    def write(self, s: str) -> int:
        if len(self.written) >= self.fail_after:
            raise OSError("sink is full")
        self.written.append(s)
        return len(s)


@pytest.fixture
def extraction_cases() -> list[ExtractionCase]:
    """
    Provides mixed-text inputs with the JSON values hidden in them.

    Covers nesting, structural characters inside strings, escapes, arrays,
    several values per input and inputs with no JSON at all.
    """
    return [
        ExtractionCase("empty object", "{}", ("{}",)),
        ExtractionCase(
            "nested object extracted whole",
            '{"a":{"b":1}}',
            ('{"a":{"b":1}}',),
        ),
        ExtractionCase(
            "closing brace inside string",
            '{"a":"}"}"',
            ('{"a":"}"}',),
        ),
        ExtractionCase(
            "escaped quote inside string",
            r'{"a":"\""}"',
            (r'{"a":"\""}',),
        ),
        ExtractionCase(
            "escaped backslash before closing quote",
            r'x {"path":"C:\\"} y',
            (r'{"path":"C:\\"}',),
        ),
        ExtractionCase(
            "two values separated by noise",
            '{"a":1} noise {"b":2}',
            ('{"a":1}', '{"b":2}'),
        ),
        ExtractionCase(
            "adjacent values",
            'Start {"a":1}{"b":2} End',
            ('{"a":1}', '{"b":2}'),
        ),
        ExtractionCase("array", "Array: [1,2,3] End", ("[1,2,3]",)),
        ExtractionCase(
            "array of objects with brackets in strings",
            'result: [{"k":"[x]"},{"k":"{y}"}] done',
            ('[{"k":"[x]"},{"k":"{y}"}]',),
        ),
        ExtractionCase(
            "non-ascii content",
            'Ответ: {"город":"Zürich 🚀"} конец',
            ('{"город":"Zürich 🚀"}',),
        ),
        ExtractionCase(
            "stray closers and quotes before value are ignored",
            'oops }] "quoted" {"ok":true}',
            ('{"ok":true}',),
        ),
        ExtractionCase("no json", "This text contains no JSON objects"),
        ExtractionCase("unterminated value", 'partial {"a": [1, 2'),
    ]


@pytest.fixture
def log_stream() -> str:
    """Provides a log excerpt mixing plain lines and nested JSON payloads."""
    return (
        "Some plain text {\"id\": 123, \"data\": "
        "{\"nested\": [1, 2, {\"deep\": true}]}}"
        " followed by more text"
        " and another {\"array\": [4, 5, 6]}"
    )


@pytest.fixture
def failing_sink() -> type[FailingSink]:
    """Provides a sink factory whose writes start failing after a limit."""
    return FailingSink
