"""
Extraction API tests.

Validates the streaming entry point, the one-shot string extractor and the
span iterators, including the difference between "no JSON found" as an
error and as an empty result.
"""

import io

import pytest

import surfing


def test_stream_extraction_with_mixed_text(log_stream: str) -> None:
    """
    Validates the streaming entry point writes only JSON to the sink.
    """
    parser = surfing.JSONParser()
    sink = io.StringIO()

    for piece in (log_stream[:30], log_stream[30:71], log_stream[71:]):
        surfing.extract_json_from_stream(parser, sink, piece)

    assert sink.getvalue() == (
        '{"id": 123, "data": {"nested": [1, 2, {"deep": true}]}}'
        '{"array": [4, 5, 6]}'
    )
    assert not parser.is_in_json


def test_stream_extraction_returns_completed_count() -> None:
    """
    Validates the entry point reports how many values the fragment closed.
    """
    parser = surfing.JSONParser()
    sink = io.StringIO()

    assert surfing.extract_json_from_stream(parser, sink, '{"a":') == 0
    assert surfing.extract_json_from_stream(parser, sink, "1} [2] [") == 2


def test_stream_extraction_propagates_sink_error(failing_sink: type) -> None:
    """
    Validates sink failures surface from the streaming entry point.
    """
    with pytest.raises(surfing.SinkError):
        surfing.extract_json_from_stream(
            surfing.JSONParser(), failing_sink(1), "[1]"
        )


@pytest.mark.parametrize(
    "text,expected",
    [
        ('Before {"key":"value"} After', '{"key":"value"}'),
        ('Start {"a":1}{"b":2} End', '{"a":1}{"b":2}'),
        ('{"a":1} noise {"b":2}', '{"a":1}{"b":2}'),
        ('Data: {"outer":{"inner":true}} Text', '{"outer":{"inner":true}}'),
        ("Array: [1,2,3] End", "[1,2,3]"),
        ('{"a":"}"}"', '{"a":"}"}'),
        ('{"a":"\\""}"', '{"a":"\\""}'),
    ],
)
def test_extract_json_to_string(text: str, expected: str) -> None:
    """
    Validates one-shot extraction concatenates values without separators.
    """
    assert surfing.extract_json_to_string(text) == expected


def test_extract_json_to_string_drops_unterminated_tail() -> None:
    """
    Validates a value left open at the end is not part of the result.
    """
    result = surfing.extract_json_to_string('{"done":1} then {"open": [')
    assert result == '{"done":1}'


@pytest.mark.parametrize(
    "text",
    ["", "plain text only", "closers } ] only", '{"never": "closed"'],
)
def test_extract_json_to_string_without_json_fails(text: str) -> None:
    """
    Validates one-shot string extraction treats zero values as an error.
    """
    with pytest.raises(surfing.NoJSONFoundError) as exc_info:
        surfing.extract_json_to_string(text)

    assert exc_info.value.doc == text
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.parametrize(
    "text",
    ["", "plain text only", '{"never": "closed"'],
)
def test_extract_json_spans_without_json_is_empty(text: str) -> None:
    """
    Validates span extraction returns an empty list instead of failing.
    """
    assert surfing.extract_json_spans(text) == []


def test_extract_json_spans_keeps_values_apart() -> None:
    """
    Validates each value is returned as its own span, in order.
    """
    spans = surfing.extract_json_spans('{"a":1} noise {"b":2} [3]')
    assert spans == ['{"a":1}', '{"b":2}', "[3]"]


def test_iter_json_spans_yields_as_values_close() -> None:
    """
    Validates spans are produced as soon as the chunk closing them arrives.
    """
    seen: list[str] = []

    def chunks():
        yield 'first {"id":'
        assert seen == []
        yield '1} second ["x",'
        assert seen == ['{"id":1}']
        yield '"y"] end'

    for span in surfing.iter_json_spans(chunks()):
        seen.append(span)

    assert seen == ['{"id":1}', '["x","y"]']


def test_iter_json_spans_decodes_split_utf8() -> None:
    """
    Validates byte chunks may split a multi-byte character.
    """
    payload = 'data: {"emoji":"🚀","city":"Zürich"} end'.encode()
    rocket = payload.index("🚀".encode())
    chunks = [payload[: rocket + 1], payload[rocket + 1 : rocket + 3],
              payload[rocket + 3 :]]

    spans = list(surfing.iter_json_spans(chunks))

    assert spans == ['{"emoji":"🚀","city":"Zürich"}']


def test_iter_json_spans_truncated_utf8_fails() -> None:
    """
    Validates a stream ending inside a character is reported.
    """
    chunks = [b'{"a":"b"} ', "é".encode()[:1]]
    with pytest.raises(UnicodeDecodeError):
        list(surfing.iter_json_spans(chunks))


def test_iter_json_spans_strict_brackets() -> None:
    """
    Validates scan options reach the underlying parser.
    """
    spans = list(
        surfing.iter_json_spans(["{]", "}"], strict_brackets=True)
    )
    assert spans == ["{]}"]


def test_iter_json_spans_text_chunk_inside_character_fails() -> None:
    """
    Validates a text chunk cannot cut into a held-back multi-byte character.
    """
    chunks = [b'{"a":"\xc3', '"}', b'\xa9"}']
    with pytest.raises(UnicodeDecodeError):
        list(surfing.iter_json_spans(chunks))


def test_iter_json_spans_mixed_chunks_keep_order() -> None:
    """
    Validates text and byte chunks are scanned in arrival order.
    """
    chunks = [b'{"a":"\xc3\xa9', '", "b": [', b"1]}"]
    assert list(surfing.iter_json_spans(chunks)) == ['{"a":"é", "b": [1]}']
