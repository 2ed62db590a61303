"""
Property-based tests for key naming and reply parsing.

Key Test Areas:
- logical_key agrees with the ``_[0-9]+`` end-of-string pattern
- every in-range integer reply round-trips to its queue length
- replies without the error keyword never raise unless empty
"""

import re

from hypothesis import given
from hypothesis import strategies as st

from mqdepth.core.errors import ProtocolError
from mqdepth.core.keys import derive_tags, logical_key
from mqdepth.core.protocol import INT64_MAX, INT64_MIN, parse_reply

SHARD_PATTERN = re.compile(r"_[0-9]+\Z")

queue_names = st.text(alphabet="ab:_-09", max_size=20)


@given(queue_names)
def test_logical_key_matches_pattern(name):
    if SHARD_PATTERN.search(name):
        expected = name[: name.rindex("_")]
    else:
        expected = name
    assert logical_key(name) == expected


@given(queue_names)
def test_logical_key_is_a_prefix_of_real_key(name):
    tags = derive_tags(name, 0, "localhost:6379")
    assert tags.real_key == name
    assert name.startswith(tags.key)


@given(st.text(alphabet="abc_", min_size=1, max_size=10), st.integers(0, 10**6))
def test_shard_suffix_always_stripped(base, shard):
    assert logical_key(f"{base}_{shard}") == base


@given(st.integers(min_value=0, max_value=2**31))
def test_db_tag_is_decimal_string(db):
    assert derive_tags("q", db, "h:1").db == str(db)


@given(st.integers(min_value=INT64_MIN, max_value=INT64_MAX))
def test_integer_reply_round_trips(length):
    assert parse_reply(f":{length}\r\n").length == length


@given(st.text(max_size=30))
def test_parse_reply_only_raises_for_empty_or_error(line):
    try:
        reply = parse_reply(line)
    except ProtocolError:
        assert "ERR" in line or not line.strip()
    else:
        assert line.strip() and "ERR" not in line
        if not line.strip().startswith(":"):
            assert reply.length is None
