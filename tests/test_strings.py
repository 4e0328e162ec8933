import pytest

from fieldkit.strings import (
    JsonString,
    Ownership,
    StoragePolicy,
    storage_policy,
    string_compare,
    string_equals,
)


def test_default_json_string_is_null_and_linked():
    s = JsonString()
    assert s.is_null()
    assert s.is_linked()
    assert len(s) == 0
    assert not s


def test_json_string_size_defaults_to_length():
    s = JsonString("hello")
    assert s.size == len("hello")
    assert s.text == "hello"
    assert bool(s)


def test_copied_ownership():
    s = JsonString("abc", ownership=Ownership.COPIED)
    assert not s.is_linked()
    assert s.ownership is Ownership.COPIED


def test_equality_ignores_ownership():
    assert JsonString("hello") == JsonString("hello", ownership=Ownership.COPIED)


def test_equality_uses_only_sized_prefix():
    assert JsonString("abc", 2) == JsonString("abx", 2)
    assert JsonString("abc", 3) != JsonString("abx", 3)


def test_null_strings_compare():
    assert JsonString() == JsonString()
    assert JsonString() != JsonString("")
    assert JsonString("") != JsonString()


def test_different_sizes_differ():
    assert JsonString("ab") != JsonString("abc")


def test_equality_with_plain_str():
    assert JsonString("xyz") == "xyz"
    assert JsonString("xyz", 2) == "xy"


def test_equal_strings_hash_equal():
    assert hash(JsonString("key")) == hash(JsonString("key", ownership=Ownership.COPIED))


def test_size_beyond_data_is_rejected():
    with pytest.raises(ValueError):
        JsonString("ab", 3)


def test_negative_size_is_rejected():
    with pytest.raises(ValueError):
        JsonString("ab", -1)


def test_storage_policy_follows_ownership():
    assert storage_policy(JsonString("a")) is StoragePolicy.LINK
    assert storage_policy(JsonString("a", ownership=Ownership.COPIED)) is StoragePolicy.COPY


def test_storage_policy_of_plain_values():
    assert storage_policy("text") is StoragePolicy.LINK
    assert storage_policy(b"text") is StoragePolicy.LINK
    assert storage_policy(bytearray(b"text")) is StoragePolicy.COPY


def test_storage_policy_rejects_non_strings():
    with pytest.raises(TypeError):
        storage_policy(42)


def test_compare_equal_strings():
    assert string_compare("abc", "abc") == 0
    assert string_compare(b"abc", "abc") == 0
    assert string_compare(JsonString("abcdef", 3), "abc") == 0


def test_compare_prefix_gives_minus_or_plus_one():
    assert string_compare("ab", "abc") == -1
    assert string_compare("abc", "ab") == 1


def test_compare_differing_character_sign():
    assert string_compare("abc", "abd") < 0
    assert string_compare("abd", "abc") > 0


@pytest.mark.parametrize("a,b", [("apple", "banana"), ("zz", "z"), ("", "x"), ("q", "q")])
def test_compare_is_antisymmetric(a, b):
    assert string_compare(a, b) == -string_compare(b, a)


def test_compare_null_raises():
    with pytest.raises(ValueError):
        string_compare(JsonString(), "a")


def test_compare_non_string_raises():
    with pytest.raises(TypeError):
        string_compare(3, "a")


def test_string_equals():
    assert string_equals("abc", JsonString("abc"))
    assert string_equals(bytearray(b"abc"), b"abc")
    assert not string_equals("abc", "abcd")
    assert not string_equals("abc", "abd")


def test_equals_decodes_utf8_bytes():
    assert string_equals("\u00e9", "\u00e9".encode("utf-8"))