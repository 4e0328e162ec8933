# fieldkit

Small building blocks for tools that work with field devices. The package has no
dependencies outside the standard library.

## Modules

### `fieldkit.url_parser`

This is a strict, character-by-character URL splitter.

- `parse_url(url, is_connect=False)` returns a `ParsedUrl`. An invalid URL raises
  `UrlParseError`, a `ValueError` that carries the failing `position` when it is known.
  With `is_connect=True` the input must be a bare `host:port` pair.
- `ParsedUrl.get(field)` returns the text of a `UrlField`. The fields are `SCHEMA`,
  `HOST`, `PORT`, `PATH`, `QUERY`, `FRAGMENT` and `USERINFO`. `ParsedUrl.span(field)`
  returns `(offset, length)`. Both return `None` for an absent field.
- `ParsedUrl.port` holds the port as an `int`, and `ParsedUrl.fields` is the set of
  fields that are present.
- Ports above 65535 are rejected. Bracketed IPv6 hosts, with an optional zone id, are
  accepted.
- `parser_version()` returns the version packed as `major << 16 | minor << 8 | patch`.

```python
from fieldkit.url_parser import parse_url, UrlField

url = parse_url("http://example.com:8080/path?q=1")
url.get(UrlField.HOST)   # 'example.com'
url.port                 # 8080
url.get(UrlField.QUERY)  # 'q=1'
```

### `fieldkit.numbers`

This module parses JSON numbers and handles floats.

- `parse_number(text, enable_nan=False, enable_infinity=False)` parses a JSON number.
  Integers that fit in 64 bits come back as `int`, and everything else as `float`. Text
  that is not a number raises `ValueError`.
- `FloatFormat.FLOAT32` and `FloatFormat.FLOAT64` select single or double precision.
  Single precision is emulated by rounding each step to binary32.
- `forge_float(bits, fmt)` builds a float from its bit pattern.
- `positive_powers_of_ten(fmt)` and `negative_powers_of_ten(fmt)` return the
  binary-power tables.
- `make_float(mantissa, exponent, fmt)` computes `mantissa * 10**exponent` from those
  tables.
- `normalize(value, fmt)` scales large or small values towards `[1, 10)`. It returns the
  scaled value and the power of ten that was removed.
- `decompose_float(value, fmt)` splits a finite, non-negative float into `FloatParts`
  (`integral`, `decimal`, `exponent`, `decimal_places`) for printing.

```python
from fieldkit.numbers import parse_number

parse_number("12")    # 12
parse_number("-3")    # -3
parse_number("1.5")   # 1.5
```

### `fieldkit.strings`

- `JsonString(data, size, ownership)` is a sized string that may be null. Its ownership
  is `Ownership.LINKED` or `Ownership.COPIED`. It provides `is_null()`, `is_linked()` and
  `text`.
- `storage_policy(value)` returns `StoragePolicy.LINK` or `StoragePolicy.COPY`.
- `string_compare(a, b)` and `string_equals(a, b)` accept a `JsonString`, a `str`, or
  bytes, which are read as UTF-8.

### `fieldkit.writers`

These are byte sinks. Each `write(data)` takes one byte (an `int`) or a bytes-like
object and returns the number of bytes it accepted.

- `StaticStringWriter(capacity)` is bounded and drops any overflow.
- `StringWriter()` and `StreamWriter(stream)` accept everything.
- `BufferedStringWriter(capacity, max_length)` stages bytes in a small buffer. It can
  be used as a context manager, which flushes on exit.
- `DummyWriter` discards bytes but reports them as written.
- `CountingDecorator(writer)` totals accepted bytes in `count`.

```python
from fieldkit.writers import CountingDecorator, StringWriter

out = StringWriter()
counter = CountingDecorator(out)
counter.write(b"abc")
counter.count      # 3
out.getvalue()     # 'abc'
```

### `fieldkit.conversion`

- `arithmetic_compare(lhs, rhs)` returns `CompareResult.LESS`, `GREATER` or `EQUAL`.
  Integers are compared exactly. When a float is involved, both sides are compared as
  binary64.
- `can_convert_number(value, target)` checks whether a value fits a `NumberType`
  (`INT8` … `UINT64`, `FLOAT32`, `FLOAT64`).
- `convert_number(value, target)` converts the value, or returns `0` when it does not fit.

### `fieldkit.memory`

- `MemoryPool(capacity, slot_size, deduplicate)` stores NUL-terminated strings at the
  front and variant slots at the back. By default, equal strings are stored only once.
  It provides these operations:
  - `save_string`
  - `alloc_variant`
  - `free_zone`
  - `save_string_from_free_zone`
  - `can_alloc`
  - `clear`
  - `squash`
  - `mark_as_overflowed`
- `StringCopier(pool)` builds a string in the pool's free zone.
- `StringMover(buffer)` builds strings in place inside a `bytearray`.
- `make_string_storage(source, pool)` picks a `StringMover` for a `bytearray` and a
  `StringCopier` otherwise.
- `is_aligned(value)` and `add_padding(size)` work with 8-byte alignment.

### `fieldkit.dht20`

This is a driver for the DHT20 temperature and humidity sensor at I2C address `0x38`.

- `DHT20(bus, clock, sleep)` works over any object that provides the `I2CBus`
  operations `begin()`, `write(address, data)` and `read(address, count)`.
- `read()` returns `(temperature, humidity)`. The offsets in `temp_offset` and
  `hum_offset` are applied.
- Failures raise `DHT20Error`, whose `code` gives the cause: a read within a second of
  the previous one, a missing or all-zero frame, or a checksum mismatch.
- The lower-level steps are `request_data()`, `read_data()`, `convert()`,
  `read_status()` and `reset_sensor()`.
- `crc8(data)` is the sensor's CRC-8 (polynomial 0x31, initial value 0xFF).

## What the package does not do

- There is no JSON document model, parser or serializer. The package provides only the
  number, string, memory and writer pieces.
- There is no HTTP client.
- There is no concrete I2C bus. You supply one that implements `I2CBus`.
- There is no command-line program.

## Tests

```
pip install -e .[test]
pytest
```