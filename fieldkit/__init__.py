"""Field-device building blocks: URL parsing, JSON numbers, strings, writers, memory pools and a DHT20 driver."""

__version__ = "0.1.0"

__all__ = ["conversion", "dht20", "memory", "numbers", "strings", "url_parser", "writers"]