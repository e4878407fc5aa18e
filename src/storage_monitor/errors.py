from __future__ import annotations


class StorageMonitorError(Exception):
    pass


class ParseError(StorageMonitorError, ValueError):
    pass


class WearParseError(ParseError):
    pass


class IoStatsParseError(ParseError):
    pass


class ConfigError(StorageMonitorError):
    pass


class StateStoreError(StorageMonitorError):
    pass
