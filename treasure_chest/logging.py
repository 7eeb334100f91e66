"""
Stream handler setup for scripts and test entry points that want to see the log output of this package.

The library itself never configures logging - it only emits records via ``logging.getLogger(__name__)``.  Cache hits,
misses, and manual overrides are logged at level 9, which is only visible with ``verbosity >= 3``.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from logging import LogRecord, Logger, Filter, Formatter, StreamHandler
from typing import Optional, Union, Collection, Mapping, TextIO

from tzlocal import get_localzone

__all__ = [
    'init_logging', 'register_level_names', 'LevelRangeFilter', 'DatetimeFormatter', 'ENTRY_FMT_DETAILED', 'get_levels'
]
log = logging.getLogger(__name__)

ENTRY_FMT_DETAILED = '%(asctime)s %(levelname)s %(threadName)s %(name)s %(lineno)d %(message)s'
DATE_FMT = '%Y-%m-%d %H:%M:%S %Z'
DATE_FMT_MILLIS = '%Y-%m-%d %H:%M:%S.%f %Z'

_NotSet = object()

Verbosity = Union[int, bool, None]
Names = Union[str, Collection[Optional[str]], None]


def init_logging(
    verbosity: Verbosity = 0,
    *,
    names: Names = _NotSet,
    names_add: Names = _NotSet,
    entry_fmt: str = None,
    date_fmt: str = None,
    millis: bool = False,
    replace_handlers: bool = True,
    level_names: Mapping[int, str] = _NotSet,
    set_levels: Mapping[str, int] = None,
    streams: bool = True,
    stdout: TextIO = None,
    stderr: TextIO = None,
) -> list[Logger]:
    """
    Send records below WARNING to stdout, and records at WARNING or above to stderr.

    Verbosity controls the minimum level that reaches stdout: 0 -> INFO (20), 1 -> VERBOSE (19), 2 -> DEBUG (10),
    3 -> 9 (cache activity), and so on down to 0.

    :param verbosity: Higher values allow lower level records through to stdout
    :param names: Logger name(s) to configure.  None means the root logger.  By default, the ``__main__`` logger and
      this package's logger are configured, or the root logger when ``verbosity`` > 10.
    :param names_add: Logger name(s) to configure in addition to ``names``
    :param entry_fmt: Record format; defaults to ``'%(message)s'``, or :data:`ENTRY_FMT_DETAILED` when verbosity > 2
    :param date_fmt: strftime format for ``%(asctime)s``; ``%f`` is supported
    :param millis: Use :data:`DATE_FMT_MILLIS` as the default date format
    :param replace_handlers: Remove existing handlers from the configured loggers first
    :param level_names: Mapping of {level: name} to register; defaults to DBG_1-DBG_9, Lv_11-Lv_18, and VERBOSE (19)
    :param set_levels: Mapping of {logger name: level} to apply after the handlers are configured
    :param streams: Set to False to skip adding the stdout / stderr handlers
    :param stdout: Stream to use instead of :data:`sys.stdout`
    :param stderr: Stream to use instead of :data:`sys.stderr`
    :return: The loggers that were configured
    """
    register_level_names(_default_level_names() if level_names is _NotSet else level_names)

    loggers = [logging.getLogger(name) for name in _logger_names(names, names_add, verbosity)]
    for logger in loggers:
        logger.setLevel(logging.NOTSET)  # levels are enforced by the handlers
        if replace_handlers:
            logger.handlers = []

    root = logging.getLogger()
    if root in loggers:
        root.addHandler(logging.NullHandler())
    root.setLevel(logging.NOTSET)

    if streams:
        if not entry_fmt:
            entry_fmt = ENTRY_FMT_DETAILED if verbosity and verbosity > 2 else '%(message)s'
        formatter = DatetimeFormatter(entry_fmt, date_fmt or (DATE_FMT_MILLIS if millis else DATE_FMT))
        handlers = (
            _stream_handler('stdout', stdout or sys.stdout, stdout_level(verbosity), LevelRangeFilter(below=30)),
            _stream_handler('stderr', stderr or sys.stderr, logging.INFO, LevelRangeFilter(at_least=30)),
        )
        for handler in handlers:
            handler.setFormatter(formatter)
            for logger in loggers:
                logger.addHandler(handler)

    if set_levels:
        if not isinstance(set_levels, Mapping):
            raise TypeError(f'Invalid {set_levels=} - expected a mapping of logger names to levels')
        for name, level in set_levels.items():
            logging.getLogger(name).setLevel(level)

    return loggers


def stdout_level(verbosity: Verbosity) -> int:
    return logging.DEBUG + 2 - verbosity if verbosity else logging.INFO


def _stream_handler(name: str, stream: TextIO, level: int, level_filter: Filter) -> StreamHandler:
    handler = StreamHandler(stream)
    handler.name = name
    handler.setLevel(level)
    handler.addFilter(level_filter)
    return handler


def _logger_names(names: Names, names_add: Names, verbosity: Verbosity) -> set[Optional[str]]:
    if names is _NotSet:
        selected = {None} if verbosity and verbosity > 10 else {__name__.split('.')[0], '__main__'}
    else:
        selected = _as_name_set(names)
    if names_add is not _NotSet:
        selected |= _as_name_set(names_add)
    # Configuring the root logger in addition to any other logger would result in duplicate output
    return {None} if None in selected else selected


def _as_name_set(names: Names) -> set[Optional[str]]:
    if names is None or isinstance(names, str):
        return {names}
    return set(names)


def _default_level_names() -> dict[int, str]:
    level_names = {level: f'DBG_{level}' for level in range(1, 10)}
    level_names.update((level, f'Lv_{level}') for level in range(11, 19))
    level_names[19] = 'VERBOSE'
    return level_names


def register_level_names(level_names: Optional[Mapping[int, str]]):
    """Register the given level names, skipping any level or name that already has a registered counterpart."""
    if not level_names:
        return
    for level, name in level_names.items():
        if logging.getLevelName(level) == f'Level {level}' and not isinstance(logging.getLevelName(name), int):
            logging.addLevelName(level, name)


class LevelRangeFilter(Filter):
    """Allows records with ``at_least <= levelno < below``."""

    def __init__(self, at_least: int = 0, below: int = None):
        super().__init__()
        self.at_least = at_least
        self.below = below

    def filter(self, record: LogRecord) -> bool:
        if record.levelno < self.at_least:
            return False
        return self.below is None or record.levelno < self.below


class DatetimeFormatter(Formatter):
    """Formats ``%(asctime)s`` in the local timezone, with support for ``%f`` in the date format."""
    _local_tz = get_localzone()

    def formatTime(self, record: LogRecord, datefmt: str = None) -> str:
        dt = datetime.fromtimestamp(record.created, self._local_tz)
        if not datefmt:
            return self.default_msec_format % (dt.strftime(self.default_time_format), record.msecs)
        return dt.strftime(datefmt)


def get_levels(logger: Logger) -> list[str]:
    """Describe the level of the given logger and the level of each of its handlers, for troubleshooting."""
    describe = logging.getLevelName
    return [f'base: {logger.level} ({describe(logger.level)})'] + [
        f'{handler.name}: {handler.level} ({describe(handler.level)})' for handler in logger.handlers
    ]
