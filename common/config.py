#!/usr/bin/env python3
import sys
import json
import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from scrollterm import CommandAliasTable, ConfigError, Line, Span

LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

# Tag colors for log records pushed into a scrollback buffer
LEVEL_STYLES = {
    logging.DEBUG: 'bright_magenta',
    logging.INFO: 'bright_green',
    logging.WARNING: 'bright_yellow',
    logging.ERROR: 'bright_red',
    logging.CRITICAL: 'bright_red',
}

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class RobustFileHandler(logging.FileHandler):
    """FileHandler that gracefully handles flush errors on Windows"""

    def flush(self):
        """Flush the stream, catching OSError on Windows file handles"""
        try:
            super().flush()
        except OSError as e:
            # Windows can fail to flush with "Invalid argument" when the
            # handle is in an inconsistent state
            if e.errno != 22:  # EINVAL
                raise


class ScrollbackHandler(logging.Handler):
    """Logging handler that pushes records into a scrollback buffer.

    The level name becomes the tag, colored by severity. The body is the
    formatted message, or the ``key=value`` pairs passed through `extra`
    when the message is empty.
    """

    def __init__(self, buffer, level=logging.NOTSET):
        super().__init__(level)
        self.buffer = buffer

    @staticmethod
    def level_tag(record):
        """Colored tag line for a record's level."""
        style = 'cyan'
        for level in sorted(LEVEL_STYLES):
            if record.levelno >= level:
                style = LEVEL_STYLES[level]
        return Line((Span(record.levelname, style),))

    def format_body(self, record):
        message = self.format(record)
        if message:
            return message
        fields = {
            key: value for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        return '  '.join('%s=%s' % item for item in fields.items())

    def emit(self, record):
        try:
            self.buffer.push_line(
                datetime.fromtimestamp(record.created, timezone.utc),
                self.level_tag(record),
                self.format_body(record)
            )
        except Exception:
            self.handleError(record)


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    # Create file handler if path string, otherwise stream handler
    if isinstance(log_file, str):
        handler = RobustFileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'  # Replace problematic chars
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    formatter = logging.Formatter(log_format)

    # Get logger by name if string provided
    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def parse_log_level(name):
    """Convert a level name such as 'info' to its logging constant.

    Raises:
        ConfigError: If the name is not a logging level
    """
    level = getattr(logging, str(name).upper(), None)
    if not isinstance(level, int):
        raise ConfigError('unknown log level: %r' % (name,))
    return level


class UIConfig:
    """Terminal UI settings (the ``tui`` config section).

    Attributes:
        scrollbuffer (int): Lines kept in each scrollback buffer
        lcol_width (int): Width of the tag column (nicknames, log levels)
        tz (tzinfo): Time zone timestamps are shown in
        sample_feed (bool): Feed the chat buffer with sample lines
        sample_delay (float): Seconds between sample lines
    """

    DEFAULTS = {
        'scrollbuffer': 1024,
        'lcol_width': 12,
        'tz': 'UTC',
        'sample_feed': True,
        'sample_delay': 0.0,
    }

    def __init__(self, scrollbuffer=1024, lcol_width=12, tz=timezone.utc,
                 sample_feed=True, sample_delay=0.0):
        self.scrollbuffer = scrollbuffer
        self.lcol_width = lcol_width
        self.tz = tz
        self.sample_feed = sample_feed
        self.sample_delay = sample_delay

    @classmethod
    def from_dict(cls, section):
        """Build settings from the ``tui`` section, filling in defaults.

        Raises:
            ConfigError: On a wrongly typed value or unknown time zone
        """
        conf = dict(cls.DEFAULTS)
        conf.update(section or {})

        scrollbuffer = conf['scrollbuffer']
        if isinstance(scrollbuffer, bool) or not isinstance(scrollbuffer, int) \
                or scrollbuffer <= 0:
            raise ConfigError('tui.scrollbuffer must be a positive integer')

        lcol_width = conf['lcol_width']
        if isinstance(lcol_width, bool) or not isinstance(lcol_width, int) \
                or lcol_width < 0:
            raise ConfigError('tui.lcol_width must be a non-negative integer')

        try:
            tz = ZoneInfo(conf['tz'])
        except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
            raise ConfigError('tui.tz: unknown time zone %r' % (conf['tz'],)) from e

        try:
            sample_delay = float(conf['sample_delay'])
        except (TypeError, ValueError) as e:
            raise ConfigError('tui.sample_delay must be a number') from e

        return cls(
            scrollbuffer=scrollbuffer,
            lcol_width=lcol_width,
            tz=tz,
            sample_feed=bool(conf['sample_feed']),
            sample_delay=max(0.0, sample_delay)
        )


class Config:
    """Parsed configuration file.

    Attributes:
        raw (dict): The file contents as loaded
        ui (UIConfig): Terminal UI settings
        aliases (CommandAliasTable): Command trigger strings
        log_level (int): Root logging level
        log_file (str or None): Log file path
    """

    def __init__(self, raw=None):
        self.raw = raw or {}
        self.ui = UIConfig.from_dict(self.raw.get('tui', {}))
        self.aliases = CommandAliasTable.from_config(self.raw.get('aliases', {}))
        self.log_level = parse_log_level(self.raw.get('log_level', 'info'))
        self.log_file = self.raw.get('log_file', None)


def load_config(path=None):
    """Load configuration from a JSON file

    Args:
        path: Path to the config file, or None for defaults

    Returns:
        Config instance

    Raises:
        ConfigError: If the file is not valid JSON or has invalid values
    """
    if path is None:
        return Config()

    try:
        with open(path, 'r', encoding='utf-8') as fp:
            raw = json.load(fp)
    except json.JSONDecodeError as e:
        raise ConfigError('%s: invalid JSON: %s' % (path, e)) from e

    if not isinstance(raw, dict):
        raise ConfigError('%s: top level must be an object' % path)
    return Config(raw)


def get_config(argv=None):
    """Load configuration from the JSON file named on the command line

    Args:
        argv: Argument list, sys.argv when None

    Returns:
        Config instance

    Exits:
        Exits with status 1 if there is more than one argument
    """
    argv = sys.argv if argv is None else argv

    if len(argv) > 2:
        print('usage: %s [config file]' % argv[0], file=sys.stderr)
        sys.exit(1)

    return load_config(argv[1] if len(argv) == 2 else None)
