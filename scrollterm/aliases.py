#!/usr/bin/env python3
"""Command alias table: names mapped to trigger strings."""
import logging

logger = logging.getLogger(__name__)

# Triggers used when the configuration does not override them
DEFAULT_ALIASES = {
    'leader': ',',
    'commander': '/',
}


class CommandAliasTable:
    """Name to trigger-string mapping with built-in defaults.

    Names are case-insensitive. Only ``leader`` and ``commander`` have
    defaults; any other name resolves to `None` unless configured. Entries
    other than those two mean nothing to the tokenizer and are passed along
    for the command evaluator.

    Examples
    --------
    >>> table = CommandAliasTable({'Leader': ';'})
    >>> table.get('LEADER')
    ';'
    >>> table.get('commander')
    '/'
    >>> table.get('quit') is None
    True
    """

    def __init__(self, overrides=None):
        self._overrides = {}
        for name, trigger in (overrides or {}).items():
            self._overrides[name.lower()] = trigger

    @classmethod
    def from_config(cls, section):
        """Build a table from the ``aliases`` config section.

        Non-string names or triggers are skipped with a warning, as are
        empty triggers.

        Args:
            section (dict or None): Mapping of alias name to trigger

        Returns:
            CommandAliasTable
        """
        overrides = {}
        for name, trigger in (section or {}).items():
            if not isinstance(name, str) or not isinstance(trigger, str) or not trigger:
                logger.warning('ignoring invalid alias %r -> %r', name, trigger)
                continue
            overrides[name] = trigger
        return cls(overrides)

    def get(self, name):
        """Resolve a name to its trigger string, or `None`."""
        key = name.lower()
        if key in self._overrides:
            return self._overrides[key]
        return DEFAULT_ALIASES.get(key)

    @property
    def leader(self):
        return self.get('leader')

    @property
    def commander(self):
        return self.get('commander')

    def names(self):
        """All names with a trigger, defaults included."""
        return sorted(set(DEFAULT_ALIASES) | set(self._overrides))

    def __contains__(self, name):
        return self.get(name) is not None

    def __repr__(self):
        return 'CommandAliasTable(%r)' % (self._overrides,)
