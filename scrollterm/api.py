#!/usr/bin/env python3
"""Operations a command evaluator may perform on the application."""
import abc
import enum


class ScrollDirection(enum.Enum):
    # Back through history, away from the newest line
    BACKWARD = 'backward'
    FORWARD = 'forward'


class Api(abc.ABC):
    """Primitives for changing the UI state."""

    @abc.abstractmethod
    def exit(self):
        """Gracefully exit the application at the earliest possible time."""

    @abc.abstractmethod
    def scroll(self, direction):
        """Shift the focused viewport.

        Args:
            direction (ScrollDirection): Which way to pan
        """

    @abc.abstractmethod
    def clear_input_buffer(self):
        """Clear the user input buffer and prime it to receive new commands."""

    @abc.abstractmethod
    def send_message(self, server, channel, message):
        """Send a message to a given channel.

        Raises:
            NotConnectedError: If there is no connection to `server`
        """
