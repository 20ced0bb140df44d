#!/usr/bin/env python3
class ScrolltermError(Exception):
    ''' Base class for all exceptions in the scrollterm package '''

class ConfigError(ScrolltermError):
    ''' Exception raised when there is an error in the configuration '''

class LockPoisonedError(ScrolltermError):
    ''' Exception raised when a shared buffer lock was abandoned by a failed holder '''

class NotConnectedError(ScrolltermError):
    ''' Exception raised when a message is sent without a server connection '''
