"""Exceptions raised by device discovery and persistence."""


class UnplayableError(Exception):
    """Base class for all package errors."""


class ProcessError(UnplayableError):
    """An external process could not be run to completion."""


class ProcessLaunchError(ProcessError):
    """The executable could not be started."""


class ProcessTimeoutError(ProcessError):
    """The process exceeded its timeout and was killed."""


class AudioDeviceError(UnplayableError):
    """No usable audio device could be determined."""


class AudioConfigError(UnplayableError):
    """The audio device configuration could not be persisted."""
