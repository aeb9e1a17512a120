"""Errors that end a run. Each maps to its own process exit code."""


class EnhanceError(Exception):
    exit_code = 1


class InputError(EnhanceError):
    """The source image could not be read or decoded."""

    exit_code = 2


class OutputError(EnhanceError):
    """The result could not be encoded or written."""

    exit_code = 3


class CompositeError(EnhanceError):
    """Seamless blending failed, usually on degenerate geometry."""

    exit_code = 4


class StageError(EnhanceError):
    """The pipeline was asked to make a transition it does not allow."""

    exit_code = 70
