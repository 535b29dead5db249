class FileCombinerError(Exception):
    """Base class for errors that abort a run."""


class PatternError(FileCombinerError):
    """The --regex pattern is not a valid regular expression."""


class CombineError(FileCombinerError):
    """The output could not be created, or an input could not be read."""


class SelectionCancelled(FileCombinerError):
    """The user aborted the interactive selection."""
