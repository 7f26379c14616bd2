"""Error taxonomy for the per-file transcode lifecycle.

Each class maps to one cleanup policy in the job coordinator:

- ValidationError: nothing was created, report and stop.
- ContentionError: another run owns (or already finished) the target, skip.
- ProbeError / TranscodeError: remove the lock and the temp output.
- FinalizeError: remove the lock, leave the temp output for inspection.
"""


class CoordinatorError(Exception):
    """Base class for all lifecycle errors."""


class ValidationError(CoordinatorError):
    """Bad arguments, unsupported extension, missing file or missing tool."""


class ContentionError(CoordinatorError):
    """Lock, final output or temp output already present."""


class ProbeError(CoordinatorError):
    """Source resolution could not be determined."""


class TranscodeError(CoordinatorError):
    """The external transcoder failed."""


class FinalizeError(CoordinatorError):
    """Promoting the temp output or deleting the original failed."""
