"""
Exception hierarchy shared by the Qt-free modules.

Library code raises these; only the UI layer catches them and reports
the failure to the user.  Out-of-bounds mosaic blocks are not an error:
the engine skips them silently.
"""


class MosaicEditorError(Exception):
    """Base class for all application errors."""


class DecodeError(MosaicEditorError):
    """The input file is missing, unreadable, or in an unsupported format."""


class SaveError(MosaicEditorError):
    """Writing the committed image failed; in-memory state is unchanged."""


class EncodeError(SaveError):
    """The image could not be encoded for the destination format."""


class FilesystemError(SaveError):
    """The destination could not be written (permissions, missing folder, disk full)."""


class DestinationExistsError(FilesystemError):
    """The destination file appeared after its name was chosen; nothing was written."""


class InvalidTransitionError(MosaicEditorError):
    """An editing operation was requested in a state that does not allow it."""
