"""Exception types raised by the GCP editor."""


class GcpEditorError(Exception):
    """Base class for GCP editor errors."""


class EmptyInputError(GcpEditorError, ValueError):
    """No file was supplied, or the file is empty after trimming."""


class SerializationError(GcpEditorError, TypeError):
    """The exporter could not turn the given collection into text."""
