"""Implementation modules behind ``completion_stream.base.cancellation``."""
