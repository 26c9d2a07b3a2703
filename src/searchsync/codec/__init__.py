"""Search document codec."""

from searchsync.codec.codec import DocumentCodec, datetime_to_nanos, nanos_to_datetime

__all__ = ["DocumentCodec", "datetime_to_nanos", "nanos_to_datetime"]
