from dataclasses import dataclass


@dataclass
class SessionStatistics:
    """Statistics about the current streaming session."""

    bytes_transferred: int = 0
    chunks_transferred: int = 0

    def record_chunk(self, size: int) -> None:
        self.bytes_transferred += size
        self.chunks_transferred += 1
