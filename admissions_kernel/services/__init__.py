"""Services for the admissions kernel (write side)."""

from admissions_kernel.services.sequence_service import SequenceCounter, SequenceService

__all__ = [
    "SequenceCounter",
    "SequenceService",
]
