"""
Checksum calculation for audit entries and table snapshots.

Payloads are serialized to canonical JSON (sorted keys) before hashing so the
same content always yields the same digest.
"""

import hashlib
import json
from typing import Any, Optional, Union

from .config import ChecksumAlgorithm, get_config


class ChecksumProvider:
    """Provider for checksum calculation and verification."""

    def __init__(self, algorithm: Optional[ChecksumAlgorithm] = None):
        """
        Initialize checksum provider.

        Args:
            algorithm: Checksum algorithm to use (defaults to config)
        """
        self.algorithm = ChecksumAlgorithm(algorithm or get_config().checksum_algorithm)

    def calculate(self, data: Union[str, bytes]) -> str:
        """
        Calculate checksum for data.

        Args:
            data: Data to calculate checksum for

        Returns:
            Hex-encoded checksum
        """
        if isinstance(data, str):
            data = data.encode("utf-8")

        hasher: Any  # Type varies by algorithm
        if self.algorithm == ChecksumAlgorithm.SHA256:
            hasher = hashlib.sha256()
        elif self.algorithm == ChecksumAlgorithm.SHA512:
            hasher = hashlib.sha512()
        elif self.algorithm == ChecksumAlgorithm.BLAKE2B:
            hasher = hashlib.blake2b()
        else:
            raise ValueError(f"Unsupported algorithm: {self.algorithm}")

        hasher.update(data)
        return str(hasher.hexdigest())

    def calculate_payload(self, payload: Any) -> str:
        """Calculate the checksum of a JSON-serializable payload."""
        return self.calculate(canonical_json(payload))

    def verify(self, data: Union[str, bytes], expected_checksum: str) -> bool:
        """
        Verify data against expected checksum.

        Args:
            data: Data to verify
            expected_checksum: Expected hex checksum

        Returns:
            True if checksum matches
        """
        return self.calculate(data) == expected_checksum


def canonical_json(payload: Any) -> str:
    """Serialize a payload deterministically."""
    return json.dumps(payload, sort_keys=True, default=str)


def calculate_checksum(
    payload: Any, algorithm: Optional[ChecksumAlgorithm] = None
) -> str:
    """
    Calculate checksum for a JSON-serializable payload.

    Args:
        payload: Data to calculate checksum for
        algorithm: Optional algorithm override

    Returns:
        Hex-encoded checksum
    """
    return ChecksumProvider(algorithm).calculate_payload(payload)
