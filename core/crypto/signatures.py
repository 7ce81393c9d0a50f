from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class Signer(ABC):
    """
    Signer capability handed to the anchoring adapter at call time.

    The core never signs anything itself; it only records which key the
    host's signer (KMS, HSM, wallet) used for a submission.
    """

    @property
    @abstractmethod
    def key_id(self) -> str:
        """Identifier of the key used for the submission."""


@dataclass(frozen=True)
class StaticSigner(Signer):
    """Signer identified by a fixed key id."""
    kid: str

    def __post_init__(self) -> None:
        if not self.kid or not self.kid.strip():
            raise ValueError("Signer key id must be non-empty")

    @property
    def key_id(self) -> str:
        return self.kid
