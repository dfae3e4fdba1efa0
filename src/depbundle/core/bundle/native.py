"""Native image generation hook-in.

Native image generation post-processes an emitted bundle (for example by
precompiling its assemblies). The engine only defines the seam; a generator
must be supplied by the caller when native images are requested.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from depbundle.core.bundle.models import BundleRoot


@runtime_checkable
class NativeImageGenerator(Protocol):
    def generate(self, root: BundleRoot) -> bool:
        """Post-process the emitted *root*. Return False on failure."""
        ...

    @property
    def error_message(self) -> str: ...
