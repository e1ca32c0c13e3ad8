"""
advisor/allocation_service.py
-----------------------------
Orchestrates normalise → compute → persist for the transport layer.

Collaborators are injected; ``build_service()`` is the composition root
used by ``main.py`` (and by any HTTP front-end) at process start.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Union

from advisor.allocation_engine import AllocationEngine
from advisor.config import ALLOCATION_METHOD, STORE_PATH
from advisor.exceptions import StorageError
from advisor.models import AllocationResult, CanonicalProfile, InvestorProfile
from advisor.profile_normalizer import ProfileNormalizer
from advisor.result_store import AllocationResultStore

RawProfile = Union[InvestorProfile, Mapping[str, Any]]


def _print_save_warning(exc: StorageError) -> None:
    print(f"  ⚠  Allocation save failed ({exc}); result not persisted.", flush=True)


class AllocationService:
    """
    The only component the transport layer talks to.

    Two operations:

    * :meth:`compute_and_store` – ``InvalidProfileError`` propagates before
      the engine or store is touched.  A ``StorageError`` during save does
      not undo the computation: it is kept on ``last_save_error``, handed to
      ``on_save_error`` and the result is still returned.  The canonical
      profile of the latest call is kept on ``last_profile``.
    * :meth:`load_last` – ``NotFoundError`` / ``StorageError`` propagate
      unchanged.
    """

    def __init__(
        self,
        normalizer: ProfileNormalizer,
        engine: AllocationEngine,
        store: AllocationResultStore,
        on_save_error: Optional[Callable[[StorageError], None]] = None,
    ):
        self.normalizer = normalizer
        self.engine = engine
        self.store = store
        self._on_save_error = on_save_error or _print_save_warning
        self.last_save_error: Optional[StorageError] = None
        self.last_profile: Optional[CanonicalProfile] = None

    def compute_and_store(self, raw_profile: RawProfile) -> AllocationResult:
        """Normalise *raw_profile*, compute its allocation, persist, return."""
        profile = self.normalizer.normalize(raw_profile)
        self.last_profile = profile
        result = self.engine.compute(profile)

        try:
            self.store.save(result)
        except StorageError as exc:
            self.last_save_error = exc
            self._on_save_error(exc)
        else:
            self.last_save_error = None

        return result

    # Name used by request handlers.
    handle = compute_and_store

    def load_last(self) -> AllocationResult:
        """Return the most recently stored allocation."""
        return self.store.load()


def build_service(
    store_path: Optional[Union[str, Path]] = None,
    method: Optional[str] = None,
    on_save_error: Optional[Callable[[StorageError], None]] = None,
) -> AllocationService:
    """Wire a service from configuration; call once at process start."""
    return AllocationService(
        normalizer=ProfileNormalizer(),
        engine=AllocationEngine(method=method or ALLOCATION_METHOD),
        store=AllocationResultStore(store_path if store_path is not None else STORE_PATH),
        on_save_error=on_save_error,
    )
