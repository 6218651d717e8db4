"""In-memory feature store for parcels, stations, and parcel selection.

The store owns the current Parcel and Station collections and the single
parcel selection. Collections are replaced in bulk; replacing parcels clears
the selection. Selection transitions notify registered observers with a
``SelectionChange``.

Selection states are ``NoSelection`` (``selected_id is None``) and
``Selected(id)``. At most one parcel carries ``selected=True`` and it is
always the one named by ``selected_id``.

Example:
    Select and toggle parcels:
        >>> store = FeatureStore()
        >>> store.replace_parcels(parcels)
        >>> unsubscribe = store.subscribe(print)
        >>> store.select("a").id
        'a'
        >>> store.toggle("a")  # same id: deselects
        >>> store.selected_id is None
        True
        >>> unsubscribe()
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

from landmap.store import models

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)


class SelectionListener(Protocol):
    """Callable notified after every successful selection transition."""

    def __call__(self, change: models.SelectionChange) -> None: ...


class FeatureStore:
    """Holds parcels and stations and enforces the single-selection rule.

    Transitions run under a re-entrant lock so the invariant also holds
    when the store is shared between threads. Listeners are called while
    the lock is held and must not block.
    """

    def __init__(self) -> None:
        """Initialize an empty store with no selection."""
        self._lock = threading.RLock()
        self._parcels: dict[str, models.Parcel] = {}
        self._stations: list[models.Station] = []
        self._selected_id: str | None = None
        self._listeners: list[SelectionListener] = []

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    def replace_parcels(self, parcels: Iterable[models.Parcel]) -> None:
        """Replace every parcel and reset the selection to none.

        Parcels are stored unselected regardless of their incoming flag.
        A repeated id keeps its first occurrence. Dropping an active
        selection notifies listeners the same way ``deselect()`` does.
        """
        with self._lock:
            previous = self.selected()
            if previous is not None:
                previous.selected = False
            self._parcels = {}
            for parcel in parcels:
                parcel.selected = False
                self._parcels.setdefault(parcel.id, parcel)
            self._selected_id = None
            if previous is not None:
                self._notify(models.SelectionChange(is_selected=False, parcel=None))

    def replace_stations(self, stations: Iterable[models.Station]) -> None:
        """Replace every station."""
        with self._lock:
            self._stations = list(stations)

    def all_parcels(self) -> list[models.Parcel]:
        return list(self._parcels.values())

    def all_stations(self) -> list[models.Station]:
        return list(self._stations)

    def get(self, parcel_id: str) -> models.Parcel | None:
        return self._parcels.get(parcel_id)

    def selected(self) -> models.Parcel | None:
        """Return the currently selected parcel, if any."""
        if self._selected_id is None:
            return None
        return self._parcels.get(self._selected_id)

    def search(self, query: str | None) -> list[models.Parcel]:
        """Find parcels whose description or owner contains ``query``.

        Matching is a case-insensitive substring test. An empty or missing
        query returns every parcel.
        """
        if not query:
            return self.all_parcels()

        needle = query.lower()
        return [
            parcel
            for parcel in self._parcels.values()
            if needle in parcel.description.lower()
            or needle in parcel.owner.lower()
        ]

    def subscribe(
        self,
        listener: SelectionListener,
    ) -> Callable[[], None]:
        """Register a selection listener.

        Returns:
            A callable that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def select(self, parcel_id: str) -> models.Parcel | None:
        """Make ``parcel_id`` the only selected parcel.

        An unknown id leaves the state untouched and emits nothing.

        Returns:
            The selected parcel, or None if the id is not in the store.
        """
        with self._lock:
            parcel = self._parcels.get(parcel_id)
            if parcel is None:
                logger.debug("Ignoring selection of unknown parcel %s", parcel_id)
                return None

            previous = self.selected()
            if previous is not None and previous is not parcel:
                previous.selected = False

            parcel.selected = True
            self._selected_id = parcel.id
            self._notify(models.SelectionChange(is_selected=True, parcel=parcel))
            return parcel

    def deselect(self) -> models.Parcel | None:
        """Clear the current selection.

        Returns:
            The parcel that was deselected, or None when nothing was
            selected (in which case no notification is sent).
        """
        with self._lock:
            parcel = self.selected()
            if parcel is None:
                self._selected_id = None
                return None

            parcel.selected = False
            self._selected_id = None
            self._notify(models.SelectionChange(is_selected=False, parcel=None))
            return parcel

    def toggle(self, parcel_id: str) -> models.Parcel | None:
        """Deselect ``parcel_id`` if it is selected, otherwise select it.

        Returns:
            The result of ``deselect()`` or ``select(parcel_id)``.
        """
        with self._lock:
            if self._selected_id == parcel_id:
                return self.deselect()
            return self.select(parcel_id)

    def _notify(self, change: models.SelectionChange) -> None:
        for listener in list(self._listeners):
            listener(change)
