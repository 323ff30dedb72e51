import atexit
import logging
import os
import pickle
import threading
from contextlib import contextmanager

from carshare.exceptions import DuplicatePlateError, StorageError

logger = logging.getLogger(__name__)

COLLECTIONS = ("vehicles", "bookings", "reviews", "favorites")
_FROM_ENV = object()


class Store:
    """
    In-process record store for vehicles, bookings, reviews and favorites.

    Records are plain dicts keyed by integer ids assigned from per-collection
    counters. When ``path`` is set every mutation is written through to a
    pickle file; with ``path=None`` the data lives in memory only.
    """

    _inst = None
    _inst_lock = threading.Lock()
    _atexit_registered = False

    def __init__(self, path: str | os.PathLike | None = None):
        self.path = str(path) if path else None
        self.vehicles: dict[int, dict] = {}
        self.bookings: dict[int, dict] = {}
        self.reviews: dict[int, dict] = {}
        self.favorites: dict[int, dict] = {}
        self.counters: dict[str, int] = {name: 0 for name in COLLECTIONS}
        self._rw = threading.RLock()

        if self.path:
            logger.info("Using store file: %s", self.path)
            self._load()

            # Automatically save on exit (skipped in test environments)
            if not Store._atexit_registered and os.getenv("APP_ENV") != "test":
                atexit.register(self.save)
                Store._atexit_registered = True

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path=_FROM_ENV):
        """
        Return the global singleton instance of Store.
        Without a path argument the location comes from CARSHARE_DATA_PATH;
        an explicit None keeps the instance in memory.
        """
        with cls._inst_lock:
            if cls._inst is None:
                if path is _FROM_ENV:
                    from carshare.config import data_path_from_env
                    path = data_path_from_env()
                cls._inst = Store(path)
        return cls._inst

    @classmethod
    def reset_instance(cls, store: "Store | None" = None):
        """Replace (or drop) the global instance; used by the app factory and tests."""
        with cls._inst_lock:
            cls._inst = store

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict) and "counters" in data:
            for name in COLLECTIONS:
                setattr(self, name, data.get(name, {}) or {})
            self.counters.update(data.get("counters") or {})
            logger.info(
                "Loaded: vehicles=%d, bookings=%d, reviews=%d, favorites=%d",
                len(self.vehicles), len(self.bookings), len(self.reviews), len(self.favorites),
            )
        else:
            # Handle incompatible data format: backup the old file and start empty
            bak = self.path + ".bak"
            try:
                os.replace(self.path, bak)
            except OSError as e:
                raise StorageError(f"cannot back up incompatible store file: {e}") from e
            logger.warning("Incompatible store (%s); backed up to %s. Starting empty.", type(data).__name__, bak)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        if not self.path:
            return
        payload = {name: getattr(self, name) for name in COLLECTIONS}
        payload["counters"] = self.counters
        tmp = self.path + ".tmp"
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(tmp, "wb") as f:
                pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except (OSError, pickle.PicklingError) as e:
            raise StorageError(str(e)) from e

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.debug("Saving to %s", self.path)
            self._dump()

    def clear(self):
        with self._writing(*COLLECTIONS):
            for name in COLLECTIONS:
                getattr(self, name).clear()
                self.counters[name] = 0

    @contextmanager
    def transaction(self, *collections: str):
        """
        Hold the store lock for a compound read-check-write sequence.
        The lock is re-entrant, so store methods called inside still work.

        Named collections (and the id counters) are snapshotted first and
        restored if a StorageError escapes the block, so memory never keeps
        a change the file did not get.
        """
        with self._rw:
            if not (self.path and collections):
                yield self
                return
            saved = {name: {k: dict(v) for k, v in getattr(self, name).items()} for name in collections}
            counters = dict(self.counters)
            try:
                yield self
            except StorageError:
                for name, records in saved.items():
                    setattr(self, name, records)
                self.counters = counters
                logger.error("Write to %s failed; rolled back %s", self.path, ", ".join(collections))
                raise

    @contextmanager
    def _writing(self, *collections: str):
        """Apply a mutation and write it through, undoing it if the write fails."""
        with self.transaction(*collections):
            yield
            self._dump()

    def _next_id(self, collection: str) -> int:
        self.counters[collection] += 1
        return self.counters[collection]

    def _insert(self, collection: str, data: dict) -> dict:
        rid = self._next_id(collection)
        record = dict(data)
        record["id"] = rid
        getattr(self, collection)[rid] = record
        return dict(record)

    # ---------- Vehicles ----------
    def find_vehicle_by_plate(self, plate: str) -> dict | None:
        """Find a vehicle by its (trimmed) number plate."""
        plate = (plate or "").strip()
        with self._rw:
            for v in self.vehicles.values():
                if v.get("number_plate") == plate:
                    return dict(v)
        return None

    def create_vehicle(self, data: dict) -> dict:
        """Create a new vehicle record; the plate must not be in use."""
        with self._writing("vehicles"):
            if self.find_vehicle_by_plate(data.get("number_plate")) is not None:
                raise DuplicatePlateError()
            return self._insert("vehicles", data)

    def get_vehicle(self, vehicle_id: int) -> dict | None:
        """Get vehicle information by ID."""
        with self._rw:
            v = self.vehicles.get(vehicle_id)
            return dict(v) if v is not None else None

    def list_vehicles(self) -> list[dict]:
        with self._rw:
            return [dict(v) for v in self.vehicles.values()]

    def update_vehicle(self, vehicle_id: int, updates: dict) -> dict | None:
        """Apply a partial update; return the new record or None if missing."""
        with self._rw:
            if vehicle_id not in self.vehicles:
                return None
            plate = updates.get("number_plate")
            if plate is not None:
                other = self.find_vehicle_by_plate(plate)
                if other is not None and other["id"] != vehicle_id:
                    raise DuplicatePlateError()
            with self._writing("vehicles"):
                v = self.vehicles[vehicle_id]
                v.update(updates)
                return dict(v)

    def delete_vehicle(self, vehicle_id: int) -> dict | None:
        """Delete a vehicle by ID and return the removed record."""
        with self._rw:
            if vehicle_id not in self.vehicles:
                return None
            with self._writing("vehicles"):
                return self.vehicles.pop(vehicle_id)

    # ---------- Bookings ----------
    def create_booking(self, data: dict) -> dict:
        with self._writing("bookings"):
            return self._insert("bookings", data)

    def get_booking(self, booking_id: int) -> dict | None:
        with self._rw:
            b = self.bookings.get(booking_id)
            return dict(b) if b is not None else None

    def bookings_for_vehicle(self, vehicle_id: int, exclude_statuses=()) -> list[dict]:
        """Return bookings of one vehicle, skipping the given statuses."""
        with self._rw:
            return [
                dict(b) for b in self.bookings.values()
                if b.get("car_id") == vehicle_id and b.get("status") not in exclude_statuses
            ]

    def list_bookings(self) -> list[dict]:
        with self._rw:
            return [dict(b) for b in self.bookings.values()]

    def update_booking(self, booking_id: int, updates: dict) -> dict | None:
        """Update an existing booking by ID."""
        with self._rw:
            if booking_id not in self.bookings:
                return None
            with self._writing("bookings"):
                b = self.bookings[booking_id]
                b.update(updates)
                return dict(b)

    # ---------- Reviews ----------
    def create_review(self, data: dict) -> dict:
        with self._writing("reviews"):
            return self._insert("reviews", data)

    def reviews_for_vehicle(self, vehicle_id: int) -> list[dict]:
        with self._rw:
            return [dict(r) for r in self.reviews.values() if r.get("car_id") == vehicle_id]

    def list_reviews(self) -> list[dict]:
        with self._rw:
            return [dict(r) for r in self.reviews.values()]

    def delete_reviews_for_vehicle(self, vehicle_id: int) -> int:
        with self._rw:
            ids = [rid for rid, r in self.reviews.items() if r.get("car_id") == vehicle_id]
            if not ids:
                return 0
            with self._writing("reviews"):
                for rid in ids:
                    del self.reviews[rid]
            return len(ids)

    # ---------- Favorites ----------
    def find_favorite(self, vehicle_id: int) -> dict | None:
        with self._rw:
            for f in self.favorites.values():
                if f.get("car_id") == vehicle_id:
                    return dict(f)
        return None

    def create_favorite(self, data: dict) -> tuple[dict, bool]:
        """Insert a favorite unless one exists for the vehicle; return (record, created)."""
        with self._rw:
            existing = self.find_favorite(data.get("car_id"))
            if existing is not None:
                return existing, False
            with self._writing("favorites"):
                return self._insert("favorites", data), True

    def list_favorites(self) -> list[dict]:
        with self._rw:
            return [dict(f) for f in self.favorites.values()]

    def delete_favorite(self, vehicle_id: int) -> dict | None:
        with self._rw:
            fid = next((k for k, f in self.favorites.items() if f.get("car_id") == vehicle_id), None)
            if fid is None:
                return None
            with self._writing("favorites"):
                return self.favorites.pop(fid)
