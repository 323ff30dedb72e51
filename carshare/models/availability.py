from dataclasses import dataclass, field


@dataclass
class AvailabilityResult:
    """
    Outcome of an availability check. ``available`` is True exactly when
    ``conflicts`` is empty; conflicts are booking summaries
    without renter contact details.
    """
    available: bool
    conflicts: list[dict] = field(default_factory=list)

    @classmethod
    def from_conflicts(cls, conflicts: list[dict]) -> "AvailabilityResult":
        return cls(available=not conflicts, conflicts=list(conflicts))

    def to_dict(self) -> dict:
        if self.available:
            return {"available": True, "message": "Car is available"}
        return {
            "available": False,
            "message": "Car is not available",
            "conflicts": self.conflicts,
        }
