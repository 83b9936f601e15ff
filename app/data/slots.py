"""The fixed catalog of bookable battle slots.

Each slot is an hour-long block identified by its start label. The catalog
order is the order every availability listing is returned in.
"""

from datetime import time

TIME_SLOTS: tuple[str, ...] = (
    "2:00 PM",
    "3:00 PM",
    "4:00 PM",
    "5:00 PM",
    "6:00 PM",
    "7:00 PM",
    "8:00 PM",
    "9:00 PM",
    "10:00 PM",
    "11:00 PM",
)

_SLOT_STARTS: dict[str, time] = {label: time(14 + i) for i, label in enumerate(TIME_SLOTS)}


def is_valid_slot(label: str) -> bool:
    return label in _SLOT_STARTS


def slot_start(label: str) -> time:
    """Return the local start time of a slot, e.g. ``"5:00 PM"`` -> 17:00."""
    try:
        return _SLOT_STARTS[label]
    except KeyError:
        raise ValueError(f"Unknown time slot '{label}'") from None
