"""Display slot assignment policies."""

from bubbletrack.slots.assigner import (
    ARRIVAL_ORDER,
    SLOT_POLICIES,
    STICKY_RANDOM,
    ArrivalOrderAssigner,
    SlotAssigner,
    StickyRandomAssigner,
    assign_slots,
    build_assigner,
)

__all__ = [
    "ARRIVAL_ORDER",
    "SLOT_POLICIES",
    "STICKY_RANDOM",
    "ArrivalOrderAssigner",
    "SlotAssigner",
    "StickyRandomAssigner",
    "assign_slots",
    "build_assigner",
]
