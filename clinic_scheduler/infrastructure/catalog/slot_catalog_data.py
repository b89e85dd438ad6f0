from __future__ import annotations

from clinic_scheduler.domain.entities.slot import SlotDefinition

# 13:45 to 14:15 is the clinic break; there is no slot for it.
SLOT_CATALOG: tuple[SlotDefinition, ...] = (
    SlotDefinition(id="0830-0915", label="08:30 to 09:15", is_limited=True),
    SlotDefinition(id="0915-1000", label="09:15 to 10:00", is_limited=True),
    SlotDefinition(id="1000-1045", label="10:00 to 10:45", is_limited=False),
    SlotDefinition(id="1045-1130", label="10:45 to 11:30", is_limited=False),
    SlotDefinition(id="1130-1215", label="11:30 to 12:15", is_limited=False),
    SlotDefinition(id="1215-1300", label="12:15 to 13:00", is_limited=False),
    SlotDefinition(id="1300-1345", label="13:00 to 13:45", is_limited=False),
    SlotDefinition(id="1415-1500", label="14:15 to 15:00", is_limited=False),
    SlotDefinition(id="1500-1545", label="15:00 to 15:45", is_limited=False),
    SlotDefinition(id="1545-1630", label="15:45 to 16:30", is_limited=False),
    SlotDefinition(id="1630-1715", label="16:30 to 17:15", is_limited=False),
    SlotDefinition(id="1715-1800", label="17:15 to 18:00", is_limited=False),
    SlotDefinition(id="1800-1845", label="18:00 to 18:45", is_limited=True),
    SlotDefinition(id="1845-1930", label="18:45 to 19:30", is_limited=True),
    SlotDefinition(id="1930-2015", label="19:30 to 20:15", is_limited=True),
)
