import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.location import Location
from app.models.project_settings import DEFAULT_SETTINGS_ID, ProjectSettings
from app.models.team_member import TeamMember
from app.models.vehicle import Vehicle
from app.utils.timeparse import utc_now_iso

logger = logging.getLogger(__name__)

MORNING = "08:30-11:30"
AFTERNOON = "13:30-17:30"

SEED_LOCATIONS = [
    {"name": "Bahir Dar", "contact_person": "Installation Team Lead", "contact_phone": "+251-91-234-5678"},
    {"name": "Kombolcha", "contact_person": "Field Operations Manager", "contact_phone": "+251-91-345-6789"},
    {"name": "Addis Ababa", "contact_person": "Regional Coordinator", "contact_phone": "+251-91-456-7890"},
]

SEED_TEAM_MEMBERS = [
    {"id": "TM001", "name": "Alemayehu Tadesse", "role": "Senior GPS Technician"},
    {"id": "TM002", "name": "Tigist Bekele", "role": "Fuel Systems Specialist"},
    {"id": "TM003", "name": "Dawit Mekonnen", "role": "Installation Team Lead"},
    {"id": "TM004", "name": "Hanan Mohammed", "role": "Technical Supervisor"},
    {"id": "TM005", "name": "Solomon Girma", "role": "Regional Coordinator"},
    {"id": "TM006", "name": "Martha Hailu", "role": "Quality Control Inspector"},
]

# (id, type, location, day, time_slot, status, fuel sensors = fuel tanks)
SEED_VEHICLES = [
    ("V001", "FORD/D/P/UP RANGER", "Bahir Dar", 1, MORNING, "Completed", 1),
    ("V002", "FORD/D/P/UP RANGER", "Bahir Dar", 1, AFTERNOON, "Completed", 1),
    ("V003", "FORD/D/P/UP RANGER", "Bahir Dar", 2, MORNING, "Completed", 1),
    ("V004", "FORD/D/P/UP RANGER", "Bahir Dar", 2, AFTERNOON, "In Progress", 1),
    ("V005", "MAZDA/PICKUP W9AT", "Bahir Dar", 3, MORNING, "Pending", 1),
    ("V006", "Mercedes bus MCV260", "Bahir Dar", 3, AFTERNOON, "Pending", 1),
    ("V007", "Toyota land cruiser", "Bahir Dar", 4, MORNING, "Pending", 1),
    ("V008", "MAZDA/PICKUP W9AT", "Bahir Dar", 4, AFTERNOON, "Pending", 1),
    ("V009", "Mercedes bus MCV260", "Bahir Dar", 5, MORNING, "Pending", 1),
    ("V010", "UD truck CV86BLLDL", "Bahir Dar", 5, AFTERNOON, "Pending", 2),
    ("V011", "Mitsubishi K777JENSU", "Bahir Dar", 6, MORNING, "Pending", 1),
    ("V012", "Terios j120cg", "Bahir Dar", 6, AFTERNOON, "Pending", 1),
    ("V013", "MAZDA/PICKUP BT-50", "Bahir Dar", 7, MORNING, "Pending", 1),
    ("V014", "Mitsubishi (k777jensl)", "Bahir Dar", 7, AFTERNOON, "Pending", 1),
    ("V015", "Cherry c7180elkkhb0018", "Bahir Dar", 8, MORNING, "Pending", 1),
    ("V016", "FORD/D/P/UP RANGER", "Kombolcha", 10, MORNING, "Pending", 1),
    ("V017", "MAZDA/R/D/UP BT-50", "Kombolcha", 10, AFTERNOON, "Pending", 1),
    ("V018", "Mercedes bus MCV5115", "Kombolcha", 11, MORNING, "Pending", 1),
    ("V019", "Toyota Pickup LN166L-PRMDS", "Kombolcha", 11, AFTERNOON, "Pending", 1),
    ("V020", "Mitsubishi K34)JUNJJC", "Kombolcha", 12, MORNING, "Pending", 1),
    ("V021", "UD truck CV86BLLDL", "Kombolcha", 12, AFTERNOON, "Pending", 2),
    ("V022", "FORD/D/P/UP RANGER", "Addis Ababa", 13, MORNING, "Pending", 1),
    ("V023", "MAZDA/PICKUP-626", "Addis Ababa", 13, AFTERNOON, "Pending", 1),
    ("V024", "Cherry c7180elkkhb0018", "Addis Ababa", 14, MORNING, "Pending", 1),
]


async def seed_data(session: AsyncSession) -> None:
    result = await session.execute(select(Vehicle).limit(1))
    if result.scalars().first() is not None:
        return

    now = utc_now_iso()
    if await session.get(ProjectSettings, DEFAULT_SETTINGS_ID) is None:
        session.add(ProjectSettings(
            id=DEFAULT_SETTINGS_ID,
            project_start_date=date.today().isoformat(),
            total_days=settings.project_days,
            created_at=now,
            updated_at=now,
        ))

    for vehicle_id, vehicle_type, location, day, slot, status, sensors in SEED_VEHICLES:
        session.add(Vehicle(
            id=vehicle_id, type=vehicle_type, location=location, day=day, time_slot=slot, status=status,
            gps_required=1, fuel_sensors=sensors, fuel_tanks=sensors, created_at=now, updated_at=now,
        ))

    for loc in SEED_LOCATIONS:
        own = [v for v in SEED_VEHICLES if v[2] == loc["name"]]
        session.add(Location(
            **loc, vehicles=len(own), gps_devices=len(own), fuel_sensors=sum(v[6] for v in own), created_at=now,
        ))

    for member in SEED_TEAM_MEMBERS:
        session.add(TeamMember(**member, specializations=[], created_at=now))

    await session.commit()
    logger.info("Seeded %d vehicles, %d locations and %d team members",
                len(SEED_VEHICLES), len(SEED_LOCATIONS), len(SEED_TEAM_MEMBERS))
