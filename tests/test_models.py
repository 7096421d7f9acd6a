import pytest
import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from app.database import Base
from app.models import Comment, Location, ProjectSettings, ShareLink, Task, TeamMember, Vehicle


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session
    await engine.dispose()


@pytest.mark.asyncio
async def test_create_vehicle_defaults(db_session):
    vehicle = Vehicle(id="V900", type="FORD/D/P/UP RANGER", location="Bahir Dar", day=1, time_slot="08:30-11:30")
    db_session.add(vehicle)
    await db_session.commit()

    result = await db_session.get(Vehicle, "V900")
    assert result is not None
    assert result.status == "Pending"
    assert result.fuel_sensors == 0
    assert result.fuel_tanks == 0


@pytest.mark.asyncio
async def test_task_list_columns_round_trip(db_session):
    task = Task(
        id="T-001", name="GPS Device Installation",
        vehicle_ids=["V001", "V002"], assignees=["Tigist Bekele"], tags=["gps"],
    )
    db_session.add(task)
    await db_session.commit()

    result = await db_session.get(Task, "T-001")
    assert result.vehicle_ids == ["V001", "V002"]
    assert result.assignees == ["Tigist Bekele"]
    assert result.dependencies == []
    assert result.status == "Pending"
    assert result.priority == "Medium"


@pytest.mark.asyncio
async def test_team_member_name_is_unique(db_session):
    from sqlalchemy.exc import IntegrityError

    db_session.add(TeamMember(id="TM1", name="Martha Hailu", role="Inspector"))
    await db_session.commit()
    db_session.add(TeamMember(id="TM2", name="Martha Hailu", role="Inspector"))
    with pytest.raises(IntegrityError):
        await db_session.commit()


@pytest.mark.asyncio
async def test_comment_belongs_to_task(db_session):
    db_session.add(Task(id="T-002", name="Documentation"))
    await db_session.commit()
    db_session.add(Comment(id="C-1", task_id="T-002", text="Done", author="Dawit",
                           created_at="2026-01-05T10:00:00+00:00"))
    await db_session.commit()

    result = await db_session.execute(select(Comment).where(Comment.task_id == "T-002"))
    assert [c.id for c in result.scalars().all()] == ["C-1"]


@pytest.mark.asyncio
async def test_location_project_settings_and_share_link(db_session):
    db_session.add(Location(name="Kombolcha"))
    db_session.add(ProjectSettings(project_start_date="2026-01-05"))
    db_session.add(ShareLink(id="S1", name="Timeline", page_url="/timeline", token="abc",
                             created_at="2026-01-05T10:00:00+00:00"))
    await db_session.commit()

    assert (await db_session.get(Location, "Kombolcha")).vehicles == 0
    assert (await db_session.get(ProjectSettings, "default")).project_start_date == "2026-01-05"
    link = await db_session.get(ShareLink, "S1")
    assert link.is_active == 1
    assert link.access_count == 0
