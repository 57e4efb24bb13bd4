"""Champion mastery records."""

import pytest
from sqlalchemy import select

from chronolog.catalog.snapshot import Champion
from chronolog.db.models import ChampionMastery
from chronolog.rewards.mastery import MAX_MASTERY_LEVEL, mastery_level_for, record_champion_draw

AHRI = Champion("Ahri", "Ahri")
IMG = "https://ddragon.leagueoflegends.com/cdn/14.1.1/img/champion/Ahri.png"


class TestMasteryLevel:
    @pytest.mark.parametrize(("times", "level"), [(1, 1), (2, 2), (6, 6), (7, 7), (8, 7), (50, 7)])
    def test_capped_at_seven(self, times, level):
        assert MAX_MASTERY_LEVEL == 7
        assert mastery_level_for(times) == level


class TestRecordChampionDraw:
    @pytest.mark.asyncio
    async def test_first_draw_creates_record(self, db_session, user):
        outcome = await record_champion_draw(db_session, user.id, AHRI, IMG)
        await db_session.commit()

        assert outcome.is_duplicate is False
        assert outcome.mastery_level == 1
        row = (await db_session.execute(select(ChampionMastery))).scalar_one()
        assert row.times_obtained == 1
        assert row.champion_name == "Ahri"
        assert row.image_url == IMG

    @pytest.mark.asyncio
    async def test_second_draw_is_duplicate(self, db_session, user):
        await record_champion_draw(db_session, user.id, AHRI, IMG)
        outcome = await record_champion_draw(db_session, user.id, AHRI, IMG)

        assert outcome.is_duplicate is True
        assert outcome.mastery_level == 2
        rows = (await db_session.execute(select(ChampionMastery))).scalars().all()
        assert len(rows) == 1
        assert rows[0].times_obtained == 2

    @pytest.mark.asyncio
    async def test_level_caps_but_count_keeps_growing(self, db_session, user):
        outcome = None
        for _ in range(9):
            outcome = await record_champion_draw(db_session, user.id, AHRI, IMG)

        assert outcome.mastery_level == 7
        row = (await db_session.execute(select(ChampionMastery))).scalar_one()
        assert row.times_obtained == 9
        assert row.mastery_level == 7

    @pytest.mark.asyncio
    async def test_records_are_per_user(self, db_session, user, other_user):
        await record_champion_draw(db_session, user.id, AHRI, IMG)
        outcome = await record_champion_draw(db_session, other_user.id, AHRI, IMG)
        assert outcome.is_duplicate is False
