"""Tests for dungeon clear rewards."""
import pytest

from dungeon_loop.core.random_provider import RandomProvider
from dungeon_loop.core.dungeon import generate_dungeon
from dungeon_loop.core.dungeon.rewards import ClearStats, calculate_clear_rewards, reward_multipliers


@pytest.fixture
def dungeon():
    return generate_dungeon("dark_castle", 4, seed=10, room_count=4)


class TestMultipliers:
    """Tests for reward multipliers."""

    def test_no_activity(self):
        """An empty run pays the base rate."""
        assert reward_multipliers(ClearStats()) == {"gold": 1.0, "experience": 1.0}

    def test_boss_bonus(self):
        """Defeating the boss raises both multipliers."""
        multipliers = reward_multipliers(ClearStats(boss_defeated=True))
        assert multipliers["gold"] == pytest.approx(1.5)
        assert multipliers["experience"] == pytest.approx(1.4)

    def test_fast_clear(self):
        """An instant clear earns the full time bonus; 30 minutes earns none."""
        fast = reward_multipliers(ClearStats(time_elapsed_seconds=0))
        slow = reward_multipliers(ClearStats(time_elapsed_seconds=45 * 60))
        assert fast["gold"] == pytest.approx(1.5)
        assert slow["gold"] == pytest.approx(1.0)

    def test_floor(self):
        """Many deaths bottom out at half rewards."""
        multipliers = reward_multipliers(ClearStats(deaths=50))
        assert multipliers == {"gold": 0.5, "experience": 0.5}

    def test_combined(self):
        """Kills, rooms and challenges add up."""
        stats = ClearStats(monsters_killed=10, rooms_explored=4, challenges_completed=1)
        multipliers = reward_multipliers(stats)
        assert multipliers["gold"] == pytest.approx(1.0 + 0.2 + 0.2 + 0.2)
        assert multipliers["experience"] == pytest.approx(1.0 + 0.1 + 0.12 + 0.15)


class TestClearRewards:
    """Tests for the final payout."""

    def test_base_payout(self, dungeon):
        """Difficulty 4 pays 400 gold, 200 xp and 3 items."""
        rewards = calculate_clear_rewards(dungeon, ClearStats(), RandomProvider(1))
        assert rewards.gold == 400
        assert rewards.experience == 200
        assert len(rewards.items) == 3

    def test_bonus_items(self, dungeon):
        """Boss and challenges add items."""
        stats = ClearStats(boss_defeated=True, challenges_completed=2)
        rewards = calculate_clear_rewards(dungeon, stats, RandomProvider(1))
        assert len(rewards.items) == 6
        assert rewards.gold > 400

    def test_to_dict(self, dungeon):
        """Encoded rewards list items as dictionaries."""
        data = calculate_clear_rewards(dungeon, ClearStats(), RandomProvider(2)).to_dict()
        assert set(data) == {"gold", "experience", "items"}
        assert all("rarity" in item for item in data["items"])
