from datetime import date

import pytest

from societybills.engine import config_resolver
from societybills.exceptions import ConfigNotFoundError


class TestResolve:
    def test_picks_latest_effective_on_or_before_period(self, sample_config):
        january = sample_config(effective_from=date(2024, 1, 1))
        june = sample_config(effective_from=date(2024, 6, 1))

        assert config_resolver.resolve([january, june], "2024-05") is january
        assert config_resolver.resolve([january, june], "2024-07") is june

    def test_effective_on_period_start_is_included(self, sample_config):
        june = sample_config(effective_from=date(2024, 6, 1))
        assert config_resolver.resolve([june], "2024-06") is june

    def test_mid_month_config_not_used_for_that_month(self, sample_config):
        january = sample_config(effective_from=date(2024, 1, 1))
        mid_june = sample_config(effective_from=date(2024, 6, 15))
        assert config_resolver.resolve([january, mid_june], "2024-06") is january

    def test_same_date_last_saved_wins(self, sample_config):
        first = sample_config(id="01A", effective_from=date(2024, 1, 1))
        second = sample_config(id="01B", effective_from=date(2024, 1, 1))
        assert config_resolver.resolve([first, second], "2024-02").id == "01B"

    def test_order_of_input_does_not_matter_for_distinct_dates(self, sample_config):
        january = sample_config(effective_from=date(2024, 1, 1))
        june = sample_config(effective_from=date(2024, 6, 1))
        assert config_resolver.resolve([june, january], "2024-08") is june

    def test_none_effective_raises(self, sample_config):
        june = sample_config(effective_from=date(2024, 6, 1))
        with pytest.raises(ConfigNotFoundError, match="2024-05"):
            config_resolver.resolve([june], "2024-05")

    def test_empty_raises(self):
        with pytest.raises(ConfigNotFoundError):
            config_resolver.resolve([], "2024-05")


class TestLatest:
    def test_latest(self, sample_config):
        january = sample_config(effective_from=date(2024, 1, 1))
        june = sample_config(effective_from=date(2024, 6, 1))
        assert config_resolver.latest([june, january]) is june

    def test_latest_empty(self):
        assert config_resolver.latest([]) is None
