from datetime import timedelta

import pytest

from utils.helpers import RecentIdCache, TimeHelper
from utils.validators import MentionParser, UsernameValidator


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0s"),
        (45, "45s"),
        (185, "3m 5s"),
        (7385, "2h 3m 5s"),
        (timedelta(days=4, hours=2, minutes=3, seconds=59), "4d 2h 3m"),
        (-10, "0s"),
    ],
)
def test_format_duration(value, expected):
    assert TimeHelper.format_duration(value) == expected


def test_get_utc_now_is_aware():
    assert TimeHelper.get_utc_now().tzinfo is not None


class TestRecentIdCache:
    def test_reports_duplicates(self):
        cache = RecentIdCache()
        assert cache.seen("a") is False
        assert cache.seen("a") is True
        assert len(cache) == 1

    def test_prunes_oldest_first(self):
        cache = RecentIdCache(max_size=10, prune_count=3)
        for i in range(11):
            cache.seen(i)

        assert len(cache) == 8
        assert 0 not in cache and 1 not in cache and 2 not in cache
        assert 3 in cache and 10 in cache

    def test_default_capacity(self):
        cache = RecentIdCache()
        for i in range(1001):
            cache.seen(i)
        assert len(cache) == 901
        assert 99 not in cache
        assert 100 in cache

    def test_rejects_zero_prune(self):
        with pytest.raises(ValueError):
            RecentIdCache(prune_count=0)


class TestUsernameValidator:
    @pytest.mark.parametrize(
        "raw, expected",
        [("alice", "alice"), ("@Alice", "alice"), ("  Bob.Smith_1 ", "bob.smith_1")],
    )
    def test_normalize(self, raw, expected):
        assert UsernameValidator.normalize(raw) == expected

    @pytest.mark.parametrize("username", ["a", "a.b_c", "x" * 30, "user123"])
    def test_valid(self, username):
        assert UsernameValidator.is_valid_username(username)

    @pytest.mark.parametrize("username", ["", "x" * 31, "bad name", "bad-name", "émile"])
    def test_invalid(self, username):
        assert not UsernameValidator.is_valid_username(username)


class TestMentionParser:
    @pytest.mark.parametrize(
        "arguments, expected",
        [
            ("<@123> 1week", (123, "1week")),
            ("<@!456>   1month", (456, "1month")),
            ("  <@7> 1year  ", (7, "1year")),
        ],
    )
    def test_parse_grant(self, arguments, expected):
        assert MentionParser.parse_grant(arguments) == expected

    @pytest.mark.parametrize("arguments", ["", "123 1week", "<@abc> 1week", "<@123>"])
    def test_parse_grant_rejects(self, arguments):
        assert MentionParser.parse_grant(arguments) is None

    def test_parse_mention(self):
        assert MentionParser.parse_mention("<@!99>") == 99
        assert MentionParser.parse_mention("<@99> extra") is None
        assert MentionParser.parse_mention("") is None
