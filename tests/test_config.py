import pytest

from ffhistory.config import ChampionshipRule, FinishRule, HistoryConfig


def test_defaults(monkeypatch):
    for name in (
        "SLEEPER_BASE_URL",
        "SLEEPER_LEAGUE_ID",
        "SLEEPER_RPM_LIMIT",
        "SLEEPER_FETCH_TIMEOUT_SEC",
        "SLEEPER_MAX_CHAIN_DEPTH",
        "FFHISTORY_CHAMPIONSHIP_RULE",
        "FFHISTORY_FINISH_RULE",
    ):
        monkeypatch.delenv(name, raising=False)
    cfg = HistoryConfig.from_env()
    assert cfg.base_url == "https://api.sleeper.com/v1"
    assert cfg.league_id is None
    assert cfg.max_chain_depth == 12
    assert cfg.championship_rule is ChampionshipRule.ROSTER_ID
    assert cfg.finish_rule is FinishRule.ROSTER_ID


def test_env_overrides_and_garbage_numbers(monkeypatch):
    monkeypatch.setenv("SLEEPER_LEAGUE_ID", "123")
    monkeypatch.setenv("SLEEPER_RPM_LIMIT", "not-a-number")
    monkeypatch.setenv("SLEEPER_FETCH_TIMEOUT_SEC", "5")
    monkeypatch.setenv("SLEEPER_MAX_CHAIN_DEPTH", "3")
    monkeypatch.setenv("FFHISTORY_CHAMPIONSHIP_RULE", "final_week")
    monkeypatch.setenv("FFHISTORY_FINISH_RULE", "rank")
    cfg = HistoryConfig.from_env()
    assert cfg.league_id == "123"
    assert cfg.rpm_limit is None
    assert cfg.fetch_timeout == 5.0
    assert cfg.max_chain_depth == 3
    assert cfg.championship_rule is ChampionshipRule.FINAL_WEEK
    assert cfg.finish_rule is FinishRule.RANK


def test_unknown_rule_is_rejected(monkeypatch):
    monkeypatch.setenv("FFHISTORY_CHAMPIONSHIP_RULE", "bracket")
    with pytest.raises(ValueError):
        HistoryConfig.from_env()
