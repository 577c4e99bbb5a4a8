from sahaayak.core.crisis import CrisisClassifier
from sahaayak.core.models import RiskTier
from sahaayak.core.oracle import OracleError, UnavailableOracle

from conftest import ScriptedOracle, run

def test_oracle_answer_decoded():
    classifier = CrisisClassifier(ScriptedOracle(crisis="Low."))
    assert run(classifier.classify("exams are piling up")) == RiskTier.LOW

def test_high_wins_when_answer_mentions_both():
    classifier = CrisisClassifier(ScriptedOracle(crisis="high, not low"))
    assert run(classifier.classify("hello")) == RiskTier.HIGH

def test_unrecognised_answer_is_none():
    classifier = CrisisClassifier(ScriptedOracle(crisis="maybe?"))
    assert run(classifier.classify("hello there")) == RiskTier.NONE

def test_keyword_tier_escalates_oracle_answer():
    classifier = CrisisClassifier(ScriptedOracle(crisis="none"))
    assert run(classifier.classify("I keep thinking about suicide")) == RiskTier.HIGH
    assert classifier.get_stats()['keyword_escalations'] == 1

def test_keyword_tier_never_lowers_oracle_answer():
    classifier = CrisisClassifier(ScriptedOracle(crisis="high"))
    assert run(classifier.classify("a perfectly calm sentence")) == RiskTier.HIGH

def test_oracle_failure_falls_back_to_keywords():
    classifier = CrisisClassifier(ScriptedOracle(crisis=OracleError("boom")))
    assert run(classifier.classify("I feel so lonely")) == RiskTier.LOW
    assert run(classifier.classify("nice weather")) == RiskTier.NONE
    assert classifier.get_stats()['oracle_failures'] == 2

def test_unavailable_oracle_uses_keywords():
    classifier = CrisisClassifier(UnavailableOracle())
    assert run(classifier.classify("I want to end my life")) == RiskTier.HIGH
    assert run(classifier.classify("Feeling overwhelmed today")) == RiskTier.LOW
    assert run(classifier.classify("What is mindfulness?")) == RiskTier.NONE

def test_curly_apostrophe_matches():
    classifier = CrisisClassifier(UnavailableOracle())
    assert classifier.keyword_tier("I can’t go on like this") == RiskTier.HIGH

def test_short_draft_not_screened():
    oracle = ScriptedOracle(crisis="high")
    classifier = CrisisClassifier(oracle)

    screening = run(classifier.screen_draft("  end it all  "))

    assert screening.screened is False
    assert screening.tier == RiskTier.NONE
    assert oracle.calls == []

def test_long_draft_screened():
    classifier = CrisisClassifier(ScriptedOracle(crisis="high"))

    screening = run(classifier.screen_draft("I don't think I can keep going"))

    assert screening.screened is True
    assert screening.show_distress_banner is True

def test_low_draft_shows_no_banner():
    classifier = CrisisClassifier(ScriptedOracle(crisis="low"))
    assert run(classifier.screen_draft("I've been crying for days")).show_distress_banner is False

def test_add_pattern():
    classifier = CrisisClassifier(UnavailableOracle())
    classifier.add_pattern(RiskTier.LOW, ["Burnt Out"])
    assert classifier.keyword_tier("so burnt out lately") == RiskTier.LOW
