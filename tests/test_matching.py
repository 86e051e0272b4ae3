import pytest

from curator.matching import classify_score, combine_scores, find_best_match, score_pair
from curator.models import Resource


def make_resource(title: str, source: str, weeks: int | None = None) -> Resource:
    return Resource(title=title, source=source, type="Book", weeks_on_list=weeks)


@pytest.mark.parametrize(
    "title_sim, url_sim, expected",
    [
        (1.0, 1.0, 2.0),
        (1.0, 0.7, 1.8),
        (0.9, 1.0, 1.8),
        (0.9, 0.0, 1.5),
        (1.0, 0.0, 1.5),
        (0.8, 0.7, 1.3),
        (0.8, 1.0, 1.3),
        (0.7, 1.0, 1.2),
        (0.7, 0.7, 0.0),
        (0.8, 0.0, 0.0),
        (0.0, 1.0, 0.0),
    ],
)
def test_combine_scores_follows_decision_table(title_sim, url_sim, expected):
    assert combine_scores(title_sim, url_sim) == expected


@pytest.mark.parametrize(
    "score, label",
    [(2.0, "exact"), (1.8, "fuzzy"), (1.5, "fuzzy"), (1.3, "fuzzy"), (1.2, "weak"), (0.0, "none")],
)
def test_classify_score(score, label):
    assert classify_score(score) == label


def test_score_pair_exact_after_normalisation():
    new = make_resource("Clean Code - A Handbook", "http://www.example.com/book/")
    prior = make_resource("Clean Code: A Handbook", "https://example.com/book")
    assert score_pair(new, prior) == (2.0, "exact")


def test_find_best_match_prefers_highest_score():
    new = make_resource("Clean Code", "https://example.com/clean-code")
    priors = [
        make_resource("Clean Code: A Handbook", "https://other.org/clean"),
        make_resource("Clean Code: A Handbook", "https://example.com/book"),
    ]

    result = find_best_match(new, priors)
    assert result.accepted
    assert result.candidate is priors[1]
    assert result.score == 1.8
    assert result.strength == "fuzzy"


def test_find_best_match_keeps_first_candidate_on_tie():
    new = make_resource("Refactoring", "https://martinfowler.com/books/refactoring.html")
    first = make_resource("Refactoring", "https://martinfowler.com/books/refactoring.html", weeks=2)
    second = make_resource("Refactoring", "https://martinfowler.com/books/refactoring.html", weeks=9)

    result = find_best_match(new, [first, second])
    assert result.candidate is first
    assert result.strength == "exact"


def test_find_best_match_accepts_weak_match_at_threshold():
    new = make_resource("Designing Data Intensive Apps", "https://dataintensive.net")
    prior = make_resource("Designing Data-Intensive Applications", "https://dataintensive.net/")

    result = find_best_match(new, [prior])
    assert result.accepted
    assert result.score == 1.2
    assert result.strength == "weak"


def test_find_best_match_rejects_partial_overlap_on_same_domain():
    new = make_resource("Designing Data Intensive Apps", "https://dataintensive.net/preview")
    prior = make_resource("Designing Data-Intensive Applications", "https://dataintensive.net")

    result = find_best_match(new, [prior])
    assert not result.accepted
    assert result.candidate is None
    assert result.strength == "none"


def test_find_best_match_without_priors():
    result = find_best_match(make_resource("Anything", "https://a.io"), [])
    assert result.candidate is None
    assert result.score == 0.0
    assert not result.accepted
