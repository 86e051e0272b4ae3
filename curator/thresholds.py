"""Scoring levels shared by the similarity scorer and the matcher.

The scorer emits a handful of discrete levels and the matcher's decision
table is written against exactly those levels, so both sides read them from
here.
"""
from __future__ import annotations

# Similarity levels (0..1) produced by the scorer.
EXACT_SIMILARITY = 1.0
CONTAINED_TITLE_SIMILARITY = 0.9
STRONG_OVERLAP_SIMILARITY = 0.8
PARTIAL_OVERLAP_SIMILARITY = 0.7
SAME_DOMAIN_SIMILARITY = 0.7

# Jaccard ratios (exclusive lower bounds) for the word-overlap levels.
STRONG_OVERLAP_RATIO = 0.7
PARTIAL_OVERLAP_RATIO = 0.5

# Title tokens shorter than this are ignored by the word-overlap rule.
MIN_TOKEN_LENGTH = 3

# Combined scores produced by the matcher's decision table.
EXACT_SCORE = 2.0
TITLE_AND_DOMAIN_SCORE = 1.8
TITLE_ONLY_SCORE = 1.5
OVERLAP_AND_DOMAIN_SCORE = 1.3
OVERLAP_AND_URL_SCORE = 1.2

# A candidate is accepted at or above this score.
ACCEPT_SCORE = OVERLAP_AND_URL_SCORE
# Lower bound of the "fuzzy" label.
FUZZY_SCORE = OVERLAP_AND_DOMAIN_SCORE
