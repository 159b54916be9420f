"""
Unit tests for the scoring engine.

Covers each score component (quality, confidence, diversity, persona), the
two attraction weighting regimes, restaurant weighting, rounding, ordering
and determinism.
"""

import itertools
import unittest

from fixtures import make_candidate

from map_planner.scoring.scoring import (
    calculate_confidence_score,
    calculate_quality_score,
    describe_weights,
    round_score,
    score_attractions,
    score_restaurants,
)


def by_id(results, place_id):
    return next(r for r in results if r.candidate.id == place_id)


class TestQualityScore(unittest.TestCase):
    """Quality blends rating (60%) with log-scaled review volume (40%)."""

    def test_formula(self):
        result1 = score_attractions([make_candidate(rating=4.5, count=1000)])
        result2 = score_attractions([make_candidate(rating=5.0, count=10000)])

        # (4.5/5 * 60) + (log10(1001)/5 * 40) = 54 + 24.0 = 78.0
        self.assertEqual(result1[0].breakdown.quality, 78.0)
        # (5.0/5 * 60) + (log10(10001)/5 * 40) = 60 + 32.0 = 92.0
        self.assertEqual(result2[0].breakdown.quality, 92.0)

    def test_missing_or_zero_rating(self):
        self.assertEqual(calculate_quality_score(make_candidate(rating=None, count=1000)), 0)
        self.assertEqual(calculate_quality_score(make_candidate(rating=0, count=1000)), 0)

    def test_missing_or_zero_reviews(self):
        self.assertEqual(calculate_quality_score(make_candidate(rating=4.5, count=None)), 0)
        self.assertEqual(calculate_quality_score(make_candidate(rating=4.5, count=0)), 0)

    def test_capped_at_100(self):
        quality = calculate_quality_score(make_candidate(rating=5.0, count=10**9))
        self.assertEqual(quality, 100.0)


class TestConfidenceScore(unittest.TestCase):
    def test_thresholds(self):
        cases = {150: 100, 101: 100, 100: 70, 50: 70, 21: 70, 20: 40, 15: 40, 0: 40, None: 40}
        for count, expected in cases.items():
            with self.subTest(count=count):
                self.assertEqual(calculate_confidence_score(make_candidate(count=count)), expected)


class TestDiversityScore(unittest.TestCase):
    """Diversity is driven by the rarest tag a place carries."""

    def setUp(self):
        self.attractions = [
            make_candidate(id="common-1", types=["museum"]),
            make_candidate(id="common-2", types=["museum"]),
            make_candidate(id="common-3", types=["museum"]),
            make_candidate(id="rare-1", types=["sculpture"]),
        ]

    def test_rare_type_scores_high(self):
        result = score_attractions(self.attractions)
        # 100 - (1/3)*100 = 66.7
        self.assertEqual(by_id(result, "rare-1").breakdown.diversity, 66.7)

    def test_common_type_scores_zero(self):
        result = score_attractions(self.attractions)
        self.assertEqual(by_id(result, "common-1").breakdown.diversity, 0)

    def test_minimum_frequency_rewards_rare_tag(self):
        attractions = [
            make_candidate(id="mixed-1", types=["museum", "sculpture"]),
            make_candidate(id="common-1", types=["museum"]),
            make_candidate(id="common-2", types=["museum"]),
        ]
        result = score_attractions(attractions)
        self.assertEqual(by_id(result, "mixed-1").breakdown.diversity, 66.7)

    def test_shared_single_tag_gives_zero_for_all(self):
        attractions = [make_candidate(id=f"p{i}", types=["park"]) for i in range(5)]
        result = score_attractions(attractions)
        self.assertTrue(all(r.breakdown.diversity == 0 for r in result))

    def test_single_candidate_with_tag(self):
        # The formula gives 0 here (min == max frequency), not the 100 sometimes quoted for one-place batches.
        result = score_attractions([make_candidate(types=["museum"])])
        self.assertEqual(result[0].breakdown.diversity, 0)

    def test_no_tags_anywhere_gives_100(self):
        result = score_attractions([make_candidate(id="a", types=[]), make_candidate(id="b", types=[])])
        self.assertTrue(all(r.breakdown.diversity == 100 for r in result))

    def test_untagged_candidate_in_tagged_batch_gives_100(self):
        result = score_attractions([make_candidate(id="a", types=[]), make_candidate(id="b")])
        self.assertEqual(by_id(result, "a").breakdown.diversity, 100)


class TestPersonaScore(unittest.TestCase):
    def test_match_scores_100(self):
        result = score_attractions([make_candidate(types=["museum", "tourist_attraction"])], ["history_buff"])
        self.assertEqual(result[0].breakdown.persona, 100)

    def test_no_match_scores_10(self):
        result = score_attractions(
            [make_candidate(types=["amusement_park", "tourist_attraction"])], ["history_buff"]
        )
        self.assertEqual(result[0].breakdown.persona, 10)

    def test_foodie_never_matches_attractions(self):
        result = score_attractions([make_candidate(types=["restaurant", "food"])], ["foodie_traveler"])
        self.assertEqual(result[0].breakdown.persona, 10)

    def test_best_matching_persona_wins(self):
        result = score_attractions(
            [make_candidate(types=["museum", "art_gallery"])], ["adventure_seeker", "art_enthusiast"]
        )
        self.assertEqual(result[0].breakdown.persona, 100)

    def test_persona_ids_are_case_insensitive(self):
        result = score_attractions([make_candidate(types=["museum"])], ["HISTORY_BUFF"])
        self.assertEqual(result[0].breakdown.persona, 100)

    def test_no_persona_omits_component(self):
        self.assertIsNone(score_attractions([make_candidate()])[0].breakdown.persona)
        self.assertIsNone(score_attractions([make_candidate()], [])[0].breakdown.persona)

    def test_general_tourist_disables_persona_scoring(self):
        result = score_attractions([make_candidate()], ["general_tourist", "history_buff"])
        self.assertIsNone(result[0].breakdown.persona)


class TestWeightedTotal(unittest.TestCase):
    def test_persona_weights(self):
        candidate = make_candidate(rating=5.0, count=200, types=["museum"])
        result = score_attractions([candidate], ["history_buff"])
        # 78.43*0.5 + 100*0.1 + 0*0.2 + 100*0.2 = 69.2
        self.assertEqual(result[0].score, 69.2)

    def test_persona_weights_without_match(self):
        candidate = make_candidate(rating=4.5, count=1000, types=["amusement_park"])
        result = score_attractions([candidate], ["history_buff"])
        # 78.0*0.5 + 10*0.1 + 0*0.2 + 100*0.2 = 60.0
        self.assertEqual(result[0].score, 60.0)

    def test_no_persona_weights(self):
        candidate = make_candidate(rating=5.0, count=200, types=["museum"])
        result = score_attractions([candidate])
        # 78.43*0.6 + 0*0.25 + 100*0.15 = 62.06
        self.assertEqual(result[0].score, 62.1)

    def test_general_tourist_uses_no_persona_weights(self):
        candidate = make_candidate(rating=5.0, count=200, types=["museum"])
        plain = score_attractions([candidate])
        general = score_attractions([candidate], ["general_tourist", "history_buff"])
        self.assertEqual(plain[0].score, general[0].score)

    def test_museum_among_restaurants(self):
        museum = make_candidate(id="museum", rating=4.5, count=1000, types=["museum"])
        others = [make_candidate(id=f"r{i}", rating=4.0, count=50, types=["restaurant"]) for i in range(9)]

        result = score_attractions([museum] + others)
        scored = by_id(result, "museum")

        self.assertEqual(scored.breakdown.quality, 78.0)
        self.assertEqual(scored.breakdown.confidence, 100)
        # 100 * (1 - 1/9)
        self.assertEqual(scored.breakdown.diversity, 88.9)
        # 78.0*0.6 + 88.9*0.25 + 100*0.15
        self.assertEqual(scored.score, 84.0)
        self.assertEqual(result[0].candidate.id, "museum")

    def test_restaurant_weights(self):
        result = score_restaurants([make_candidate(rating=4.5, count=1000, types=["restaurant"])])
        breakdown = result[0].breakdown
        # 78.0*0.7 + 100*0.3
        self.assertEqual(breakdown.total, 84.6)
        self.assertIsNone(breakdown.diversity)
        self.assertIsNone(breakdown.persona)


class TestOrderingAndProperties(unittest.TestCase):
    def test_sorted_descending(self):
        attractions = [
            make_candidate(id="low-score", rating=3.0, count=10, types=["park"]),
            make_candidate(id="high-score", rating=5.0, count=10000, types=["museum"]),
            make_candidate(id="medium-score", rating=4.0, count=100, types=["art_gallery"]),
        ]
        result = score_attractions(attractions, ["history_buff"])
        self.assertEqual([r.candidate.id for r in result], ["high-score", "medium-score", "low-score"])

    def test_ties_keep_input_order(self):
        attractions = [make_candidate(id=f"same-{i}", types=["park"]) for i in range(4)]
        result = score_attractions(attractions)
        self.assertEqual([r.candidate.id for r in result], ["same-0", "same-1", "same-2", "same-3"])

    def test_deterministic(self):
        attractions = [
            make_candidate(id="a", rating=4.1, count=37, types=["museum", "park"]),
            make_candidate(id="b", rating=4.8, count=2200, types=["park"]),
            make_candidate(id="c", rating=None, count=None, types=["zoo"]),
        ]
        first = score_attractions(attractions, ["nature_lover"])
        second = score_attractions(attractions, ["nature_lover"])
        self.assertEqual(
            [r.model_dump_json() for r in first], [r.model_dump_json() for r in second]
        )

    def test_components_stay_in_bounds(self):
        ratings = [None, 0, 1.0, 3.3, 5.0]
        counts = [None, 0, 5, 21, 101, 10**7]
        tag_sets = [[], ["museum"], ["park", "museum"], ["zoo"]]
        candidates = [
            make_candidate(id=f"c{i}", rating=r, count=c, types=t)
            for i, (r, c, t) in enumerate(itertools.product(ratings, counts, tag_sets))
        ]

        for personas in (None, ["history_buff"]):
            for item in score_attractions(candidates, personas):
                values = item.breakdown.model_dump(exclude_none=True).values()
                self.assertTrue(all(0 <= v <= 100 for v in values), item.breakdown)
        for item in score_restaurants(candidates):
            values = item.breakdown.model_dump(exclude_none=True).values()
            self.assertTrue(all(0 <= v <= 100 for v in values), item.breakdown)

    def test_round_half_up(self):
        self.assertEqual(round_score(2.25), 2.3)
        self.assertEqual(round_score(84.6025), 84.6)
        self.assertEqual(round_score(0.05), 0.1)

    def test_describe_weights(self):
        self.assertEqual(describe_weights("restaurants")["quality"]["weight"], "70% weight")
        self.assertIn("persona", describe_weights("attractions", ["history_buff"]))
        self.assertNotIn("persona", describe_weights("attractions"))
        self.assertEqual(describe_weights("attractions")["diversity"]["weight"], "25% weight")


if __name__ == "__main__":
    unittest.main()
