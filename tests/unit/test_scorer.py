"""评分与选牌测试"""
import pytest
import numpy as np

from core.cards import elo_to_value
from core.colors import NUM_COMBINATIONS, combination_index
from bots.config import BotConfig
from bots.scorer import BotScore, OracleResult, Scorer, land_colors
from bots.synergy import SynergyCache


@pytest.fixture(name="scorer")
def fixture_scorer():
    return Scorer()


def fixed_model(probabilities, default=1.0):
    """按卡名返回固定概率，与地牌分布无关"""
    def model(card, lands):
        return probabilities.get(card.name, default)
    return model


class TestLandColors:
    """land_colors 测试"""

    def test_threshold(self):
        lands = np.zeros(NUM_COMBINATIONS, dtype=np.int64)
        lands[combination_index("W")] = 17
        lands[combination_index("WU")] = 2
        assert land_colors(lands) == ["W"]
        assert land_colors(lands, min_sources=1) == ["W", "U"]

    def test_empty(self):
        assert land_colors(np.zeros(NUM_COMBINATIONS)) == []


class TestEvaluate:
    """evaluate_cards_or_pool 测试"""

    def test_single_card_empty_state(self, scorer, make_state, idx):
        knight = idx["White Knight"]
        result = scorer.evaluate_cards_or_pool(knight, make_state(seen=[knight], cards_in_pack=[knight]))

        contributions = {r.title: r.contribution for r in result.oracle_results}
        assert contributions["Rating"] == pytest.approx(10 * elo_to_value(1400))
        assert contributions["Openness"] == pytest.approx(4 * elo_to_value(1400))
        assert contributions["Pick Synergy"] == 0.0
        assert contributions["Internal Synergy"] == 0.0
        assert contributions["Colors"] == 0.0
        assert result.score == pytest.approx(14 * elo_to_value(1400))
        assert result.nonland_probability is None
        assert result.colors == []

    def test_unseen_candidate_has_no_probability(self, scorer, make_state, idx):
        knight, twin, bolt = idx["White Knight"], idx["Twin Knight"], idx["Red Bolt"]
        state = make_state(picked=[knight, twin])

        result = scorer.evaluate_cards_or_pool(bolt, state)
        pool = scorer.evaluate_cards_or_pool(None, state)

        assert result.bot_state.probabilities[bolt] == 0.0
        assert result.bot_state.total_probability == pytest.approx(2.0)
        internal = {r.title: r.value for r in result.oracle_results}["Internal Synergy"]
        assert internal == pytest.approx(40.0)
        assert internal == pytest.approx({r.title: r.value for r in pool.oracle_results}["Internal Synergy"])

    def test_seen_candidate_has_probability(self, scorer, make_state, idx):
        bolt = idx["Red Bolt"]
        result = scorer.evaluate_cards_or_pool(bolt, make_state(seen=[bolt]))
        assert result.bot_state.probabilities[bolt] == 1.0

    def test_scalar_and_list_agree(self, scorer, make_state, idx):
        state = make_state(picked=[idx["Blue Sage"]])
        a = scorer.evaluate_cards_or_pool(idx["White Knight"], state)
        b = scorer.evaluate_cards_or_pool([idx["White Knight"]], state)
        assert a.score == b.score

    def test_oracle_breakdown(self, scorer, make_state, idx):
        result = scorer.evaluate_cards_or_pool(idx["Red Bolt"], make_state(pack_num=1))
        assert [r.title for r in result.oracle_results] == [
            "Rating", "Pick Synergy", "Internal Synergy", "Colors", "Openness"
        ]
        assert result.oracle_results[0].weight == pytest.approx(8.0)
        assert result.score == pytest.approx(sum(r.weight * r.value for r in result.oracle_results))

    def test_pool_only(self, scorer, make_state, idx):
        state = make_state(basics=[idx["Plains"]])
        result = scorer.evaluate_cards_or_pool(None, state)

        assert result.lands_by_combination() == {"W": 17}
        assert result.colors == ["W"]
        assert result.nonland_probability == 0.0
        assert result.score == 0.0

    def test_pool_ignores_lands_and_colorless(self, scorer, make_state, idx):
        state = make_state(
            picked=[idx["White Knight"], idx["Mind Stone"], idx["Hallowed Fountain"]],
            basics=[idx["Plains"]],
        )
        result = scorer.evaluate_cards_or_pool([], state)
        assert result.nonland_probability == 1.0

    def test_pool_nonland_slots(self, make_state, idx):
        scorer = Scorer(
            config=BotConfig(nonland_slots=1),
            casting_model=fixed_model({"White Knight": 0.9, "Blue Sage": 0.6}),
        )
        state = make_state(picked=[idx["White Knight"], idx["Blue Sage"]])
        result = scorer.evaluate_cards_or_pool(None, state)

        assert result.nonland_probability == pytest.approx(0.6)
        raw = sum(r.contribution for r in result.oracle_results)
        assert result.score == pytest.approx(raw * 0.6)

    def test_candidate_probability_used(self, make_state, idx):
        knight = idx["White Knight"]
        scorer = Scorer(casting_model=fixed_model({"White Knight": 0.4}))
        result = scorer.evaluate_cards_or_pool(knight, make_state(seen=[knight]))
        assert result.bot_state.probabilities[knight] == pytest.approx(0.4 ** 2)

    def test_lands_bounded(self, scorer, make_state, idx):
        state = make_state(
            picked=[idx["Hallowed Fountain"]],
            basics=[idx["Plains"], idx["Island"], idx["Swamp"]],
        )
        result = scorer.evaluate_cards_or_pool(idx["Flooded Strand"], state)
        assert result.bot_state.total_lands == 17
        assert np.all(result.lands <= result.bot_state.available_lands)

    def test_deterministic(self, make_state, idx):
        state = make_state(
            picked=[idx["White Knight"], idx["Blue Sage"]],
            basics=[idx["Plains"], idx["Island"], idx["Mountain"]],
            pick_num=4,
        )
        a = Scorer().evaluate_cards_or_pool(idx["Red Bolt"], state)
        b = Scorer().evaluate_cards_or_pool(idx["Red Bolt"], state)
        assert a.score == b.score
        np.testing.assert_array_equal(a.lands, b.lands)

    def test_to_dict(self, scorer, make_state, idx):
        result = scorer.evaluate_cards_or_pool(None, make_state(basics=[idx["Island"]]))
        d = result.to_dict()
        assert set(d) == {"score", "oracles", "colors", "lands", "nonland_probability"}
        assert d["lands"] == {"U": 17}
        assert d["oracles"][0]["title"] == "Rating"


class TestBotPick:
    """calculate_bot_pick 测试"""

    def test_synergy_decides(self, scorer, pack_state, idx):
        state = pack_state([idx["Twin Knight"], idx["Red Bolt"]], picked=[idx["White Knight"]])
        assert scorer.calculate_bot_pick(state) == idx["Twin Knight"]

    def test_reverse(self, scorer, pack_state, idx):
        state = pack_state([idx["Twin Knight"], idx["Red Bolt"]], picked=[idx["White Knight"]])
        assert scorer.calculate_bot_pick(state, reverse=True) == idx["Red Bolt"]

    def test_identical_cards_tie(self, scorer, pack_state, idx):
        state = pack_state([idx["White Knight"], idx["Twin Knight"]])
        ranking = scorer.rank_pack(state)
        assert ranking[0][1] == ranking[1][1]
        # 同分保持包内顺序
        assert [ci for ci, _ in ranking] == [idx["White Knight"], idx["Twin Knight"]]

    def test_rank_pack_sorted(self, scorer, pack_state, idx):
        state = pack_state([idx["Mind Stone"], idx["Red Bolt"], idx["Blue Sage"]])
        ranking = scorer.rank_pack(state)
        scores = [score for _, score in ranking]
        assert scores == sorted(scores, reverse=True)
        assert ranking[0][0] == idx["Red Bolt"]

    def test_score_pack_keeps_results(self, scorer, pack_state, idx):
        state = pack_state([idx["Twin Knight"], idx["Red Bolt"]], picked=[idx["White Knight"]])
        ranking = scorer.score_pack(state)
        assert [ci for ci, _ in ranking] == [idx["Twin Knight"], idx["Red Bolt"]]
        assert all(isinstance(result, BotScore) for _, result in ranking)
        assert scorer.rank_pack(state) == [(ci, result.score) for ci, result in ranking]
        assert ranking[0][1].score == scorer.evaluate_cards_or_pool(idx["Twin Knight"], state).score

    def test_skips_empty_slots(self, scorer, pack_state, idx):
        state = pack_state([None, idx["Blue Sage"]])
        assert scorer.calculate_bot_pick(state) == idx["Blue Sage"]

    def test_empty_pack(self, scorer, make_state):
        with pytest.raises(ValueError):
            scorer.calculate_bot_pick(make_state())


class TestBotPickFromOptions:
    """calculate_bot_pick_from_options 测试"""

    def test_lowest_bundle(self, scorer, pack_state, idx):
        state = pack_state([idx["Twin Knight"], idx["Red Bolt"]], picked=[idx["White Knight"]])
        assert scorer.calculate_bot_pick_from_options([[0], [1]], state) == [(idx["Red Bolt"], 1)]

    def test_score_options_ascending(self, scorer, pack_state, idx):
        state = pack_state([idx["Twin Knight"], idx["Red Bolt"]], picked=[idx["White Knight"]])
        scored = scorer.score_options([[0], [1], [7]], state)
        assert [bundle for bundle, _ in scored] == [[(idx["Red Bolt"], 1)], [(idx["Twin Knight"], 0)]]
        assert scored[0][1].score < scored[1][1].score

    def test_bundle_positions(self, scorer, pack_state, idx):
        state = pack_state([idx["Red Bolt"], idx["Mind Stone"], idx["Blue Sage"]])
        result = scorer.calculate_bot_pick_from_options([[0, 2], [1, 2]], state)
        assert result == [(idx["Mind Stone"], 1), (idx["Blue Sage"], 2)]

    def test_invalid_positions_skipped(self, scorer, pack_state, idx):
        state = pack_state([idx["Blue Sage"], None])
        result = scorer.calculate_bot_pick_from_options([[1, 5], [0, 9]], state)
        assert result == [(idx["Blue Sage"], 0)]

    def test_no_options(self, scorer, pack_state, idx):
        state = pack_state([idx["Blue Sage"], None])
        with pytest.raises(ValueError):
            scorer.calculate_bot_pick_from_options([[1], [3]], state)
        with pytest.raises(ValueError):
            scorer.calculate_bot_pick_from_options([], state)


class TestScorerCache:
    """协同缓存注入测试"""

    def test_shared_cache(self, cards, idx):
        cache = SynergyCache()
        a = Scorer(synergy_cache=cache)
        b = Scorer(synergy_cache=cache)
        value = a.synergy(idx["White Knight"], idx["Twin Knight"], cards)
        assert value == pytest.approx(10.0)
        assert len(cache) == 1
        assert b.synergy(idx["Twin Knight"], idx["White Knight"], cards) == value
        assert len(cache) == 1


class TestResultTypes:
    """结果类型测试"""

    def test_oracle_result(self):
        result = OracleResult(title="Rating", tooltip="t", weight=2.0, value=3.5)
        assert result.contribution == 7.0
        assert result.to_dict() == {"title": "Rating", "tooltip": "t", "weight": 2.0, "value": 3.5}

    def test_lands_by_combination(self, scorer, make_state, idx):
        result = scorer.evaluate_cards_or_pool(None, make_state(basics=[idx["Wastes"]]))
        assert isinstance(result, BotScore)
        assert result.lands_by_combination() == {"": 17}
