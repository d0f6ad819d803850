import unittest

from puyo_rl.game import ChainResolver, Color, PuyoGrid, ScoringRules

R, G, B, Y, P = Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW, Color.PURPLE


def two_step_grid() -> PuyoGrid:
    """Blue column at col 0 with a red on top; three reds waiting on the floor."""
    grid = PuyoGrid(6, 12)
    for row in (8, 9, 10, 11):
        grid.set(0, row, B)
    grid.set(0, 7, R)
    for col in (1, 2, 3):
        grid.set(col, 11, R)
    return grid


class ScoringRulesTests(unittest.TestCase):
    def test_formula(self):
        rules = ScoringRules()
        self.assertEqual(rules.score_for_clear(4, 1), 40)
        self.assertEqual(rules.score_for_clear(5, 1), 55)
        self.assertEqual(rules.score_for_clear(4, 2), 80)
        self.assertEqual(rules.score_for_clear(6, 3), 6 * 10 * 4 + 10)
        self.assertEqual(rules.score_for_clear(0, 1), 0)


class ChainResolverTests(unittest.TestCase):
    def setUp(self):
        self.resolver = ChainResolver()

    def test_single_group_of_four(self):
        grid = PuyoGrid(6, 12)
        for col in range(4):
            grid.set(col, 11, R)
        result = self.resolver.resolve(grid)
        self.assertEqual(result.chain_count, 1)
        self.assertEqual(result.score, 40)
        self.assertEqual(grid.occupied_count(), 0)

    def test_group_of_five(self):
        grid = PuyoGrid(6, 12)
        for col in range(5):
            grid.set(col, 11, G)
        result = self.resolver.resolve(grid)
        self.assertEqual(result.score, 55)
        self.assertEqual(result.cleared_total, 5)

    def test_two_step_chain(self):
        grid = two_step_grid()
        result = self.resolver.resolve(grid)
        self.assertEqual(result.chain_count, 2)
        self.assertEqual([s.score for s in result.steps], [40, 80])
        self.assertEqual(result.score, 120)
        self.assertEqual(grid.occupied_count(), 0)

    def test_steps_expose_clearing_frame(self):
        grid = two_step_grid()
        steps = self.resolver.steps(grid)
        first = next(steps)
        self.assertEqual(first.chain, 1)
        self.assertEqual(first.cleared, {(0, 8), (0, 9), (0, 10), (0, 11)})
        # red has not fallen yet in the clearing frame
        self.assertEqual(first.grid[7, 0], int(R))
        second = next(steps)
        self.assertEqual(second.chain, 2)
        self.assertEqual(second.cleared_count, 4)
        self.assertIsNone(next(steps, None))

    def test_simultaneous_groups_clear_together(self):
        grid = PuyoGrid(6, 12)
        for col in range(4):
            grid.set(col, 11, R)
        for col in range(4):
            grid.set(col, 10, Y)
        result = self.resolver.resolve(grid)
        self.assertEqual(result.chain_count, 1)
        self.assertEqual(result.cleared_total, 8)
        self.assertEqual(result.score, 8 * 10 + 4 * 5)

    def test_no_match_settles_and_stops(self):
        grid = PuyoGrid(6, 12)
        for col, color in enumerate([R, G, B, Y, R]):
            grid.set(col, 11, color)
        grid.set(5, 3, P)
        grid.set(5, 2, G)
        result = self.resolver.resolve(grid)
        self.assertEqual(result.chain_count, 0)
        self.assertEqual(result.score, 0)
        self.assertEqual(result.steps, [])
        self.assertEqual(grid.get(5, 11), P)
        self.assertEqual(grid.get(5, 10), G)

    def test_three_is_not_enough(self):
        grid = PuyoGrid(6, 12)
        for row in (9, 10, 11):
            grid.set(2, row, B)
        self.assertEqual(self.resolver.find_matches(grid), set())

    def test_custom_group_size(self):
        grid = PuyoGrid(6, 12)
        for row in (10, 11):
            grid.set(2, row, B)
        result = ChainResolver(min_group_size=2).resolve(grid)
        self.assertEqual(result.chain_count, 1)


if __name__ == "__main__":
    unittest.main()
