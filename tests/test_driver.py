import unittest

from puyo_rl.game import Color, Command, GameConfig, GameDriver, Phase, Piece, PuyoGame

R, G, B = Color.RED, Color.GREEN, Color.BLUE


def started_driver(**config) -> GameDriver:
    driver = GameDriver(PuyoGame(GameConfig(random_seed=99, **config)))
    driver.start()
    return driver


class FallTimerTests(unittest.TestCase):
    def test_fall_interval(self):
        driver = started_driver()
        game = driver.game
        driver.update(999)
        self.assertEqual(game.current_piece.row, 0)
        driver.update(1)
        self.assertEqual(game.current_piece.row, 1)

    def test_no_fall_while_paused(self):
        driver = started_driver()
        driver.send(Command.TOGGLE_PAUSE)
        driver.update(driver.game.config.speed_up_period_ms * 2)
        self.assertEqual(driver.game.current_piece.row, 0)
        self.assertEqual(driver.game.fall_interval_ms, 1000.0)

    def test_speed_escalation(self):
        driver = started_driver(speed_up_period_ms=10000.0)
        driver.update(9999)
        self.assertEqual(driver.game.fall_interval_ms, 1000.0)
        driver.update(1)
        self.assertAlmostEqual(driver.game.fall_interval_ms, 1000.0 / 1.1)

    def test_title_does_nothing(self):
        driver = GameDriver(PuyoGame(GameConfig(random_seed=1)))
        driver.update(60000)
        self.assertEqual(driver.game.phase, Phase.TITLE)
        self.assertEqual(driver.game.fall_interval_ms, 1000.0)


class ResolutionTimingTests(unittest.TestCase):
    def _lock_two_step_chain(self, driver: GameDriver) -> None:
        game = driver.game
        for row in (9, 10, 11):
            game.grid.set(0, row, B)
        for col in (1, 2, 3):
            game.grid.set(col, 11, R)
        game.current_piece = Piece(B, R, 0, 8, 0)
        driver.send(Command.MOVE_DOWN)

    def test_steps_are_paced(self):
        driver = started_driver()
        game = driver.game
        self._lock_two_step_chain(driver)
        self.assertTrue(game.animating)
        self.assertEqual((game.chain_counter, game.score), (1, 40))
        self.assertEqual(len(game.clearing), 4)
        driver.update(249)
        self.assertEqual((game.chain_counter, game.score), (1, 40))
        driver.update(1)
        self.assertEqual((game.chain_counter, game.score), (2, 120))
        self.assertIsNone(game.current_piece)
        driver.update(250)
        self.assertFalse(game.animating)
        self.assertIsNotNone(game.current_piece)
        self.assertEqual(game.grid.occupied_count(), 0)
        self.assertTrue(driver.chain_reset_scheduled)

    def test_pause_does_not_freeze_resolution(self):
        driver = started_driver()
        game = driver.game
        self._lock_two_step_chain(driver)
        driver.send(Command.TOGGLE_PAUSE)
        driver.update(250)
        self.assertEqual(game.score, 120)
        driver.update(250)
        self.assertFalse(game.animating)
        self.assertEqual(game.phase, Phase.PAUSED)

    def test_new_chain_supersedes_reset(self):
        driver = started_driver()
        game = driver.game
        self._lock_two_step_chain(driver)
        driver.update(500)
        self.assertTrue(driver.chain_reset_scheduled)
        for col in (1, 2, 3):
            game.grid.set(col, 11, G)
        game.current_piece = Piece(G, B, 0, 11, 0)
        driver.send(Command.MOVE_DOWN)
        self.assertFalse(driver.chain_reset_scheduled)
        self.assertEqual(game.chain_counter, 1)


class EndToEndTests(unittest.TestCase):
    def test_l_shape_clear_and_chain_cooldown(self):
        driver = started_driver(chain_reset_delay_ms=5000.0)
        game = driver.game
        game.grid.set(3, 11, R)
        game.grid.set(4, 11, R)
        game.current_piece = Piece(R, R, 2, 0, 0)
        while game.current_piece is not None and not game.animating:
            driver.send(Command.MOVE_DOWN)
        self.assertEqual(game.score, 40)
        self.assertEqual(game.chain_counter, 1)
        for cell in [(2, 10), (2, 11), (3, 11), (4, 11)]:
            self.assertTrue(game.grid.is_empty(*cell))
        driver.update(250)
        self.assertFalse(game.animating)
        driver.update(4999)
        self.assertEqual(game.chain_counter, 1)
        driver.update(1)
        self.assertEqual(game.chain_counter, 0)
        self.assertEqual(game.phase, Phase.ACTIVE)

    def test_quiet_locks_do_not_postpone_chain_reset(self):
        driver = started_driver(chain_reset_delay_ms=5000.0)
        game = driver.game
        game.grid.set(3, 11, R)
        game.grid.set(4, 11, R)
        game.current_piece = Piece(R, R, 2, 11, 0)
        driver.send(Command.MOVE_DOWN)
        self.assertEqual(game.chain_counter, 1)
        driver.update(250)
        self.assertTrue(driver.chain_reset_scheduled)

        def quiet_lock(col: int) -> None:
            locked = game.pieces_locked
            game.current_piece = Piece(G, B, col, 1, 0)
            while game.pieces_locked == locked:
                driver.send(Command.MOVE_DOWN)
            self.assertFalse(game.animating)

        driver.update(3000)
        quiet_lock(5)
        self.assertEqual(game.chain_counter, 1)
        driver.update(1999)
        quiet_lock(0)
        self.assertEqual(game.chain_counter, 1)
        driver.update(1)
        self.assertEqual(game.chain_counter, 0)
        self.assertFalse(driver.chain_reset_scheduled)
        driver.update(3000)
        quiet_lock(5)
        self.assertFalse(driver.chain_reset_scheduled)
        self.assertFalse(game.chain_reset_pending)


if __name__ == "__main__":
    unittest.main()
