import pytest

from c4term.game.rules import ConnectFourGame
from c4term.interfaces.keys import Command, KeyDecoder, read_command
from c4term.utils import ROWS, COLS, Player, GameResult, DropResult

L, R, D, Q, M = (Command.MOVE_LEFT, Command.MOVE_RIGHT, Command.DROP,
                 Command.QUIT, Command.MALFORMED)

# Player one stacks column 0 while player two plays column 1
VERTICAL_WIN = [D, R, D, D, R, D, D, R, D, D]


class RecordingRenderer:
    def __init__(self):
        self.frames = []

    def draw(self, game):
        self.frames.append((game.board.get_state(), game.cursor, game.result))


def run(game, commands):
    results = [game.apply(command) for command in commands]
    return results


# --------------------------
# Cursor
# --------------------------

def test_cursor_starts_at_first_column():
    assert ConnectFourGame().cursor == 0


def test_cursor_wraps_right_edge_to_left():
    game = ConnectFourGame()
    game.cursor = COLS - 1
    game.apply(R)
    assert game.cursor == 0


def test_cursor_wraps_left_edge_to_right():
    game = ConnectFourGame()
    game.apply(L)
    assert game.cursor == COLS - 1


def test_cursor_moves_do_not_touch_board():
    game = ConnectFourGame()
    run(game, [R, R, L, R, R, R, R, R, R, R])
    assert game.cursor == 1
    assert game.board.count_tokens() == 0
    assert game.board.turn == 0


def test_cursor_resets_after_successful_drop():
    game = ConnectFourGame()
    run(game, [R, R, R, D])
    assert game.board.cell(ROWS - 1, 3) == Player.ONE
    assert game.cursor == 0
    assert game.get_current_player() == Player.TWO


# --------------------------
# Drops
# --------------------------

def test_full_column_is_reported_without_state_change():
    game = ConnectFourGame()
    run(game, [D] * ROWS)
    assert game.result == GameResult.IN_PROGRESS
    before = game.board.copy()

    assert game.drop_at_cursor() == DropResult.COLUMN_FULL
    assert game.board == before
    assert game.message == "Column 1 is full"
    assert game.get_current_player() == Player.ONE

    game.apply(R)
    assert game.message is None


def test_malformed_input_is_ignored():
    game = ConnectFourGame()
    run(game, [R, M, M])
    assert game.cursor == 1
    assert game.board.count_tokens() == 0


def test_vertical_win_through_commands():
    game = ConnectFourGame()
    assert all(run(game, VERTICAL_WIN))

    assert game.is_game_over()
    assert game.result == GameResult.PLAYER_ONE_WIN
    assert game.get_winner() == Player.ONE
    assert set(game.win_line.cells) == {(ROWS - 1 - i, 0) for i in range(4)}
    assert game.scores[GameResult.PLAYER_ONE_WIN] == 1
    assert game.games_completed == 1


def test_game_over_screen_only_accepts_replay_or_quit():
    game = ConnectFourGame()
    run(game, VERTICAL_WIN)
    state = game.board.copy()

    assert all(run(game, [L, R, M]))
    assert game.board == state
    assert game.is_game_over()

    assert game.apply(D)
    assert game.result == GameResult.IN_PROGRESS
    assert game.board.count_tokens() == 0
    assert game.win_line is None
    assert game.scores[GameResult.PLAYER_ONE_WIN] == 1


def test_draw_through_commands(board_from_rows, draw_rows):
    # strictly alternating order that fills the board into the draw pattern
    columns = [3] + [0] * 6 + [1] * 6 + [2] * 6 + [6] * 6 + [3] * 5 + [4] * 6 + [5] * 6
    game = ConnectFourGame()
    for column in columns:
        assert game.result == GameResult.IN_PROGRESS
        run(game, [R] * column + [D])
        assert game.win_line is None

    assert game.board == board_from_rows(draw_rows)
    assert game.result == GameResult.DRAW
    assert game.get_winner() is None
    assert game.scores[GameResult.DRAW] == 1


# --------------------------
# Quit and the session loop
# --------------------------

@pytest.mark.parametrize("before", [[], [R, D], [R, R, D, L]])
def test_quit_ends_session_without_mutation(before):
    game = ConnectFourGame()
    run(game, before)
    state = game.board.copy()
    assert game.apply(Q) is False
    assert game.board == state


def test_play_renders_before_each_command():
    renderer = RecordingRenderer()
    game = ConnectFourGame(renderer)
    commands = iter([R, D, Q])

    result = game.play(lambda: next(commands))

    assert result == GameResult.IN_PROGRESS
    assert len(renderer.frames) == 3
    assert [cursor for _, cursor, _ in renderer.frames] == [0, 1, 0]
    assert game.board.cell(ROWS - 1, 1) == Player.ONE


def test_play_from_raw_bytes_with_replay():
    data = bytearray()
    keys = {R: b"\x1b[C", D: b"\r"}
    for command in VERTICAL_WIN:
        data += keys[command]
    data += b"\r" + b"\x1b[C\r" + b"\x11"
    source = iter(data)
    decoder = KeyDecoder()

    game = ConnectFourGame()
    game.play(lambda: read_command(lambda: next(source), decoder))

    assert game.scores[GameResult.PLAYER_ONE_WIN] == 1
    assert game.result == GameResult.IN_PROGRESS
    assert game.board.count_tokens() == 1
    assert game.board.cell(ROWS - 1, 1) == Player.ONE
