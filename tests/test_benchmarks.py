from tictactoe_ai.search import choose_move


def test_benchmark_choose_move_empty_board(benchmark):
    move = benchmark(choose_move, [0] * 9, 1, 2, 0.0)
    assert move == 0


def test_benchmark_choose_move_midgame(benchmark):
    board = [1, 0, 0, 0, 2, 0, 0, 0, 0]
    move = benchmark(choose_move, board, 1, 2, 0.0)
    assert board[move] == 0
