#!/usr/bin/env python
"""
Interactive tic-tac-toe game against the MCTS agent.

Example usage:
    python play_game.py --iterations 5000
    python play_game.py --second --verbose
"""
from tictactoe_ai.play import main


if __name__ == "__main__":
    raise SystemExit(main())
