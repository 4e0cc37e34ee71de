"""
Exceptions raised by the tic-tac-toe AI package.

Invalid moves are not exceptions: move application reports them through
its return value so the caller can re-prompt.
"""


class TicTacToeAIError(Exception):
    """Base class for all package errors."""


class EmptySearchResult(TicTacToeAIError):
    """
    Raised when a search finishes without any child of the root.

    This happens when the root state is already terminal, so there is
    no move to recommend. Callers are expected to handle it.
    """


class AdapterContractViolation(TicTacToeAIError):
    """
    Raised when a game adapter breaks its contract.

    For example, asking for the terminal reward of a state that is not
    terminal. This indicates a bug in the adapter and aborts the search.
    """
