"""Bank accounts and hand-written log doubles used by the examples."""

from __future__ import annotations

import collections
import typing as t


class BankAccount:
    """Balance tracker without collaborators."""

    def __init__(self, starting_balance: int) -> None:
        self.balance = starting_balance

    def deposit(self, amount: int) -> None:
        """Add *amount*; negative amounts are rejected."""
        if amount < 0:
            msg = "amount must not be negative"
            raise ValueError(msg)
        self.balance += amount

    def withdraw(self, amount: int) -> bool:
        """Remove *amount* if the balance covers it."""
        if self.balance >= amount:
            self.balance -= amount
            return True
        return False


class ILog(t.Protocol):
    """Sink for account activity messages."""

    def write(self, message: str) -> bool: ...


class LoggedBankAccount:
    """Account that only accepts deposits its log acknowledges."""

    def __init__(self, log: ILog, balance: int = 0) -> None:
        self.balance = balance
        self._log = log

    def deposit(self, amount: int) -> None:
        """Add *amount* once the log has written the deposit."""
        if amount < 0:
            msg = "amount must not be negative"
            raise ValueError(msg)
        if self._log.write(f"Depositing {amount:.2f}"):
            self.balance += amount


class UnloggedBankAccount:
    """Account holding a log it never consults."""

    def __init__(self, log: ILog, balance: int = 0) -> None:
        self.balance = balance
        self._log = log

    def deposit(self, amount: int) -> None:
        """Add *amount*."""
        if amount < 0:
            msg = "amount must not be negative"
            raise ValueError(msg)
        self.balance += amount


class ConsoleLog:
    """Real log writing to standard output."""

    def write(self, message: str) -> bool:
        print(message)  # noqa: T201 - the console is this log's sink
        return True


class NullLog:
    """Fake: accepts every message and does nothing."""

    def write(self, message: str) -> bool:
        del message
        return True


class NullLogWithResult:
    """Stub: answers every write with a canned result."""

    def __init__(self, expected_result: bool) -> None:
        self._expected_result = expected_result

    def write(self, message: str) -> bool:
        del message
        return self._expected_result


class LogMock:
    """Hand-written mock counting calls per method."""

    def __init__(self, expected_result: bool) -> None:
        self._expected_result = expected_result
        self.method_call_count: collections.Counter[str] = collections.Counter()

    def write(self, message: str) -> bool:
        del message
        self.method_call_count["write"] += 1
        return self._expected_result
