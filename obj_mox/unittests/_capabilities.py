"""Capabilities and collaborators shared by the unit tests."""

from __future__ import annotations

import abc
import typing as t

from obj_mox import Event, Ref


class Bar:
    """Value passed by identity."""


class IBaz(t.Protocol):
    """Capability with a single read-only property."""

    @property
    def name(self) -> str: ...


class IFoo(t.Protocol):
    """Capability exercising methods, properties and nested capabilities."""

    name: str
    some_other_property: int

    @property
    def some_baz(self) -> IBaz: ...

    def do_something(self, value: str) -> bool: ...

    def process_string(self, value: str) -> str: ...

    def try_parse(self, value: str, output: Ref[str]) -> bool: ...

    def submit(self, bar: Bar) -> bool: ...

    def get_count(self) -> int: ...

    def add(self, amount: int) -> bool: ...

    def greet(self, name: str, greeting: str = "hello") -> str: ...


class IAnimal(t.Protocol):
    """Capability declaring events."""

    falls_ill = Event(sender=True)
    abducted_by_aliens = Event()

    def stumble(self) -> None: ...


class Person(abc.ABC):
    """Abstract class with protected members."""

    @property
    def _ssn(self) -> int:
        return 0

    @abc.abstractmethod
    def _execute(self, cmd: str) -> None: ...

    def run(self, cmd: str) -> None:
        self._execute(cmd)


class Doctor:
    """Subscribes to an animal's events and counts them."""

    def __init__(self, animal: IAnimal) -> None:
        self.times_cured = 0
        self.abductions_observed = 0
        self.last_sender: object = None
        animal.falls_ill.subscribe(self._cure)
        animal.abducted_by_aliens.subscribe(self._observe_abduction)

    def _cure(self, sender: object, args: object) -> None:
        del args
        self.last_sender = sender
        self.times_cured += 1

    def _observe_abduction(self, galaxy: int, returned: bool) -> None:
        del galaxy, returned
        self.abductions_observed += 1


class Consumer:
    """Uses an :class:`IFoo` the way production code would."""

    def __init__(self, foo: IFoo) -> None:
        self.foo = foo

    def hello(self) -> None:
        self.foo.do_something("ping")
        _ = self.foo.name
        self.foo.some_other_property = 123
