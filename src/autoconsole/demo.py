"""A small object graph to explore when no other target is given."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .members import display_name, show_in_console


class Species(Enum):
    DOG = "dog"
    CAT = "cat"
    FISH = "fish"


@dataclass
class Pet:
    name: str = field(metadata={"display_name": "Name", "show_in_console": True})
    species: Species = field(
        default=Species.DOG,
        metadata={"display_name": "Species", "show_in_console": True},
    )
    age: int = field(default=0, metadata={"display_name": "Age"})

    @show_in_console(name="Speak")
    def speak(self) -> str:
        sounds = {Species.DOG: "woof", Species.CAT: "meow", Species.FISH: "..."}
        return f"{self.name} says {sounds[self.species]}"

    def __str__(self) -> str:
        return self.name


class Person:
    def __init__(self, name: str, length: float, weight: float, pet: Optional[Pet] = None):
        self._name = name
        self._length = length
        self._weight = weight
        self._pet = pet
        self._friends: List[Person] = []

    @show_in_console(name="Name")
    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @display_name("Weight")
    @property
    def weight(self) -> float:
        return self._weight

    @weight.setter
    def weight(self, value: float) -> None:
        if value <= 0:
            raise ValueError("weight must be positive")
        self._weight = value

    @show_in_console(name="Length")
    @property
    def length(self) -> float:
        return self._length

    @length.setter
    def length(self, value: float) -> None:
        self._length = value

    @show_in_console(name="Pet")
    @property
    def pet(self) -> Optional[Pet]:
        return self._pet

    @pet.setter
    def pet(self, value: Optional[Pet]) -> None:
        self._pet = value

    @show_in_console(name="Friends")
    @property
    def friends(self) -> List[Person]:
        return self._friends

    @show_in_console(name="Say")
    def say(self, what_to_say: str) -> str:
        return what_to_say

    @show_in_console(name="Say")
    def say_times(self, times: int) -> str:
        return " ".join([self._name] * times)

    @show_in_console(name="SayTwoThings")
    def say_two_things(self, what_to_say: str, what_to_say_next: str) -> str:
        return f"{what_to_say} and {what_to_say_next}"

    @show_in_console(name="Jump")
    def jump(self) -> None:
        print(f"{self} jumped")

    @show_in_console(name="AddFriend")
    def add_friend(self, friend: Person) -> int:
        self._friends.append(friend)
        return len(self._friends)

    @show_in_console(name="Adopt")
    def adopt(self, name: str, species: Species = Species.DOG) -> Pet:
        self._pet = Pet(name, species)
        return self._pet

    def __str__(self) -> str:
        return self._name


def make_demo_person() -> Person:
    bart = Person("Bart", length=1.80, weight=83.2, pet=Pet("Rex", Species.DOG, 4))
    bart.add_friend(Person("Lisa", length=1.40, weight=35.0, pet=Pet("Snowball", Species.CAT, 2)))
    bart.add_friend(Person("Milhouse", length=1.45, weight=38.5))
    return bart
