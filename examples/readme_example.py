from dataclasses import dataclass

from encapsulate import applications, apply, behavior, configure_logging, with_behaviors


@behavior
class HasName:
    def name(self) -> str:
        return self._name

    def set_name(self, name: str):
        self._name = name
        return self


@behavior
class HasCareer:
    def career(self) -> str:
        return self._career

    def set_career(self, career: str):
        self._career = career
        return self


@behavior
class IsSelfDescribing:
    """Knows nothing about HasName or HasCareer internals, only their methods."""

    def description(self) -> str:
        return self.name() + " is a " + self.career()


@behavior
class KeepsDiary:
    def write(self, entry: str):
        self._entries = [*self._all(), self._stamp(entry)]
        return self

    def entries(self) -> list[str]:
        return list(self._all())

    # Private: bound on the context, never installed on the receiver
    def _all(self) -> list[str]:
        return getattr(self, "_entries", [])

    def _stamp(self, entry: str) -> str:
        return f"[{self.name()}] {entry}"


@with_behaviors(HasName, HasCareer, IsSelfDescribing)
class Person:
    pass


@dataclass
class Robot:
    serial: str


def main() -> None:
    configure_logging("DEBUG")

    r1 = Person().set_name("Michael Sam").set_career("Athlete")
    r2 = Person().set_name("Samantha Stephens").set_career("Thaumaturge")
    print(r1.description())
    print(r2.description())

    # Behaviors mix into single objects too
    robot = Robot("RX-78")
    apply(apply(robot, HasName), KeepsDiary)
    robot.set_name(robot.serial).write("Booted").write("Calibrated")
    print(robot.entries())

    for app in applications(Person):
        print(f"{app.slot_key}: {app.behavior} -> {', '.join(app.methods)}")


if __name__ == "__main__":
    main()
