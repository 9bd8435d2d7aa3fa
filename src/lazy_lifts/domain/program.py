"""Static workout program definition."""

from dataclasses import dataclass

DAYS: tuple[str, ...] = ("Mon", "Tue", "Thu", "Fri")
WEEKS: tuple[int, ...] = tuple(range(1, 9))


@dataclass(frozen=True)
class Exercise:
    """Single exercise prescription."""

    name: str
    sets: int
    target_reps: int


@dataclass(frozen=True, order=True)
class SessionKey:
    """Identifies a (week, day) slot in the program."""

    week: int
    day_index: int

    @classmethod
    def of(cls, week: int, day: str) -> "SessionKey":
        """Build a key from a week number and day label."""
        if week not in WEEKS or day not in DAYS:
            raise ValueError(f"Unknown session: week={week} day={day}")
        return cls(week=week, day_index=DAYS.index(day))

    @property
    def day(self) -> str:
        return DAYS[self.day_index]

    @property
    def week_label(self) -> str:
        return f"Wk {self.week}"

    def document_id(self, cycle: int) -> str:
        """Return the completion document id for this slot in a cycle."""
        return f"{self.week_label}-{self.day}-{cycle}"


@dataclass(frozen=True)
class WorkoutSession:
    """A scheduled workout with its exercise list."""

    key: SessionKey
    name: str
    exercises: tuple[Exercise, ...]


@dataclass(frozen=True)
class ProgramTemplate:
    """The full 8-week program, ordered by week then day."""

    sessions: tuple[WorkoutSession, ...]

    def __post_init__(self) -> None:
        keys = [session.key for session in self.sessions]
        if keys != sorted(keys) or len(set(keys)) != len(keys):
            raise ValueError("Program sessions must be unique and in program order")

    def keys(self) -> list[SessionKey]:
        return [session.key for session in self.sessions]

    def get(self, key: SessionKey) -> WorkoutSession:
        for session in self.sessions:
            if session.key == key:
                return session
        raise KeyError(key)

    def first(self) -> SessionKey:
        return self.sessions[0].key


def _sets(*rows: tuple[str, int, int]) -> tuple[Exercise, ...]:
    return tuple(
        Exercise(name=name, sets=sets, target_reps=reps) for name, sets, reps in rows
    )


EXERCISES: dict[str, tuple[Exercise, ...]] = {
    "Chest": _sets(
        ("Bench Press", 3, 10),
        ("Reverse-Grip Bench Press", 3, 10),
        ("Dumbell Flys", 3, 10),
    ),
    "Back": _sets(
        ("Bent-Over Barbell Row", 3, 10),
        ("Reverse Grip Pulldown", 3, 10),
        ("Straight-Arm Pulldown", 3, 10),
        ("Seated Cable Row", 3, 10),
    ),
    "Legs": _sets(
        ("Squat", 3, 10),
        ("Standing Calf Raise", 3, 20),
        ("Deadlift", 3, 10),
        ("Shrugs", 3, 10),
    ),
    "Shoulders": _sets(
        ("Barbell Shoulder Press", 3, 10),
        ("Dumbbell Front Raise", 3, 10),
        ("Dumbbell Lateral Raise", 3, 10),
        ("Dumbbell Bent Over Lateral Raise", 3, 10),
    ),
    "Arms A": _sets(
        ("Close-Grip Bench Press (Rest Pause)", 3, 5),
        ("Barbell Curls (Rest Pause)", 3, 5),
        ("Seated Dumbbell Overheard Extension", 3, 8),
        ("Preacher Curls", 3, 8),
        ("Tricep Pressdown", 3, 8),
        ("Hammer Curls", 3, 8),
    ),
    "Arms B": _sets(
        ("Lying Tricep Extension", 3, 20),
        ("Dumbbell Curl", 3, 20),
        ("Seated Dumbbell Overheard Extension", 3, 20),
        ("Dumbbell Preacher Curl", 3, 20),
        ("Tricep Pressdown", 3, 20),
        ("Dumbbell Hammer Curl", 3, 20),
    ),
    "Arms C": _sets(
        ("Tricep dips", 3, 0),
        ("Preacher Curls", 3, 25),
        ("Tricep Pressdown", 3, 25),
        ("High Cable Curls", 3, 25),
        ("Overhead Cable Tricep Extension", 3, 25),
        ("Behind-the-Back Cable Curls", 3, 25),
    ),
    "Arms D": _sets(
        ("Overhead Tricep Extensions", 3, 10),
        ("Standing Cable Concentration Curls", 3, 10),
        ("Tricep Pressdowns", 3, 10),
        ("Preacher Curls", 3, 10),
        ("Diamond Pushups", 3, 10),
        ("Hammer Curls", 3, 10),
    ),
    "Arms E": _sets(
        ("Close-Grip Bench Press (Rest Pause)", 4, 5),
        ("Barbell Curls (Rest Pause)", 4, 5),
        ("Tricep Pushdowns", 4, 5),
        ("Dumbbell Curls", 4, 5),
    ),
    "Arms A2": _sets(
        ("Close-Grip Bench Press (Rest Pause)", 3, 20),
        ("Barbell Curls (Rest Pause)", 3, 20),
        ("Seated Dumbbell Overheard Extension", 3, 20),
        ("Preacher Curls", 3, 20),
        ("Tricep Pressdown", 3, 20),
        ("Hammer Curls", 3, 20),
    ),
    "Arms B2": _sets(
        ("Lying Tricep Extension", 3, 30),
        ("Dumbbell Curl", 3, 30),
        ("Seated Dumbbell Overheard Extension", 3, 30),
        ("Dumbbell Preacher Curl", 3, 30),
        ("Tricep Pressdown", 3, 30),
        ("Dumbbell Hammer Curl", 3, 30),
    ),
    "Arms C2": _sets(
        ("Tricep dips", 3, 15),
        ("Preacher Curls", 3, 15),
        ("Tricep Pressdown", 3, 15),
        ("High Cable Curls", 3, 15),
        ("Overhead Cable Tricep Extension", 3, 15),
        ("Behind-the-Back Cable Curls", 3, 15),
    ),
    "Arms D2": _sets(
        ("Overhead Tricep Extensions", 3, 25),
        ("Standing Cable Concentration Curls", 3, 25),
        ("Tricep Pressdowns", 3, 25),
        ("Preacher Curls", 3, 25),
        ("Diamond Pushups", 3, 25),
        ("Hammer Curls", 3, 25),
    ),
    "Arms E2": _sets(
        ("Close-Grip Bench Press (Rest Pause)", 4, 10),
        ("Barbell Curls (Rest Pause)", 4, 10),
        ("Tricep Pushdowns", 4, 10),
        ("Dumbbell Curls", 4, 10),
    ),
}

# Muscle-group label per week, in DAYS order.
SCHEDULE: dict[int, tuple[str, str, str, str]] = {
    1: ("Chest", "Arms A", "Legs", "Back"),
    2: ("Shoulders", "Chest", "Arms B", "Legs"),
    3: ("Back", "Shoulders", "Chest", "Arms C"),
    4: ("Legs", "Back", "Shoulders", "Chest"),
    5: ("Arms D", "Legs", "Shoulders", "Back"),
    6: ("Chest", "Arms E", "Legs", "Arms A2"),
    7: ("Shoulders", "Arms B2", "Back", "Arms C2"),
    8: ("Chest", "Arms D2", "Legs", "Arms E2"),
}


def build_program(
    schedule: dict[int, tuple[str, str, str, str]] | None = None,
    exercises: dict[str, tuple[Exercise, ...]] | None = None,
) -> ProgramTemplate:
    """Build the program template from a schedule and exercise table."""
    resolved_schedule = schedule or SCHEDULE
    resolved_exercises = exercises or EXERCISES
    sessions = []
    for week in sorted(resolved_schedule):
        for day, label in zip(DAYS, resolved_schedule[week], strict=True):
            sessions.append(
                WorkoutSession(
                    key=SessionKey.of(week, day),
                    name=label,
                    exercises=resolved_exercises.get(label, ()),
                )
            )
    return ProgramTemplate(sessions=tuple(sessions))
