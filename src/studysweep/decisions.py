"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

decisions.py
DecisionProvider implementations.

- FixedDecisionProvider: the same answer every time (scripts, --yes, tests)
- ConsoleDecisionProvider: blocking prompts on stdin/stdout
"""
import sys
from typing import Callable, Optional, Sequence, TextIO

from studysweep.core.interfaces import DecisionProvider
from studysweep.core.models import Concern, LockedFileChoice, ReminderChoice
from studysweep.utils.convert_utils import ConvertUtils


class FixedDecisionProvider(DecisionProvider):
    """
    Answers every question the same way. The defaults are the safe ones:
    do not proceed, skip locked files, snooze reminders.
    """

    def __init__(
            self,
            proceed: bool = False,
            locked: LockedFileChoice = LockedFileChoice.SKIP,
            reminder: ReminderChoice = ReminderChoice.SNOOZE,
    ):
        self.proceed = proceed
        self.locked = locked
        self.reminder = reminder

    def confirm(self, subject: str, concern: Concern) -> bool:
        return self.proceed

    def resolve_locked(self, path: str) -> LockedFileChoice:
        return self.locked

    def resolve_reminder(self, snapshot: str, age_days: int, size_bytes: int) -> ReminderChoice:
        return self.reminder


class ConsoleDecisionProvider(DecisionProvider):
    """Interactive prompts. Blocks until the user answers."""

    PROMPTS = {
        Concern.CLOUD_SYNCED: "{subject} is in a cloud folder; removing it removes it from the cloud too. Proceed?",
        Concern.SOFT_PROTECTED: "{subject} is in a protected folder. Proceed?",
        Concern.PURGE_SNAPSHOTS: "Delete {subject}?",
    }

    def __init__(
            self,
            input_func: Callable[[str], str] = input,
            output: Optional[TextIO] = None,
    ):
        self._input = input_func
        self._output = output or sys.stdout

    def confirm(self, subject: str, concern: Concern) -> bool:
        question = self.PROMPTS[concern].format(subject=subject)
        answer = self._input(f"{question} [y/N]: ")
        return answer.strip().lower() in ("y", "yes")

    def resolve_locked(self, path: str) -> LockedFileChoice:
        print(f"{path} is open in another program", file=self._output)
        return self._choose(list(LockedFileChoice), default=LockedFileChoice.SKIP)

    def resolve_reminder(self, snapshot: str, age_days: int, size_bytes: int) -> ReminderChoice:
        print(f"Archive {snapshot} is {age_days} days old "
              f"({ConvertUtils.bytes_to_human(size_bytes)})", file=self._output)
        return self._choose(list(ReminderChoice), default=ReminderChoice.CLEAN)

    def _choose(self, options: Sequence, default):
        for idx, option in enumerate(options, 1):
            print(f"  {idx}. {option.display_name}", file=self._output)
        while True:
            answer = self._input(f"Choice [1-{len(options)}]: ").strip()
            if not answer:
                return default
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1]
            print("Please enter a number from the list.", file=self._output)
