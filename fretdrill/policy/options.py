from __future__ import annotations

"""Answer-option builder for a drilled note."""

import random
from dataclasses import dataclass
from typing import List, Optional

from ..theory.focus import allowed_labels
from ..theory.keys import normalize_name
from ..theory.scale import KeyContext

DEFAULT_DISTRACTORS = 4
REDUCED_DISTRACTORS = 1


@dataclass(frozen=True)
class ChoicePolicy:
    """Either full recall of the allowed pool or ``distractors`` wrong answers."""

    full_recall: bool = False
    distractors: int = DEFAULT_DISTRACTORS

    @classmethod
    def for_difficulty(cls, difficulty: str, fewer_choices: bool = False) -> "ChoicePolicy":
        if fewer_choices:
            return cls(full_recall=False, distractors=REDUCED_DISTRACTORS)
        if difficulty == "HARD":
            return cls(full_recall=True)
        return cls(full_recall=False, distractors=DEFAULT_DISTRACTORS)


def build_options(
    target: str,
    focus: str = "ALL",
    key: Optional[KeyContext] = None,
    policy: Optional[ChoicePolicy] = None,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Shuffled answer labels containing ``target`` exactly once.

    With no distractors available the result is just ``[target]``.
    """
    policy = policy or ChoicePolicy()
    rng = rng or random.Random()
    target = normalize_name(target)
    pool = allowed_labels(focus, key)
    candidates = [n for n in pool if n != target]

    if policy.full_recall:
        options = candidates + [target]
        rng.shuffle(options)
        return options

    rng.shuffle(candidates)
    k = max(0, min(int(policy.distractors), len(candidates)))
    options = candidates[:k] + [target]
    rng.shuffle(options)
    return options
