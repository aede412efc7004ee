"""Random permutation helpers used for choice order and question selection."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

from exam_app.core.models import Question, ShuffledQuestion

T = TypeVar("T")


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a new list holding ``items`` in a uniformly random order.

    ``random.Random.shuffle`` is an in-place Fisher-Yates shuffle; it runs on a
    copy so the input is never modified. Pass ``rng`` to control the random
    source, otherwise the module-level generator is used.
    """
    shuffled = list(items)
    (rng or random).shuffle(shuffled)
    return shuffled


def shuffle_choices(question: Question, rng: random.Random | None = None) -> ShuffledQuestion:
    """Randomize the choice order of ``question`` and record where each choice landed."""
    indices = list(range(len(question.choices)))
    shuffled_indices = shuffle(indices, rng)

    original_to_shuffled = [0] * len(indices)
    for shuffled_position, original_index in enumerate(shuffled_indices):
        original_to_shuffled[original_index] = shuffled_position

    return ShuffledQuestion(
        question=question,
        shuffled_choices=tuple(question.choices[i] for i in shuffled_indices),
        original_to_shuffled_map=tuple(original_to_shuffled),
    )
